"""
Fixtures compartidas por los tests de todos los módulos

Los tests usan SQLite en memoria: DATABASE_URL se fija antes de importar
la aplicación.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from app.database.database import Base, SessionLocal, get_db, sync_engine
from app.main import app
from app.modules.employees.models import Empleado
from app.modules.menu.models import MenuItem


# ===== FIXTURES =====

@pytest.fixture
def db_session():
    """Sesión sobre una base limpia para cada test"""
    Base.metadata.create_all(bind=sync_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=sync_engine)


@pytest.fixture
def client(db_session):
    """Cliente HTTP que comparte la sesión del test"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sandwich(db_session):
    item = MenuItem(
        id="sanduches-0",
        codigo="sanduches-pollo-0001",
        nombre="Sándwich de pollo",
        precio=13333,
        categoria="Sándwiches",
        keywords="pollo pan",
        inventario_categoria="No inventariables",
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def bowl(db_session):
    item = MenuItem(
        id="bowlssalados-0",
        codigo="bowls-salados-bowl-salado-0001",
        nombre="Bowl salado",
        precio=22000,
        categoria="Bowls salados",
        inventario_categoria="No inventariables",
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def bebida(db_session):
    item = MenuItem(
        id="bebidas-0",
        codigo="bebidas-limonada-0001",
        nombre="Limonada de coco",
        precio=8500,
        categoria="Bebidas",
        stock=10,
        inventario_categoria="Inventariables",
        inventario_tipo="cantidad",
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def empleado(db_session):
    empleado = Empleado(
        nombre="Laura Gómez",
        telefono="3001234567",
        horas_dia=8,
        dias_semana=5,
        salario_hora=7000,
        activo=True,
    )
    db_session.add(empleado)
    db_session.commit()
    db_session.refresh(empleado)
    return empleado
