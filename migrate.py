#!/usr/bin/env python3
"""
Script para gestionar las migraciones de la base de Savia con Alembic.

En desarrollo y pruebas las tablas se crean con create_all al iniciar la
API; en producción el esquema se maneja solo con estas migraciones.
"""
import sys
from pathlib import Path

# Agregar el directorio raíz al path
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

from alembic.config import Config
from alembic import command
from app.core.config import settings

ACTIONS = {
    "create": "Crear migración (requiere mensaje)",
    "upgrade": "Ejecutar migraciones pendientes",
    "downgrade": "Rollback de la última migración",
    "history": "Ver historial",
    "current": "Ver migración actual",
}


def get_alembic_config() -> Config:
    """Configuración de Alembic apuntando a la base configurada en settings."""
    alembic_cfg = Config(str(root_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root_dir / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg


def create_migration(message: str):
    command.revision(get_alembic_config(), autogenerate=True, message=message)
    print(f"Migración creada: {message}")


def run_migrations():
    command.upgrade(get_alembic_config(), "head")
    print("Migraciones ejecutadas exitosamente")


def rollback_migration():
    command.downgrade(get_alembic_config(), "-1")
    print("Rollback ejecutado exitosamente")


def print_usage():
    print("Uso:")
    for action, description in ACTIONS.items():
        suffix = " 'mensaje'" if action == "create" else ""
        print(f"  python migrate.py {action}{suffix:<12} # {description}")


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in ACTIONS:
        if len(sys.argv) >= 2:
            print(f"Acción desconocida: {sys.argv[1]}")
        print_usage()
        sys.exit(1)

    action = sys.argv[1]

    if action == "create":
        if len(sys.argv) < 3:
            print("Error: Se requiere un mensaje para la migración")
            sys.exit(1)
        create_migration(sys.argv[2])
    elif action == "upgrade":
        run_migrations()
    elif action == "downgrade":
        rollback_migration()
    elif action == "history":
        command.history(get_alembic_config())
    elif action == "current":
        command.current(get_alembic_config())
