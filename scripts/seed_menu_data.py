"""
Seed script: Populate a Savia development database with the menu and demo data.

What it creates:
- Menu items by section (ids "<seccion>-<indice>", e.g. sanduches-0, bowlssalados-0).
- Employees (3) with default schedules.
- Orders (N, default 40) across the last days, paid with mixed methods or left pending.
- Gastos (expenses) for the same days.

Run inside the API container to use 'postgres' host and project PYTHONPATH:
    docker compose exec api python scripts/seed_menu_data.py --orders 40 --days 7

Note: This is intended for development environments only.
"""

# Add project root (/code) to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from datetime import date, datetime, timedelta

from app.database.database import Base, SessionLocal, sync_engine
from app.modules.employees.models import Empleado
from app.modules.expenses.schemas import GastoCreate
from app.modules.expenses.service import ExpenseService
from app.modules.menu.models import MenuItem
from app.modules.menu.schemas import MenuItemCreate
from app.modules.menu.service import MenuService
from app.modules.orders.schemas import OrderCreate, OrderItemIn
from app.modules.orders.service import OrderService


MENU_SECTIONS = [
    ("sanduches", "Sándwiches", [
        ("Jamón artesano", 18500, "jamón de cerdo miel de uvilla rúgula parmesano"),
        ("Del huerto", 15500, "champiñones queso feta arracacha semillas"),
        ("Pollo Green", 16500, "jamón de pollo guacamole tocineta"),
        ("Pollo Toscano", 18500, "jamón de pollo champiñones tocineta"),
        ("Mexicano", 19000, "pollo desmechado guacamole pico de gallo"),
    ]),
    ("calientes", "Bebidas calientes", [
        ("Capuccino", 6000, "capuccino"),
        ("Latte", 5500, "latte"),
        ("Americano", 5500, "americano"),
        ("Matcha latte", 10000, "matcha latte"),
    ]),
    ("acompanamientos", "Acompañamientos", [
        ("Torta del día", 8000, "torta del día"),
        ("Galletas de avena", 4500, "galletas de avena"),
    ]),
    ("bowls", "Bowls", [
        ("Açaí supremo", 18500, "açaí"),
        ("Tropical", 12000, "tropical mango piña"),
    ]),
    ("bowlssalados", "Bowls salados", [
        ("Bowl salado", 22000, "bowl salado arroz pasta quinua proteína"),
    ]),
    ("frias", "Bebidas frías", [
        ("Ice matcha latte", 12500, "ice matcha latte"),
        ("Limonada azul", 12500, "limonada azul"),
    ]),
]

EMPLOYEES = [
    ("Laura Gómez", 8, 5, 7000),
    ("Andrés Rojas", 6, 6, 6500),
    ("Camila Torres", 4, 3, 6500),
]

EXPENSES = [
    ("Leche y yogurt", "Insumos", 45000),
    ("Hielo", "Insumos", 8000),
    ("Gas", "Servicios", 60000),
    ("Empaques", "Insumos", 32000),
]


def pick(seq):
    return random.choice(seq)


def seed_menu(db):
    menu_service = MenuService(db)
    items = []
    for section_id, titulo, entries in MENU_SECTIONS:
        for index, (nombre, precio, keywords) in enumerate(entries):
            item_id = f"{section_id}-{index}"
            existing = db.get(MenuItem, item_id)
            if existing:
                items.append(existing)
                continue
            items.append(menu_service.create_menu_item(MenuItemCreate(
                id=item_id,
                nombre=nombre,
                precio=precio,
                keywords=keywords,
                categoria=titulo,
                stock=random.randint(10, 60),
            )))
    return items


def seed_employees(db):
    empleados = []
    for nombre, horas_dia, dias_semana, salario_hora in EMPLOYEES:
        existing = db.query(Empleado).filter(Empleado.nombre == nombre).first()
        if existing:
            empleados.append(existing)
            continue
        empleado = Empleado(
            nombre=nombre, horas_dia=horas_dia, dias_semana=dias_semana, salario_hora=salario_hora, activo=True
        )
        db.add(empleado)
        empleados.append(empleado)
    db.commit()
    return empleados


def split_payment(total):
    """Pago en un solo método o repartido entre dos."""
    methods = ["efectivo", "nequi", "tarjeta"]
    if random.random() < 0.7:
        return [{"metodo": pick(methods), "monto": total}]
    first, second = random.sample(methods, 2)
    part = (total * random.randint(2, 8) // 10) // 100 * 100
    return [{"metodo": first, "monto": part}, {"metodo": second, "monto": total - part}]


def seed_orders(db, menu_items, empleados, count: int, days: int):
    order_service = OrderService(db)
    sellable = [item for item in menu_items if item.id != "bowlssalados-0"]
    today = date.today()
    created = 0
    for _ in range(count):
        day = today - timedelta(days=random.randint(0, max(days - 1, 0)))
        timestamp = datetime.combine(day, datetime.min.time()) + timedelta(minutes=random.randint(7 * 60, 19 * 60))
        lines = []
        for item in random.sample(sellable, random.randint(1, 3)):
            lines.append(OrderItemIn(
                menu_item_id=item.id,
                cantidad=random.randint(1, 2),
                student_discount=item.categoria == "Sándwiches" and random.random() < 0.2,
            ))
        order = order_service.create_order(OrderCreate(items=lines, timestamp=timestamp))

        roll = random.random()
        if roll < 0.75:
            order_service.record_order_payment(order.id, split_payment(order.total))
        elif roll < 0.85 and empleados:
            order_service.assign_order_credit(order.id, employee_id=pick(empleados).id)
        created += 1
    return created


def seed_expenses(db, days: int):
    expense_service = ExpenseService(db)
    today = date.today()
    for offset in range(days):
        descripcion, categoria, monto = pick(EXPENSES)
        expense_service.create_gasto(GastoCreate(
            descripcion=descripcion,
            categoria=categoria,
            monto=monto,
            fecha=today - timedelta(days=offset),
            metodo_pago=pick(["efectivo", "nequi", "tarjeta", "provision_caja"]),
        ))


def main():
    parser = argparse.ArgumentParser(description="Seed Savia menu and demo data")
    parser.add_argument("--orders", type=int, default=40)
    parser.add_argument("--days", type=int, default=7)
    parser.add_argument("--menu-only", action="store_true")
    args = parser.parse_args()

    Base.metadata.create_all(bind=sync_engine)
    db = SessionLocal()
    try:
        menu_items = seed_menu(db)
        print(f"Menu: {len(menu_items)} items")
        if args.menu_only:
            return

        empleados = seed_employees(db)
        print(f"Employees: {len(empleados)}")
        created = seed_orders(db, menu_items, empleados, args.orders, args.days)
        print(f"Orders: {created}")
        seed_expenses(db, args.days)
        print(f"Gastos: {args.days}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
