"""
Tests para el balance diario
"""

from datetime import date, datetime

from app.modules.balance.service import compute_daily_balance
from app.modules.expenses.schemas import GastoCreate
from app.modules.expenses.service import ExpenseService
from app.modules.orders.schemas import OrderCreate
from app.modules.orders.service import OrderService


def order(total, day, allocations=None, **extra):
    return {
        "total": total,
        "timestamp": datetime(2025, 3, day, 12, 0),
        "payment_allocations": allocations or [],
        **extra,
    }


class TestComputeDailyBalance:
    """Tests del cálculo de balance"""

    def test_only_paid_orders_count(self):
        result = compute_daily_balance([
            order(25000, 1, [{"metodo": "efectivo", "monto": 20000}, {"metodo": "nequi", "monto": 5000}]),
            order(10000, 1, [{"metodo": "tarjeta", "monto": 4000}]),
        ], [])
        assert len(result) == 1
        assert result[0]["ingresos_totales"] == 25000
        assert result[0]["ingresos_efectivo"] == 20000
        assert result[0]["ingresos_nequi"] == 5000
        assert result[0]["ingresos_tarjeta"] == 0

    def test_legacy_pair_counts_as_income(self):
        result = compute_daily_balance([order(8000, 2, metodo_pago="tarjeta", payment_status="pagado")], [])
        assert result[0]["ingresos_tarjeta"] == 8000

    def test_expenses_and_running_balances(self):
        orders = [
            order(30000, 1, [{"metodo": "efectivo", "monto": 30000}]),
            order(12000, 2, [{"metodo": "nequi", "monto": 12000}]),
        ]
        gastos = [
            {"fecha": date(2025, 3, 1), "monto": 10000, "metodo_pago": "efectivo"},
            {"fecha": date(2025, 3, 2), "monto": 5000, "metodo_pago": "cheque"},
            {"fecha": date(2025, 3, 3), "monto": 2000, "metodo_pago": "provision_caja"},
        ]
        result = compute_daily_balance(orders, gastos)
        assert [day["fecha"] for day in result] == [date(2025, 3, 3), date(2025, 3, 2), date(2025, 3, 1)]

        first, second, third = reversed(result)
        assert first["balance_diario"] == 20000
        assert first["saldo_efectivo_dia"] == 20000
        assert second["egresos_efectivo"] == 5000
        assert second["saldo_efectivo_dia"] == -5000
        assert second["saldo_total_acumulado"] == 27000
        assert second["saldo_efectivo_acumulado"] == 15000
        assert second["saldo_nequi_acumulado"] == 12000
        assert third["egresos_totales"] == 2000
        assert third["saldo_efectivo_dia"] == 0
        assert third["saldo_total_acumulado"] == 25000

    def test_empty(self):
        assert compute_daily_balance([], []) == []


class TestBalanceEndpoint:
    """Tests del endpoint de balance"""

    def test_range_keeps_running_totals(self, client, db_session):
        order_service = OrderService(db_session)
        order_service.create_order(OrderCreate(
            total=20000, timestamp=datetime(2025, 3, 1, 10, 0),
            payment_allocations=[{"metodo": "efectivo", "monto": 20000}]
        ))
        order_service.create_order(OrderCreate(
            total=9000, timestamp=datetime(2025, 3, 2, 10, 0),
            payment_allocations=[{"metodo": "tarjeta", "monto": 9000}]
        ))
        ExpenseService(db_session).create_gasto(GastoCreate(descripcion="Hielo", monto=3000, fecha=date(2025, 3, 2)))

        response = client.get("/api/v1/balance/", params={"date_from": "2025-03-02"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        day = data["dias"][0]
        assert day["fecha"] == "2025-03-02"
        assert day["balance_diario"] == 6000
        assert day["saldo_total_acumulado"] == 26000
        assert day["saldo_efectivo_acumulado"] == 17000
