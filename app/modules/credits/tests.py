"""
Tests para el libro de crédito de empleados
"""

from datetime import datetime
from types import SimpleNamespace

from app.modules.credits.models import CreditEntryType
from app.modules.credits.service import CreditService, build_credit_records


def entry(empleado_id, monto, tipo, minute, nombre="Laura"):
    return SimpleNamespace(
        id=f"{empleado_id}-{minute}",
        empleado_id=empleado_id,
        empleado=SimpleNamespace(nombre=nombre),
        order_id=None,
        order_numero=None,
        monto=monto,
        tipo=tipo.value,
        timestamp=datetime(2025, 3, 1, 12, minute),
    )


class TestBuildCreditRecords:
    """Tests del cálculo de saldos"""

    def test_running_balance_and_history_order(self):
        records = build_credit_records([
            entry("a", 10000, CreditEntryType.CARGO, 0),
            entry("a", 4000, CreditEntryType.ABONO, 5),
            entry("a", 2500, CreditEntryType.CARGO, 10),
        ])
        assert len(records) == 1
        record = records[0]
        assert record["total"] == 8500
        assert [item["balance_after"] for item in record["history"]] == [8500, 6000, 10000]
        assert record["history"][0]["tipo"] == CreditEntryType.CARGO

    def test_records_sorted_by_balance(self):
        records = build_credit_records([
            entry("a", 1000, CreditEntryType.CARGO, 0, "Ana"),
            entry("b", 9000, CreditEntryType.CARGO, 1, "Beto"),
        ])
        assert [record["empleado_nombre"] for record in records] == ["Beto", "Ana"]


class TestCreditService:
    """Tests del servicio de crédito"""

    def test_ignores_invalid_movements(self, db_session, empleado):
        credit_service = CreditService(db_session)
        assert credit_service.add_employee_credit(None, 5000) is None
        assert credit_service.add_employee_credit(empleado.id, 0) is None
        assert credit_service.settle_employee_credit_balance(empleado.id, -100) is None
        assert credit_service.fetch_employee_credits() == []

    def test_charge_and_settle(self, db_session, empleado):
        credit_service = CreditService(db_session)
        credit_service.add_employee_credit(empleado.id, 12000.4, order_numero=1001)
        credit_service.settle_employee_credit_balance(empleado.id, 2000)
        records = credit_service.fetch_employee_credits()
        assert records[0]["empleado_nombre"] == "Laura Gómez"
        assert records[0]["total"] == 10000


class TestCreditEndpoints:
    """Tests de los endpoints de crédito"""

    def test_direct_payment(self, client, empleado):
        response = client.post("/api/v1/credits/employees/payments", json={"empleado_id": empleado.id, "monto": 3000})
        assert response.status_code == 201

        response = client.get("/api/v1/credits/employees")
        assert response.status_code == 200
        data = response.json()
        assert data[0]["total"] == -3000
        assert data[0]["history"][0]["tipo"] == "abono"

    def test_direct_payment_unknown_employee(self, client):
        response = client.post("/api/v1/credits/employees/payments", json={"empleado_id": "no-existe", "monto": 3000})
        assert response.status_code == 404
