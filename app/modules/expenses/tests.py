"""
Tests para el módulo de Gastos
"""

from datetime import date

import pytest
from fastapi import HTTPException

from app.modules.expenses.schemas import GastoCreate, GastoUpdate, normalize_expense_method
from app.modules.expenses.service import ExpenseService
from app.modules.payments.schemas import PaymentMethod


class TestExpenseMethod:
    """Tests de normalización del método de pago"""

    def test_known_methods(self):
        assert normalize_expense_method("nequi") == PaymentMethod.NEQUI
        assert normalize_expense_method("provision_caja") == PaymentMethod.PROVISION_CAJA

    def test_unknown_method_is_cash(self):
        assert normalize_expense_method("credito_empleados") == PaymentMethod.EFECTIVO
        assert normalize_expense_method(None) == PaymentMethod.EFECTIVO
        assert GastoCreate(descripcion="Hielo", monto=5000, fecha=date(2025, 3, 1), metodo_pago="cheque") \
            .metodo_pago == PaymentMethod.EFECTIVO


class TestExpenseService:
    """Tests del servicio de gastos"""

    def test_fetch_by_range_newest_first(self, db_session):
        expense_service = ExpenseService(db_session)
        for day in (1, 3, 2):
            expense_service.create_gasto(GastoCreate(
                descripcion=f"Compra {day}", monto=1000 * day, categoria="Insumos", fecha=date(2025, 3, day)
            ))

        gastos = expense_service.fetch_gastos()
        assert [gasto.fecha.day for gasto in gastos] == [3, 2, 1]

        in_range = expense_service.fetch_gastos(date(2025, 3, 2), date(2025, 3, 3))
        assert [gasto.descripcion for gasto in in_range] == ["Compra 3", "Compra 2"]

    def test_update_and_delete(self, db_session):
        expense_service = ExpenseService(db_session)
        gasto = expense_service.create_gasto(GastoCreate(descripcion="Gas", monto=45000, fecha=date(2025, 3, 1)))
        updated = expense_service.update_gasto(gasto.id, GastoUpdate(monto=47000, metodo_pago="tarjeta"))
        assert updated.monto == 47000
        assert updated.metodo_pago == "tarjeta"

        expense_service.delete_gasto(gasto.id)
        with pytest.raises(HTTPException) as exc_info:
            expense_service.get_gasto(gasto.id)
        assert exc_info.value.status_code == 404


class TestExpenseEndpoints:
    """Tests de los endpoints de gastos"""

    def test_create_and_list(self, client):
        response = client.post("/api/v1/expenses/", json={
            "descripcion": "Servilletas", "monto": 12000, "categoria": "Insumos",
            "fecha": "2025-03-01", "metodo_pago": "desconocido"
        })
        assert response.status_code == 201
        assert response.json()["metodo_pago"] == "efectivo"

        data = client.get("/api/v1/expenses/", params={"date_from": "2025-03-01"}).json()
        assert data["total"] == 1
        assert data["total_monto"] == 12000

    def test_negative_amount_rejected(self, client):
        response = client.post("/api/v1/expenses/", json={"descripcion": "X", "monto": -1, "fecha": "2025-03-01"})
        assert response.status_code == 422
