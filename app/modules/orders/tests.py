"""
Tests para el módulo de Órdenes

Cubre:
- Creación con total calculado por el motor de precios
- Registro de pagos mixtos con holgura de ±1 peso
- Crédito de empleados: asignación y liquidación
- Edición de líneas (reinicia el pago) y ciclo de estados
- Importación de registros heredados
"""

from datetime import datetime

import pytest
from fastapi import HTTPException

from app.modules.credits.service import CreditService
from app.modules.orders.models import OrderStatus
from app.modules.orders.schemas import OrderCreate, OrderFilters, OrderItemIn, OrderUpdate
from app.modules.orders.service import OrderService, normalize_settlement_method, order_to_response
from app.modules.payments.schemas import PaymentMethod, PaymentStatus


# ===== FIXTURES =====

@pytest.fixture
def order_service(db_session):
    return OrderService(db_session)


@pytest.fixture
def open_order(order_service):
    """Orden sin líneas por 25.000 y sin pagos"""
    return order_service.create_order(OrderCreate(numero=1234, total=25000))


def employee_balance(db_session, empleado_id):
    records = CreditService(db_session).fetch_employee_credits()
    return next((record["total"] for record in records if record["empleado_id"] == empleado_id), 0)


class TestCreateOrder:
    """Tests de creación de órdenes"""

    def test_total_from_lines_with_student_discount(self, order_service, sandwich, bebida):
        order = order_service.create_order(OrderCreate(items=[
            OrderItemIn(menu_item_id=sandwich.id, cantidad=1, student_discount=True),
            OrderItemIn(menu_item_id=bebida.id, cantidad=1),
        ]))
        assert order.total == 20500
        assert [line.precio_unitario for line in order.items] == [13333, 8500]
        assert 1000 <= order.numero <= 9999
        assert order.estado == OrderStatus.PENDIENTE.value

    def test_total_is_normalized(self, order_service, bebida):
        order = order_service.create_order(OrderCreate(items=[
            OrderItemIn(menu_item_id=bebida.id, cantidad=1, precio_unitario=12050),
        ]))
        assert order.total == 12100

    def test_missing_menu_item(self, order_service):
        with pytest.raises(HTTPException) as exc_info:
            order_service.create_order(OrderCreate(items=[OrderItemIn(menu_item_id="no-existe", cantidad=1)]))
        assert exc_info.value.status_code == 404

    def test_initial_mixed_payment(self, client):
        response = client.post("/api/v1/orders/", json={
            "total": 25000,
            "payment_allocations": [
                {"metodo": "efectivo", "monto": 20000},
                {"metodo": "nequi", "monto": 5000},
                {"metodo": "efectivo", "monto": 0},
            ],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["payment_status"] == "pagado"
        assert data["is_paid"] is True
        assert data["payment_state"] == "paid"
        assert data["metodo_pago"] == "efectivo"
        assert data["payment_summary"] == "Efectivo: $20.000 · Nequi: $5.000"

    def test_zero_total_counts_as_paid(self, order_service):
        order = order_service.create_order(OrderCreate())
        assert order.total == 0
        assert order.payment_status == PaymentStatus.PAGADO.value


class TestRecordPayment:
    """Tests de registro de pagos"""

    def test_within_tolerance_is_paid(self, order_service, open_order):
        order = order_service.record_order_payment(open_order.id, [{"metodo": "tarjeta", "monto": 24999}])
        assert order.payment_status == PaymentStatus.PAGADO.value
        assert order.metodo_pago == PaymentMethod.TARJETA.value

    def test_partial_payment_stays_pending(self, order_service, open_order):
        order = order_service.record_order_payment(open_order.id, [{"metodo": "tarjeta", "monto": 24000}])
        assert order.payment_status == PaymentStatus.PENDIENTE.value
        summary = order_service.get_payment_summary(order.id)
        assert summary["paid_total"] == 24000
        assert summary["pending_amount"] == 1000

    def test_empty_allocations_rejected(self, order_service, open_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.record_order_payment(open_order.id, [{"metodo": "bitcoin", "monto": 25000}])
        assert exc_info.value.status_code == 422
        assert exc_info.value.detail == "Debe seleccionar al menos un método de pago."

    def test_repeated_methods_are_merged(self, order_service, open_order):
        order = order_service.record_order_payment(open_order.id, [
            {"metodo": "efectivo", "monto": 10000},
            {"metodo": "efectivo", "monto": 15000},
        ])
        assert [(entry.metodo, entry.monto) for entry in order.payment_allocations] == [("efectivo", 25000)]

    def test_employee_credit_allocation_charges_ledger(self, db_session, order_service, open_order, empleado):
        order_service.record_order_payment(open_order.id, [
            {"metodo": "efectivo", "monto": 15000},
            {"metodo": "credito_empleados", "monto": 10000, "empleado_id": empleado.id},
        ])
        assert employee_balance(db_session, empleado.id) == 10000

    def test_paid_order_rejects_second_payment(self, db_session, order_service, open_order, empleado):
        allocations = [
            {"metodo": "efectivo", "monto": 15000},
            {"metodo": "credito_empleados", "monto": 10000, "empleado_id": empleado.id},
        ]
        order_service.record_order_payment(open_order.id, allocations)
        with pytest.raises(HTTPException) as exc_info:
            order_service.record_order_payment(open_order.id, allocations)
        assert exc_info.value.status_code == 409
        assert employee_balance(db_session, empleado.id) == 10000

    def test_replacing_partial_payment_reverses_credit(self, db_session, order_service, open_order, empleado):
        order_service.record_order_payment(open_order.id, [
            {"metodo": "credito_empleados", "monto": 10000, "empleado_id": empleado.id},
        ])
        order = order_service.record_order_payment(open_order.id, [
            {"metodo": "efectivo", "monto": 20000},
            {"metodo": "credito_empleados", "monto": 5000, "empleado_id": empleado.id},
        ])
        assert order.payment_status == PaymentStatus.PAGADO.value
        assert employee_balance(db_session, empleado.id) == 5000

    def test_credit_pending_order_must_be_settled(self, db_session, order_service, open_order, empleado):
        order_service.assign_order_credit(open_order.id, employee_id=empleado.id)
        with pytest.raises(HTTPException) as exc_info:
            order_service.record_order_payment(open_order.id, [{"metodo": "efectivo", "monto": 25000}])
        assert exc_info.value.status_code == 409
        assert order_service.get_order(open_order.id).has_credit
        assert employee_balance(db_session, empleado.id) == 25000

    def test_credit_allocation_unknown_employee(self, db_session, order_service, open_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.record_order_payment(open_order.id, [
                {"metodo": "credito_empleados", "monto": 25000, "empleado_id": "no-existe"},
            ])
        assert exc_info.value.status_code == 404
        assert CreditService(db_session).fetch_employee_credits() == []
        assert order_service.get_order(open_order.id).payment_allocations == []

    def test_endpoint_rejects_mismatch(self, client, open_order):
        response = client.post(f"/api/v1/orders/{open_order.id}/payment", json={
            "allocations": [{"metodo": "tarjeta", "monto": 24000}]
        })
        assert response.status_code == 422

    def test_endpoint_allows_partial(self, client, open_order):
        response = client.post(f"/api/v1/orders/{open_order.id}/payment", json={
            "allocations": [{"metodo": "tarjeta", "monto": 24000}],
            "allow_partial": True
        })
        assert response.status_code == 200
        assert response.json()["payment_status"] == "pendiente"

    def test_payment_summary_endpoint(self, client, open_order):
        client.post(f"/api/v1/orders/{open_order.id}/payment", json={
            "allocations": [{"metodo": "nequi", "monto": 5000}, {"metodo": "efectivo", "monto": 20000}]
        })
        response = client.get(f"/api/v1/orders/{open_order.id}/payment")
        assert response.status_code == 200
        data = response.json()
        assert data["primary_method"] == "efectivo"
        assert data["pending_amount"] == 0
        assert data["summary"] == "Nequi: $5.000 · Efectivo: $20.000"


class TestEmployeeCredit:
    """Tests de crédito de empleados"""

    def test_assign_and_settle(self, db_session, order_service, open_order, empleado):
        order = order_service.assign_order_credit(open_order.id, employee_id=empleado.id)
        assert order.estado == OrderStatus.ENTREGADO.value
        assert order.credit_employee_name == "Laura Gómez"
        assert order.credit_amount == 25000
        assert order_to_response(order)["payment_state"] == "credit-pending"
        assert employee_balance(db_session, empleado.id) == 25000

        order = order_service.settle_order_employee_credit(order.id, "nequi")
        assert order.payment_status == PaymentStatus.PAGADO.value
        assert order.credit_type is None
        assert order.credit_settled_at is not None
        assert [(entry.metodo, entry.monto) for entry in order.payment_allocations] == [("nequi", 25000)]
        assert order_to_response(order)["payment_state"] == "credit-settled"
        assert employee_balance(db_session, empleado.id) == 0

    def test_settle_without_credit_conflict(self, order_service, open_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.settle_order_employee_credit(open_order.id, "efectivo")
        assert exc_info.value.status_code == 409

    def test_assign_twice_conflict(self, order_service, open_order):
        order_service.assign_order_credit(open_order.id)
        with pytest.raises(HTTPException) as exc_info:
            order_service.assign_order_credit(open_order.id)
        assert exc_info.value.status_code == 409

    def test_assign_paid_order_conflict(self, order_service, open_order):
        order_service.record_order_payment(open_order.id, [{"metodo": "efectivo", "monto": 25000}])
        with pytest.raises(HTTPException) as exc_info:
            order_service.assign_order_credit(open_order.id)
        assert exc_info.value.status_code == 409

    def test_assign_unknown_employee(self, order_service, open_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.assign_order_credit(open_order.id, employee_id="no-existe")
        assert exc_info.value.status_code == 404

    def test_settlement_method_normalized(self):
        assert normalize_settlement_method("tarjeta") == PaymentMethod.TARJETA
        assert normalize_settlement_method("credito_empleados") == PaymentMethod.EFECTIVO
        assert normalize_settlement_method(None) == PaymentMethod.EFECTIVO

    def test_credit_endpoints(self, client, open_order, empleado):
        response = client.post(f"/api/v1/orders/{open_order.id}/credit", json={"employee_id": empleado.id})
        assert response.status_code == 200
        assert response.json()["credit_info"]["employee_name"] == "Laura Gómez"

        response = client.post(f"/api/v1/orders/{open_order.id}/credit/settle", json={"metodo": "desconocido"})
        assert response.status_code == 200
        assert response.json()["metodo_pago"] == "efectivo"
        assert response.json()["credit_info"] is None


class TestUpdateOrder:
    """Tests de edición y estados"""

    def test_update_resets_payment(self, order_service, sandwich, open_order):
        order_service.record_order_payment(open_order.id, [{"metodo": "efectivo", "monto": 25000}])
        order = order_service.update_order(open_order.id, OrderUpdate(items=[
            OrderItemIn(menu_item_id=sandwich.id, cantidad=2)
        ]))
        assert order.total == 26666
        assert order.payment_allocations == []
        assert order.payment_status == PaymentStatus.PENDIENTE.value
        assert order.metodo_pago is None

    def test_update_reverses_credit_allocations(self, db_session, order_service, open_order, empleado):
        order_service.record_order_payment(open_order.id, [
            {"metodo": "credito_empleados", "monto": 25000, "empleado_id": empleado.id},
        ])
        order_service.update_order(open_order.id, OrderUpdate(total=30000))
        assert employee_balance(db_session, empleado.id) == 0

    def test_update_total_without_lines(self, order_service, open_order):
        order = order_service.update_order(open_order.id, OrderUpdate(total=30050))
        assert order.total == 30100

    def test_status_only_moves_forward(self, order_service, open_order):
        order = order_service.update_order_status(open_order.id, OrderStatus.LISTO)
        assert order.estado == OrderStatus.LISTO.value
        assert order_service.update_order_status(open_order.id, OrderStatus.LISTO).estado == OrderStatus.LISTO.value
        with pytest.raises(HTTPException) as exc_info:
            order_service.update_order_status(open_order.id, OrderStatus.PREPARANDO)
        assert exc_info.value.status_code == 409

    def test_delete(self, client, open_order):
        assert client.delete(f"/api/v1/orders/{open_order.id}").status_code == 204
        assert client.get(f"/api/v1/orders/{open_order.id}").status_code == 404


class TestFetchOrders:
    """Tests de consulta"""

    def test_newest_first_and_payment_filter(self, order_service):
        older = order_service.create_order(OrderCreate(total=5000, timestamp=datetime(2025, 3, 1, 9, 0)))
        newer = order_service.create_order(OrderCreate(
            total=7000,
            timestamp=datetime(2025, 3, 2, 9, 0),
            payment_allocations=[{"metodo": "efectivo", "monto": 7000}]
        ))
        assert [order.id for order in order_service.fetch_orders()] == [newer.id, older.id]

        paid = order_service.fetch_orders(OrderFilters(payment_status=PaymentStatus.PAGADO))
        assert [order.id for order in paid] == [newer.id]

    def test_date_filter(self, client, order_service):
        order_service.create_order(OrderCreate(total=5000, timestamp=datetime(2025, 3, 1, 23, 30)))
        order_service.create_order(OrderCreate(total=7000, timestamp=datetime(2025, 3, 2, 8, 0)))
        response = client.get("/api/v1/orders/", params={"date_from": "2025-03-01", "date_to": "2025-03-01"})
        assert response.status_code == 200
        assert [order["total"] for order in response.json()["orders"]] == [5000]

    def test_page_counts_all_filtered_orders(self, client, order_service):
        for day in range(1, 6):
            order_service.create_order(OrderCreate(total=day * 1000, timestamp=datetime(2025, 3, day, 9, 0)))
        page, total = order_service.fetch_orders_page(limit=2, offset=1)
        assert total == 5
        assert [order.total for order in page] == [4000, 3000]

        response = client.get("/api/v1/orders/", params={"limit": 2, "offset": 4})
        assert response.json()["total"] == 5
        assert [order["total"] for order in response.json()["orders"]] == [1000]

    def test_page_with_payment_filter(self, order_service):
        for day in range(1, 4):
            order_service.create_order(OrderCreate(
                total=day * 1000,
                timestamp=datetime(2025, 3, day, 9, 0),
                payment_allocations=[{"metodo": "efectivo", "monto": day * 1000}]
            ))
        order_service.create_order(OrderCreate(total=9000, timestamp=datetime(2025, 3, 9, 9, 0)))
        page, total = order_service.fetch_orders_page(OrderFilters(payment_status=PaymentStatus.PAGADO), limit=1)
        assert total == 3
        assert [order.total for order in page] == [3000]


class TestImportOrder:
    """Tests de importación de registros heredados"""

    def test_import_with_payment_columns(self, order_service, sandwich):
        order = order_service.import_order_record({
            "id": "legacy-1",
            "numero": 4321,
            "estado": "entregado",
            "timestamp": "2025-02-10T12:30:00",
            "total": 99999,
            "pago_efectivo": 10000,
            "pago_nequi": 2000,
            "items": [
                {
                    "menu_item": {"id": sandwich.id},
                    "cantidad": 1,
                    "notas": "Sin tomate\nDescuento estudiante 10%",
                },
            ],
        })
        assert order.id == "legacy-1"
        assert order.total == 12000
        assert order.items[0].student_discount is True
        assert order.items[0].notas == "Sin tomate"
        assert order.payment_status == PaymentStatus.PAGADO.value
        assert order.metodo_pago == "efectivo"

    def test_import_creates_missing_menu_item(self, order_service):
        order = order_service.import_order_record({
            "total": 9000,
            "metodoPago": "nequi",
            "paymentStatus": "pagado",
            "items": [{"menuItem": {"id": "postres-3", "nombre": "Brownie", "precio": 9000}, "cantidad": 1}],
        })
        assert order.items[0].item.nombre == "Brownie"
        assert [(entry.metodo, entry.monto) for entry in order.payment_allocations] == [("nequi", 9000)]

    def test_import_duplicate_id(self, order_service, open_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.import_order_record({"id": open_order.id, "total": 1000})
        assert exc_info.value.status_code == 409

    def test_import_endpoint_keeps_credit(self, client):
        response = client.post("/api/v1/orders/import", json={"record": {
            "total": 15000,
            "estado": "entregado",
            "creditInfo": {"type": "empleados", "amount": 15000, "employeeName": "Pedro"},
        }})
        assert response.status_code == 201
        data = response.json()
        assert data["payment_state"] == "credit-pending"
        assert data["credit_info"]["employee_name"] == "Pedro"
