"""
Tests para el modelo de asignación de pagos

Cubre:
- Saneamiento de asignaciones malformadas
- Consolidación por método
- Estado de pago con holgura de ±1 peso
- Resumen legible
- Adaptador de registros heredados
"""

import math

from app.modules.payments.allocations import (
    CREDIT_PAYMENT_METHODS, EXPENSE_PAYMENT_METHODS, build_updated_order_payment,
    determine_payment_status, format_payment_summary, get_allocations_total,
    get_order_allocations, get_primary_method, is_order_paid, merge_allocations,
    payment_matches_total, sanitize_allocations
)
from app.modules.payments.legacy import (
    allocations_from_legacy_record, allocations_from_payment_columns, payment_columns_from_allocations
)
from app.modules.payments.schemas import PaymentAllocation, PaymentMethod, PaymentStatus


def allocation(metodo, monto, **extra):
    return PaymentAllocation(metodo=metodo, monto=monto, **extra)


class TestSanitizeAllocations:
    """Tests de saneamiento"""

    def test_filters_unknown_methods_and_non_positive_amounts(self):
        raw = [
            {"metodo": "efectivo", "monto": 0},
            {"metodo": "nequi", "monto": "300"},
            {"metodo": "bitcoin", "monto": 100},
            None,
        ]
        result = sanitize_allocations(raw)
        assert result == [allocation(PaymentMethod.NEQUI, 300)]

    def test_invalid_methods_negative_and_fractional_amounts(self):
        raw = [
            {"metodo": "bogus", "monto": 100},
            {"metodo": "efectivo", "monto": -5},
            {"metodo": "nequi", "monto": 300.4},
        ]
        assert sanitize_allocations(raw) == [allocation(PaymentMethod.NEQUI, 300)]

    def test_non_list_input_returns_empty(self):
        assert sanitize_allocations(None) == []
        assert sanitize_allocations("efectivo") == []
        assert sanitize_allocations({"metodo": "efectivo", "monto": 100}) == []

    def test_amounts_are_rounded_half_up(self):
        result = sanitize_allocations([{"metodo": "tarjeta", "monto": 1000.5}])
        assert result[0].monto == 1001

    def test_nan_amount_is_dropped(self):
        assert sanitize_allocations([{"metodo": "efectivo", "monto": math.nan}]) == []
        assert sanitize_allocations([{"metodo": "efectivo", "monto": "abc"}]) == []

    def test_employee_credit_not_allowed_by_default(self):
        raw = [{"metodo": "credito_empleados", "monto": 5000, "empleado_id": "e-1"}]
        assert sanitize_allocations(raw) == []

    def test_employee_credit_requires_employee(self):
        raw = [
            {"metodo": "credito_empleados", "monto": 5000},
            {"metodo": "credito_empleados", "monto": 3000, "empleadoId": "e-1", "empleadoNombre": "Laura"},
        ]
        result = sanitize_allocations(raw, CREDIT_PAYMENT_METHODS)
        assert len(result) == 1
        assert result[0].empleado_id == "e-1"
        assert result[0].empleado_nombre == "Laura"

    def test_expense_methods_accept_cash_provision(self):
        raw = [{"metodo": "provision_caja", "monto": 20000}]
        assert sanitize_allocations(raw) == []
        assert sanitize_allocations(raw, EXPENSE_PAYMENT_METHODS)[0].metodo == PaymentMethod.PROVISION_CAJA


class TestMergeAllocations:
    """Tests de consolidación"""

    def test_one_entry_per_method_in_first_seen_order(self):
        merged = merge_allocations([
            allocation(PaymentMethod.NEQUI, 5000),
            allocation(PaymentMethod.EFECTIVO, 10000),
            allocation(PaymentMethod.NEQUI, 2000),
        ])
        assert merged == [allocation(PaymentMethod.NEQUI, 7000), allocation(PaymentMethod.EFECTIVO, 10000)]

    def test_merge_preserves_total_and_is_idempotent(self):
        entries = [
            allocation(PaymentMethod.EFECTIVO, 1000),
            allocation(PaymentMethod.TARJETA, 2500),
            allocation(PaymentMethod.EFECTIVO, 4000),
        ]
        once = merge_allocations(entries)
        assert get_allocations_total(once) == get_allocations_total(entries)
        assert merge_allocations(once) == once

    def test_does_not_mutate_input(self):
        entries = [allocation(PaymentMethod.EFECTIVO, 1000), allocation(PaymentMethod.EFECTIVO, 500)]
        merge_allocations(entries)
        assert entries[0].monto == 1000

    def test_employee_credit_merged_per_employee(self):
        merged = merge_allocations([
            allocation(PaymentMethod.CREDITO_EMPLEADOS, 1000, empleado_id="a"),
            allocation(PaymentMethod.CREDITO_EMPLEADOS, 2000, empleado_id="b"),
            allocation(PaymentMethod.CREDITO_EMPLEADOS, 500, empleado_id="a", empleado_nombre="Ana"),
        ])
        assert [(entry.empleado_id, entry.monto) for entry in merged] == [("a", 1500), ("b", 2000)]
        assert merged[0].empleado_nombre == "Ana"


class TestPaymentStatus:
    """Tests del resolvedor de estado de pago"""

    def test_mixed_payment_covering_total_is_paid(self):
        order = {
            "total": 25000,
            "payment_allocations": [
                {"metodo": "efectivo", "monto": 20000},
                {"metodo": "nequi", "monto": 5000},
            ],
        }
        assert determine_payment_status(order) == PaymentStatus.PAGADO
        assert is_order_paid(order)

    def test_one_peso_tolerance(self):
        assert is_order_paid({"total": 25000, "payment_allocations": [{"metodo": "tarjeta", "monto": 24999}]})
        assert is_order_paid({"total": 25000, "payment_allocations": [{"metodo": "tarjeta", "monto": 25001}]})
        assert not is_order_paid({"total": 25000, "payment_allocations": [{"metodo": "tarjeta", "monto": 24000}]})

    def test_recorded_allocations_win_over_explicit_status(self):
        order = {
            "total": 25000,
            "payment_status": "pagado",
            "payment_allocations": [{"metodo": "tarjeta", "monto": 10000}],
        }
        assert determine_payment_status(order) == PaymentStatus.PENDIENTE

    def test_explicit_status_without_allocations(self):
        assert determine_payment_status({"total": 9000, "payment_status": "pendiente", "metodo_pago": "efectivo"}) \
            == PaymentStatus.PENDIENTE
        assert determine_payment_status({"total": 9000, "paymentStatus": "pagado"}) == PaymentStatus.PAGADO

    def test_legacy_pair_synthesizes_full_payment(self):
        order = {"total": 12000, "metodoPago": "nequi", "paymentStatus": "pagado"}
        assert get_order_allocations(order) == [allocation(PaymentMethod.NEQUI, 12000)]

    def test_nothing_recorded_is_pending(self):
        assert determine_payment_status({"total": 5000}) == PaymentStatus.PENDIENTE

    def test_malformed_recorded_allocations_do_not_raise(self):
        assert is_order_paid({"total": 1000, "payment_allocations": 5}) is False
        assert get_order_allocations({"total": 1000, "payment_allocations": {"efectivo": 1000}}) == []
        assert determine_payment_status({"total": 1000, "payment_allocations": 5, "payment_status": "pagado"}) \
            == PaymentStatus.PAGADO

    def test_matches_total_rounds_order_total(self):
        assert payment_matches_total([allocation(PaymentMethod.EFECTIVO, 1000)], "1000.4")


class TestPaymentSummary:
    """Tests del resumen legible"""

    def test_summary_with_cop_format(self):
        summary = format_payment_summary([
            allocation(PaymentMethod.EFECTIVO, 20000),
            allocation(PaymentMethod.NEQUI, 5000),
        ])
        assert summary == "Efectivo: $20.000 · Nequi: $5.000"

    def test_empty_summary(self):
        assert format_payment_summary([]) == "Pago pendiente"

    def test_employee_name_in_label(self):
        summary = format_payment_summary([
            allocation(PaymentMethod.CREDITO_EMPLEADOS, 8000, empleado_id="e-1", empleado_nombre="Laura")
        ])
        assert summary == "Crédito empleados (Laura): $8.000"

    def test_custom_currency_formatter(self):
        summary = format_payment_summary([allocation(PaymentMethod.TARJETA, 1500)], lambda value: f"{value} COP")
        assert summary == "Tarjeta: 1500 COP"

    def test_primary_method_first_wins_on_tie(self):
        assert get_primary_method([
            allocation(PaymentMethod.NEQUI, 5000),
            allocation(PaymentMethod.EFECTIVO, 5000),
        ]) == PaymentMethod.NEQUI
        assert get_primary_method([]) is None

    def test_build_updated_order_payment(self):
        updated = build_updated_order_payment(
            {"id": "o-1", "total": 3000},
            [{"metodo": "efectivo", "monto": 1000}, {"metodo": "efectivo", "monto": 2000}],
            PaymentStatus.PAGADO
        )
        assert updated["id"] == "o-1"
        assert updated["payment_allocations"] == [allocation(PaymentMethod.EFECTIVO, 3000)]
        assert updated["payment_status"] == PaymentStatus.PAGADO


class TestLegacyRecords:
    """Tests del adaptador de registros heredados"""

    def test_payment_columns_take_priority(self):
        record = {
            "pago_efectivo": 10000,
            "pago_nequi": "5000",
            "pago_tarjeta": 0,
            "paymentAllocations": [{"metodo": "tarjeta", "monto": 15000}],
            "metodoPago": "tarjeta",
        }
        state = allocations_from_legacy_record(record, 15000)
        assert state.allocations == [allocation(PaymentMethod.EFECTIVO, 10000), allocation(PaymentMethod.NEQUI, 5000)]
        assert state.metodo_pago == PaymentMethod.EFECTIVO

    def test_allocation_list_used_without_columns(self):
        record = {"paymentAllocations": [{"metodo": "nequi", "monto": 4000}, {"metodo": "nequi", "monto": 1000}]}
        state = allocations_from_legacy_record(record, 5000)
        assert state.allocations == [allocation(PaymentMethod.NEQUI, 5000)]
        assert state.payment_status is None

    def test_single_method_covers_total(self):
        state = allocations_from_legacy_record({"metodoPago": "tarjeta", "paymentStatus": "pagado"}, 18000)
        assert state.allocations == [allocation(PaymentMethod.TARJETA, 18000)]
        assert state.payment_status == PaymentStatus.PAGADO

    def test_pending_single_method_has_no_allocations(self):
        state = allocations_from_legacy_record({"metodoPago": "efectivo", "paymentStatus": "pendiente"}, 18000)
        assert state.allocations == []
        assert state.metodo_pago == PaymentMethod.EFECTIVO

    def test_columns_from_allocations(self):
        columns = payment_columns_from_allocations([
            allocation(PaymentMethod.EFECTIVO, 1000),
            allocation(PaymentMethod.CREDITO_EMPLEADOS, 500, empleado_id="e-1"),
        ])
        assert columns == {"pago_efectivo": 1000, "pago_nequi": 0, "pago_tarjeta": 0}

    def test_columns_ignore_non_positive(self):
        assert allocations_from_payment_columns({"pago_efectivo": -100, "pago_nequi": None}) == []
