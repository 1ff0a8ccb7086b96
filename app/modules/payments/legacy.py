"""
Adaptador de registros de pago heredados

Los registros antiguos guardan el pago de tres formas distintas:
- columnas por método: pago_efectivo, pago_nequi, pago_tarjeta
- lista paymentAllocations / payment_allocations
- un único metodoPago + paymentStatus

Este adaptador los convierte una sola vez, al entrar al sistema, en un
PaymentState normalizado. El resto del código trabaja solo con asignaciones.
"""

from typing import Any, Dict, List

from app.common.formatters import round_to_cop
from app.modules.payments.allocations import (
    CREDIT_PAYMENT_METHODS,
    get_primary_method,
    merge_allocations,
    read_field,
    sanitize_allocations,
    to_payment_method,
)
from app.modules.payments.schemas import PaymentAllocation, PaymentMethod, PaymentState, PaymentStatus


PAYMENT_COLUMNS = {
    PaymentMethod.EFECTIVO: "pago_efectivo",
    PaymentMethod.NEQUI: "pago_nequi",
    PaymentMethod.TARJETA: "pago_tarjeta",
}


def allocations_from_payment_columns(record: Any) -> List[PaymentAllocation]:
    """Lee las columnas pago_<metodo> (valores no positivos se ignoran)."""
    allocations = []
    for method, column in PAYMENT_COLUMNS.items():
        amount = round_to_cop(read_field(record, column))
        if amount > 0:
            allocations.append(PaymentAllocation(metodo=method, monto=amount))
    return allocations


def payment_columns_from_allocations(allocations: List[PaymentAllocation]) -> Dict[str, int]:
    """Inverso de allocations_from_payment_columns; otros métodos no tienen columna."""
    totals = {column: 0 for column in PAYMENT_COLUMNS.values()}
    for allocation in allocations:
        column = PAYMENT_COLUMNS.get(allocation.metodo)
        if column:
            totals[column] += round_to_cop(allocation.monto)
    return totals


def _legacy_status(record: Any) -> Any:
    raw = read_field(record, "payment_status", "paymentStatus")
    try:
        return PaymentStatus(raw) if raw else None
    except ValueError:
        return None


def allocations_from_legacy_record(record: Any, total: int) -> PaymentState:
    """
    Normaliza el pago de un registro heredado.

    Prioridad: columnas por método, luego la lista de asignaciones y por
    último el par metodoPago + paymentStatus (que cubre el total).

    Args:
        record: Registro crudo (dict con claves camelCase o snake_case)
        total: Total ya normalizado de la orden

    Returns:
        PaymentState con asignaciones consolidadas, estado explícito (si lo
        había) y método principal
    """
    metodo_pago = to_payment_method(read_field(record, "metodo_pago", "metodoPago", "metodopago"))
    status = _legacy_status(record)

    allocations = merge_allocations(allocations_from_payment_columns(record))
    if not allocations:
        raw = read_field(record, "payment_allocations", "paymentAllocations")
        allocations = merge_allocations(sanitize_allocations(raw, CREDIT_PAYMENT_METHODS))
    if not allocations and metodo_pago and status != PaymentStatus.PENDIENTE and total > 0:
        allocations = [PaymentAllocation(metodo=metodo_pago, monto=round_to_cop(total))]

    return PaymentState(
        allocations=allocations,
        payment_status=status,
        metodo_pago=get_primary_method(allocations) or metodo_pago,
    )
