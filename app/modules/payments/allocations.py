"""
Modelo de asignación de pagos

Funciones puras para sanear, consolidar y evaluar los pagos de una orden:
- sanitize_allocations: descarta métodos no permitidos y montos no positivos
- merge_allocations: una sola entrada por método
- determine_payment_status / is_order_paid: estado de pago de la orden
- format_payment_summary: texto legible ("Efectivo: $20.000 · Nequi: $5.000")

Ninguna de estas funciones lanza excepciones: la entrada inválida se filtra.
La validación con mensaje al usuario ocurre en quien las invoca (router de pago).
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional

from app.common.formatters import format_cop, round_to_cop
from app.modules.payments.schemas import PaymentAllocation, PaymentMethod, PaymentStatus


ORDER_PAYMENT_METHODS = (
    PaymentMethod.EFECTIVO,
    PaymentMethod.TARJETA,
    PaymentMethod.NEQUI,
)
CREDIT_PAYMENT_METHODS = ORDER_PAYMENT_METHODS + (PaymentMethod.CREDITO_EMPLEADOS,)
EXPENSE_PAYMENT_METHODS = ORDER_PAYMENT_METHODS + (PaymentMethod.PROVISION_CAJA,)

PAYMENT_METHOD_LABELS = {
    PaymentMethod.EFECTIVO: "Efectivo",
    PaymentMethod.TARJETA: "Tarjeta",
    PaymentMethod.NEQUI: "Nequi",
    PaymentMethod.CREDITO_EMPLEADOS: "Crédito empleados",
    PaymentMethod.PROVISION_CAJA: "Provisión caja",
}

# Holgura de redondeo (1 peso) entre la suma de pagos y el total de la orden.
# Absorbe el redondeo de los descuentos porcentuales.
PAYMENT_TOLERANCE = 1

PENDING_PAYMENT_LABEL = "Pago pendiente"
SUMMARY_SEPARATOR = " · "


def read_field(source: Any, *names: str) -> Any:
    """Lee un campo de un dict o de un objeto, probando varios nombres."""
    if source is None:
        return None
    for name in names:
        if isinstance(source, Mapping):
            if name in source and source[name] is not None:
                return source[name]
        else:
            value = getattr(source, name, None)
            if value is not None:
                return value
    return None


def to_payment_method(value: Any) -> Optional[PaymentMethod]:
    if isinstance(value, PaymentMethod):
        return value
    if not isinstance(value, str):
        return None
    try:
        return PaymentMethod(value)
    except ValueError:
        return None


def sanitize_allocations(
    allocations: Any,
    allowed_methods: Iterable[PaymentMethod] = ORDER_PAYMENT_METHODS
) -> List[PaymentAllocation]:
    """
    Sanea una lista arbitraria de asignaciones.

    Args:
        allocations: Lista de dicts u objetos con metodo/monto (puede venir malformada)
        allowed_methods: Métodos permitidos en el contexto de uso

    Returns:
        Solo las entradas con método permitido y monto redondeado > 0
    """
    if not isinstance(allocations, (list, tuple)):
        return []

    allowed = set(allowed_methods)
    sanitized = []
    for entry in allocations:
        if not entry:
            continue
        metodo = to_payment_method(read_field(entry, "metodo"))
        if metodo is None or metodo not in allowed:
            continue
        monto = round_to_cop(read_field(entry, "monto"))
        if monto <= 0:
            continue

        allocation = PaymentAllocation(metodo=metodo, monto=monto)
        if metodo == PaymentMethod.CREDITO_EMPLEADOS:
            empleado_id = read_field(entry, "empleado_id", "empleadoId")
            if not empleado_id:
                continue
            allocation.empleado_id = str(empleado_id)
            empleado_nombre = read_field(entry, "empleado_nombre", "empleadoNombre")
            if empleado_nombre:
                allocation.empleado_nombre = str(empleado_nombre)
        sanitized.append(allocation)

    return sanitized


def _merge_key(allocation: PaymentAllocation) -> str:
    if allocation.metodo == PaymentMethod.CREDITO_EMPLEADOS:
        return f"{allocation.metodo.value}:{allocation.empleado_id or ''}"
    return allocation.metodo.value


def merge_allocations(allocations: Iterable[PaymentAllocation]) -> List[PaymentAllocation]:
    """
    Consolida entradas repetidas: una por método (por método + empleado para
    crédito de empleados), en el orden en que aparecen por primera vez.
    """
    totals = {}
    for entry in allocations:
        key = _merge_key(entry)
        existing = totals.get(key)
        if existing:
            existing.monto += entry.monto
            if entry.empleado_nombre and not existing.empleado_nombre:
                existing.empleado_nombre = entry.empleado_nombre
        else:
            totals[key] = entry.model_copy()

    return [
        entry.model_copy(update={"monto": round_to_cop(entry.monto)})
        for entry in totals.values()
    ]


def get_allocations_total(allocations: Iterable[PaymentAllocation]) -> int:
    return sum(entry.monto for entry in allocations)


def payment_matches_total(allocations: Iterable[PaymentAllocation], total: Any) -> bool:
    """La suma de pagos cubre el total con una holgura de ±1 peso."""
    return abs(get_allocations_total(allocations) - round_to_cop(total)) <= PAYMENT_TOLERANCE


def _order_status(order: Any) -> Optional[PaymentStatus]:
    raw = read_field(order, "payment_status", "paymentStatus")
    if isinstance(raw, PaymentStatus):
        return raw
    try:
        return PaymentStatus(raw) if raw else None
    except ValueError:
        return None


def _recorded_allocations(order: Any) -> List[PaymentAllocation]:
    raw = read_field(order, "payment_allocations", "paymentAllocations")
    return merge_allocations(sanitize_allocations(raw, CREDIT_PAYMENT_METHODS))


def get_order_allocations(order: Any) -> List[PaymentAllocation]:
    """
    Asignaciones efectivas de una orden.

    Si la orden no tiene asignaciones registradas pero el par heredado
    (metodo_pago + payment_status='pagado') está presente, se asume que el
    total completo se pagó con ese método.
    """
    recorded = _recorded_allocations(order)
    if recorded:
        return recorded

    metodo = to_payment_method(read_field(order, "metodo_pago", "metodoPago"))
    if _order_status(order) == PaymentStatus.PAGADO and metodo:
        total = round_to_cop(read_field(order, "total"))
        if total > 0:
            return [PaymentAllocation(metodo=metodo, monto=total)]

    return []


def determine_payment_status(order: Any) -> PaymentStatus:
    """
    Estado de pago de una orden:
    1. Con asignaciones registradas: pagada si la suma está a ±1 del total
    2. Sin asignaciones, con payment_status explícito: se respeta
    3. Par heredado metodo_pago + 'pagado': pagada por el total
    4. En otro caso: pendiente
    """
    recorded = _recorded_allocations(order)
    if recorded:
        if payment_matches_total(recorded, read_field(order, "total")):
            return PaymentStatus.PAGADO
        return PaymentStatus.PENDIENTE

    explicit = _order_status(order)
    if explicit:
        return explicit

    if get_order_allocations(order):
        return PaymentStatus.PAGADO

    return PaymentStatus.PENDIENTE


def is_order_paid(order: Any) -> bool:
    return determine_payment_status(order) == PaymentStatus.PAGADO


def get_primary_method(allocations: List[PaymentAllocation]) -> Optional[PaymentMethod]:
    """Método con mayor monto; en empate gana el primero."""
    if not allocations:
        return None
    return max(allocations, key=lambda entry: entry.monto).metodo


def format_payment_summary(
    allocations: List[PaymentAllocation],
    format_currency: Callable[[int], str] = format_cop
) -> str:
    """
    Texto legible de los pagos:
    "Efectivo: $20.000 · Nequi: $5.000" o "Pago pendiente" si no hay pagos.
    """
    if not allocations:
        return PENDING_PAYMENT_LABEL

    parts = []
    for entry in allocations:
        label = PAYMENT_METHOD_LABELS[entry.metodo]
        if entry.metodo == PaymentMethod.CREDITO_EMPLEADOS and entry.empleado_nombre:
            label = f"{label} ({entry.empleado_nombre})"
        parts.append(f"{label}: {format_currency(entry.monto)}")

    return SUMMARY_SEPARATOR.join(parts)


def build_updated_order_payment(order_data: dict, allocations: Any, status: PaymentStatus) -> dict:
    """Copia de la orden con las asignaciones saneadas y el estado indicado."""
    merged = merge_allocations(sanitize_allocations(allocations, CREDIT_PAYMENT_METHODS))
    return {
        **order_data,
        "payment_allocations": merged,
        "payment_status": status,
    }
