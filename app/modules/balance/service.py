"""
Balance diario

Solo las órdenes pagadas suman ingresos, repartidos según sus asignaciones
de pago. Los gastos restan en su fecha y método. Los saldos por método se
llevan para efectivo, Nequi y tarjeta; los demás métodos (crédito de
empleados, provisión de caja) solo afectan los totales.
"""

from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional
from datetime import date, datetime
import logging

from app.modules.expenses.models import Gasto
from app.modules.expenses.schemas import normalize_expense_method
from app.modules.orders.models import Order
from app.modules.payments.allocations import (
    get_allocations_total, get_order_allocations, determine_payment_status, read_field
)
from app.modules.payments.schemas import PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)

BALANCE_METHODS = (PaymentMethod.EFECTIVO, PaymentMethod.NEQUI, PaymentMethod.TARJETA)


def _date_key(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            return None
    return None


def _zero_method_totals() -> Dict[PaymentMethod, int]:
    return {method: 0 for method in BALANCE_METHODS}


def compute_daily_balance(orders: Iterable[Any], gastos: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Calcula el balance por día, del día más reciente al más antiguo.

    Los acumulados avanzan en orden cronológico sobre todos los días con
    movimientos.
    """
    days: Dict[date, Dict[str, Any]] = {}

    def get_day(key: date) -> Dict[str, Any]:
        if key not in days:
            days[key] = {
                "ingresos": 0,
                "egresos": 0,
                "ingresos_metodo": _zero_method_totals(),
                "egresos_metodo": _zero_method_totals(),
            }
        return days[key]

    for order in orders:
        if determine_payment_status(order) != PaymentStatus.PAGADO:
            continue
        key = _date_key(read_field(order, "timestamp"))
        if key is None:
            continue
        allocations = get_order_allocations(order)
        if not allocations:
            continue
        entry = get_day(key)
        entry["ingresos"] += get_allocations_total(allocations)
        for allocation in allocations:
            if allocation.metodo in entry["ingresos_metodo"]:
                entry["ingresos_metodo"][allocation.metodo] += allocation.monto

    for gasto in gastos:
        key = _date_key(read_field(gasto, "fecha"))
        if key is None:
            continue
        entry = get_day(key)
        monto = int(read_field(gasto, "monto") or 0)
        method = normalize_expense_method(read_field(gasto, "metodo_pago", "metodoPago"))
        entry["egresos"] += monto
        if method in entry["egresos_metodo"]:
            entry["egresos_metodo"][method] += monto

    results = []
    saldo_total = 0
    acumulado = _zero_method_totals()
    for key in sorted(days):
        entry = days[key]
        saldo_dia = {
            method: entry["ingresos_metodo"][method] - entry["egresos_metodo"][method]
            for method in BALANCE_METHODS
        }
        balance_diario = entry["ingresos"] - entry["egresos"]
        saldo_total += balance_diario
        for method in BALANCE_METHODS:
            acumulado[method] += saldo_dia[method]

        results.append({
            "fecha": key,
            "ingresos_totales": entry["ingresos"],
            "egresos_totales": entry["egresos"],
            "balance_diario": balance_diario,
            "ingresos_efectivo": entry["ingresos_metodo"][PaymentMethod.EFECTIVO],
            "egresos_efectivo": entry["egresos_metodo"][PaymentMethod.EFECTIVO],
            "ingresos_nequi": entry["ingresos_metodo"][PaymentMethod.NEQUI],
            "egresos_nequi": entry["egresos_metodo"][PaymentMethod.NEQUI],
            "ingresos_tarjeta": entry["ingresos_metodo"][PaymentMethod.TARJETA],
            "egresos_tarjeta": entry["egresos_metodo"][PaymentMethod.TARJETA],
            "saldo_efectivo_dia": saldo_dia[PaymentMethod.EFECTIVO],
            "saldo_nequi_dia": saldo_dia[PaymentMethod.NEQUI],
            "saldo_tarjeta_dia": saldo_dia[PaymentMethod.TARJETA],
            "saldo_total_acumulado": saldo_total,
            "saldo_efectivo_acumulado": acumulado[PaymentMethod.EFECTIVO],
            "saldo_nequi_acumulado": acumulado[PaymentMethod.NEQUI],
            "saldo_tarjeta_acumulado": acumulado[PaymentMethod.TARJETA],
        })

    results.reverse()
    return results


class BalanceService:
    def __init__(self, db: Session):
        self.db = db

    def fetch_balance(self, date_from: Optional[date] = None, date_to: Optional[date] = None) -> Dict[str, Any]:
        """
        Balance de los días dentro del rango. Los acumulados incluyen los
        días anteriores al rango.
        """
        orders = self.db.query(Order).all()
        gastos = self.db.query(Gasto).all()
        dias = [
            day for day in compute_daily_balance(orders, gastos)
            if (date_from is None or day["fecha"] >= date_from)
            and (date_to is None or day["fecha"] <= date_to)
        ]
        logger.debug(f"Balance calculado: {len(dias)} días ({len(orders)} órdenes, {len(gastos)} gastos)")
        return {"dias": dias, "total": len(dias)}
