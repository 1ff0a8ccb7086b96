from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Any, Dict, List, Optional
import logging

from app.common.formatters import round_to_cop
from app.modules.credits.models import CreditEntryType, EmployeeCreditEntry

logger = logging.getLogger(__name__)


def build_credit_records(entries: List[EmployeeCreditEntry]) -> List[Dict[str, Any]]:
    """
    Agrupa los movimientos por empleado con su saldo acumulado.

    Los movimientos deben venir en orden cronológico: el saldo después de
    cada movimiento (balance_after) se calcula en ese orden. El historial
    de cada empleado se retorna del más reciente al más antiguo y los
    empleados ordenados por saldo descendente.
    """
    records: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        if not entry.empleado_id:
            continue
        empleado_nombre = entry.empleado.nombre if entry.empleado else None
        target = records.get(entry.empleado_id)
        if target is None:
            target = {"empleado_id": entry.empleado_id, "empleado_nombre": empleado_nombre, "saldo": 0, "history": []}
            records[entry.empleado_id] = target

        monto = max(0, round_to_cop(entry.monto))
        target["saldo"] += -monto if entry.tipo == CreditEntryType.ABONO.value else monto
        target["history"].append({
            "id": entry.id,
            "empleado_id": entry.empleado_id,
            "empleado_nombre": empleado_nombre,
            "order_id": entry.order_id,
            "order_numero": entry.order_numero,
            "monto": monto,
            "tipo": CreditEntryType.ABONO if entry.tipo == CreditEntryType.ABONO.value else CreditEntryType.CARGO,
            "timestamp": entry.timestamp,
            "balance_after": target["saldo"],
        })
        if not target["empleado_nombre"] and empleado_nombre:
            target["empleado_nombre"] = empleado_nombre

    result = [
        {
            "empleado_id": record["empleado_id"],
            "empleado_nombre": record["empleado_nombre"],
            "total": record["saldo"],
            "history": sorted(record["history"], key=lambda item: item["timestamp"], reverse=True),
        }
        for record in records.values()
    ]
    return sorted(result, key=lambda record: record["total"], reverse=True)


class CreditService:
    """Libro de crédito de empleados (cargos y abonos)"""

    def __init__(self, db: Session):
        self.db = db

    def _add_entry(self, tipo: CreditEntryType, empleado_id: Optional[str], monto: Any,
                   order_id: Optional[str] = None, order_numero: Optional[int] = None,
                   commit: bool = True) -> Optional[EmployeeCreditEntry]:
        amount = max(0, round_to_cop(monto))
        if not empleado_id or amount <= 0:
            logger.warning(f"Movimiento de crédito ignorado ({tipo.value}): empleado={empleado_id}, monto={monto}")
            return None

        entry = EmployeeCreditEntry(
            empleado_id=empleado_id,
            order_id=order_id,
            order_numero=order_numero,
            monto=amount,
            tipo=tipo.value
        )
        self.db.add(entry)
        if commit:
            try:
                self.db.commit()
                self.db.refresh(entry)
            except Exception as e:
                self.db.rollback()
                logger.error(f"Error registrando {tipo.value} de crédito: {e}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error interno: {str(e)}"
                )
        logger.info(f"Crédito empleado {empleado_id}: {tipo.value} de {amount} (orden {order_numero})")
        return entry

    def add_employee_credit(self, empleado_id: Optional[str], monto: Any, order_id: Optional[str] = None,
                            order_numero: Optional[int] = None, commit: bool = True) -> Optional[EmployeeCreditEntry]:
        """
        Registra un cargo al crédito del empleado.

        Sin empleado o con monto <= 0 (tras redondear) no se registra nada.
        Con commit=False el movimiento queda en la sesión para la transacción
        de quien llama.
        """
        return self._add_entry(CreditEntryType.CARGO, empleado_id, monto, order_id, order_numero, commit)

    def settle_employee_credit_balance(self, empleado_id: Optional[str], monto: Any, order_id: Optional[str] = None,
                                       order_numero: Optional[int] = None,
                                       commit: bool = True) -> Optional[EmployeeCreditEntry]:
        """Registra un abono que reduce el saldo del empleado."""
        return self._add_entry(CreditEntryType.ABONO, empleado_id, monto, order_id, order_numero, commit)

    def fetch_employee_credits(self) -> List[Dict[str, Any]]:
        entries = self.db.query(EmployeeCreditEntry).order_by(
            EmployeeCreditEntry.timestamp.asc(),
            EmployeeCreditEntry.id.asc()
        ).all()
        return build_credit_records(entries)
