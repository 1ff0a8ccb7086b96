from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.modules.credits.models import CreditEntryType


class CreditHistoryEntry(BaseModel):
    id: str
    empleado_id: str
    empleado_nombre: Optional[str] = None
    order_id: Optional[str] = None
    order_numero: Optional[int] = None
    monto: int
    tipo: CreditEntryType
    timestamp: datetime
    balance_after: int = Field(description="Saldo del empleado después del movimiento")


class EmployeeCreditRecord(BaseModel):
    empleado_id: str
    empleado_nombre: Optional[str] = None
    total: int = Field(description="Saldo pendiente (cargos - abonos)")
    history: List[CreditHistoryEntry]


class CreditMovementIn(BaseModel):
    empleado_id: str
    monto: int = Field(..., gt=0)
    order_id: Optional[str] = None
    order_numero: Optional[int] = None
