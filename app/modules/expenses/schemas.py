from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional, List
from datetime import date, datetime

from app.modules.payments.allocations import EXPENSE_PAYMENT_METHODS
from app.modules.payments.schemas import PaymentMethod


def normalize_expense_method(value: Any) -> PaymentMethod:
    """Métodos de egreso: efectivo, tarjeta, Nequi o provisión de caja; otro valor es efectivo."""
    for method in EXPENSE_PAYMENT_METHODS:
        if value == method or value == method.value:
            return method
    return PaymentMethod.EFECTIVO


class GastoCreate(BaseModel):
    descripcion: str = Field(..., min_length=1, max_length=255)
    monto: int = Field(..., ge=0, description="Monto en COP")
    categoria: str = Field("", max_length=100)
    fecha: date
    metodo_pago: PaymentMethod = PaymentMethod.EFECTIVO

    @field_validator('metodo_pago', mode='before')
    @classmethod
    def validate_metodo_pago(cls, v: Any) -> PaymentMethod:
        return normalize_expense_method(v)


class GastoUpdate(BaseModel):
    descripcion: Optional[str] = Field(None, min_length=1, max_length=255)
    monto: Optional[int] = Field(None, ge=0)
    categoria: Optional[str] = Field(None, max_length=100)
    fecha: Optional[date] = None
    metodo_pago: Optional[PaymentMethod] = None

    @field_validator('metodo_pago', mode='before')
    @classmethod
    def validate_metodo_pago(cls, v: Any) -> Optional[PaymentMethod]:
        return None if v is None else normalize_expense_method(v)


class GastoOut(BaseModel):
    id: str
    descripcion: str
    monto: int
    categoria: str
    fecha: date
    metodo_pago: PaymentMethod
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GastoList(BaseModel):
    gastos: List[GastoOut]
    total: int
    total_monto: int
