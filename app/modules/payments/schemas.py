"""
Esquemas Pydantic del modelo de asignación de pagos

Una orden puede pagarse con varios métodos a la vez (efectivo + Nequi, etc.).
Cada porción es una PaymentAllocation {metodo, monto}.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any
from enum import Enum


# ===== ENUMS =====

class PaymentMethod(str, Enum):
    EFECTIVO = "efectivo"
    TARJETA = "tarjeta"
    NEQUI = "nequi"
    CREDITO_EMPLEADOS = "credito_empleados"  # Cargo al crédito de un empleado
    PROVISION_CAJA = "provision_caja"        # Solo para egresos / contabilidad


class PaymentStatus(str, Enum):
    PENDIENTE = "pendiente"
    PAGADO = "pagado"


# ===== ALLOCATION SCHEMAS =====

class PaymentAllocation(BaseModel):
    """Porción del total de una orden pagada con un método específico"""
    metodo: PaymentMethod = Field(description="Método de pago")
    monto: int = Field(..., ge=1, description="Monto en COP (entero positivo)")
    empleado_id: Optional[str] = Field(None, description="Empleado (solo crédito de empleados)")
    empleado_nombre: Optional[str] = Field(None, description="Nombre del empleado")

    model_config = {"from_attributes": True}


class PaymentAllocationIn(BaseModel):
    """
    Asignación tal como llega del formulario de pago.

    Es deliberadamente permisiva: el saneamiento descarta métodos
    desconocidos y montos no positivos en lugar de rechazar la petición.
    """
    metodo: Any = None
    monto: Any = None
    empleado_id: Optional[str] = None
    empleado_nombre: Optional[str] = None


class PaymentState(BaseModel):
    """Representación normalizada del pago de una orden"""
    allocations: List[PaymentAllocation] = Field(default_factory=list)
    payment_status: Optional[PaymentStatus] = None
    metodo_pago: Optional[PaymentMethod] = None


class PaymentSummaryOut(BaseModel):
    order_id: str
    total: int
    paid_total: int
    pending_amount: int
    payment_status: PaymentStatus
    primary_method: Optional[PaymentMethod] = None
    allocations: List[PaymentAllocation]
    summary: str
