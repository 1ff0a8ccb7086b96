from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime, date
from enum import Enum

from app.modules.cart.schemas import BowlCustomization
from app.modules.menu.schemas import MenuItemOut
from app.modules.orders.models import OrderStatus, OrderCreditType
from app.modules.payments.schemas import (
    PaymentAllocation, PaymentAllocationIn, PaymentMethod, PaymentStatus
)


class OrderPaymentState(str, Enum):
    """Sub-estado de pago, independiente del estado de preparación"""
    UNPAID = "unpaid"
    PAID = "paid"
    CREDIT_PENDING = "credit-pending"
    CREDIT_SETTLED = "credit-settled"


# ===== REQUEST SCHEMAS =====

class OrderItemIn(BaseModel):
    menu_item_id: str
    cantidad: int = Field(..., gt=0)
    precio_unitario: Optional[int] = Field(None, ge=0, description="Si falta se usa el precio del menú")
    student_discount: bool = False
    notas: Optional[str] = None
    custom_key: Optional[str] = None
    bowl_customization: Optional[BowlCustomization] = None


class OrderCreate(BaseModel):
    numero: Optional[int] = Field(None, ge=0, description="Si falta se genera uno de 4 dígitos")
    items: List[OrderItemIn] = Field(default_factory=list)
    total: Optional[int] = Field(None, ge=0, description="Solo se usa si la orden no tiene líneas")
    cliente: Optional[str] = None
    metodo_pago: Optional[PaymentMethod] = None
    payment_allocations: List[PaymentAllocationIn] = Field(default_factory=list)
    payment_status: Optional[PaymentStatus] = None
    timestamp: Optional[datetime] = None


class OrderUpdate(BaseModel):
    items: Optional[List[OrderItemIn]] = None
    total: Optional[int] = Field(None, ge=0)


class OrderStatusUpdate(BaseModel):
    estado: OrderStatus


class OrderPaymentRequest(BaseModel):
    allocations: List[PaymentAllocationIn]
    allow_partial: bool = Field(False, description="Permite registrar un pago que no cubre el total")


class OrderCreditRequest(BaseModel):
    amount: Optional[int] = Field(None, ge=0, description="Por defecto el total de la orden")
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None


class OrderCreditSettleRequest(BaseModel):
    metodo: str = Field(PaymentMethod.EFECTIVO.value, description="efectivo, nequi o tarjeta")


class OrderFilters(BaseModel):
    estado: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


# ===== RESPONSE SCHEMAS =====

class OrderItemOut(BaseModel):
    id: str
    item: Optional[MenuItemOut] = None
    cantidad: int
    precio_unitario: int
    student_discount: bool
    notas: Optional[str] = None
    custom_key: Optional[str] = None
    bowl_customization: Optional[BowlCustomization] = None
    subtotal: int


class OrderCreditInfo(BaseModel):
    type: OrderCreditType
    amount: int
    assigned_at: datetime
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None


class OrderOut(BaseModel):
    id: str
    numero: int
    total: int
    estado: OrderStatus
    timestamp: datetime
    cliente: Optional[str] = None
    metodo_pago: Optional[PaymentMethod] = None
    payment_status: PaymentStatus
    is_paid: bool
    payment_state: OrderPaymentState
    payment_allocations: List[PaymentAllocation]
    payment_summary: str
    credit_info: Optional[OrderCreditInfo] = None
    items: List[OrderItemOut]


class OrderList(BaseModel):
    orders: List[OrderOut]
    total: int


class OrderImportRequest(BaseModel):
    """Registro crudo de una orden heredada (claves camelCase o snake_case)"""
    record: Dict[str, Any]
