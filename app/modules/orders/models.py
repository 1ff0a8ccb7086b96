from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.database import Base
from app.common.mixins import IdMixin, TimestampMixin
import enum


class OrderStatus(str, enum.Enum):
    PENDIENTE = "pendiente"
    PREPARANDO = "preparando"
    LISTO = "listo"
    ENTREGADO = "entregado"


# Orden del ciclo de vida; solo se avanza (se permite saltar estados)
ORDER_STATUS_FLOW = [
    OrderStatus.PENDIENTE,
    OrderStatus.PREPARANDO,
    OrderStatus.LISTO,
    OrderStatus.ENTREGADO,
]


class OrderCreditType(str, enum.Enum):
    EMPLEADOS = "empleados"


class Order(Base, IdMixin, TimestampMixin):
    __tablename__ = "orders"

    numero = Column(Integer, nullable=False, index=True)
    total = Column(Integer, nullable=False, default=0)  # COP, ya normalizado
    estado = Column(String(20), nullable=False, default=OrderStatus.PENDIENTE.value, index=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)
    cliente = Column(String(150), nullable=True)

    # Método principal (el de mayor monto) y estado de pago
    metodo_pago = Column(String(30), nullable=True)
    payment_status = Column(String(20), nullable=False, default="pendiente", index=True)

    # Crédito de empleados pendiente
    credit_type = Column(String(20), nullable=True)
    credit_amount = Column(Integer, nullable=True)
    credit_assigned_at = Column(DateTime, nullable=True)
    credit_employee_id = Column(String(64), nullable=True, index=True)
    credit_employee_name = Column(String(150), nullable=True)
    credit_settled_at = Column(DateTime, nullable=True)

    # Relationships
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.position"
    )
    payment_allocations = relationship(
        "OrderPaymentAllocation", back_populates="order", cascade="all, delete-orphan",
        order_by="OrderPaymentAllocation.position"
    )

    @property
    def has_credit(self) -> bool:
        return self.credit_type is not None


class OrderItem(Base, IdMixin):
    __tablename__ = "order_items"

    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(String(64), ForeignKey("menu_items.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Integer, nullable=True)  # Precio capturado al vender
    student_discount = Column(Boolean, nullable=False, default=False)
    notas = Column(Text, nullable=True)
    custom_key = Column(String(255), nullable=True)
    bowl_customization = Column(JSON, nullable=True)

    order = relationship("Order", back_populates="items")
    item = relationship("MenuItem", lazy="joined")


class OrderPaymentAllocation(Base, IdMixin):
    __tablename__ = "order_payment_allocations"

    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    metodo = Column(String(30), nullable=False)
    monto = Column(Integer, nullable=False)
    empleado_id = Column(String(64), nullable=True)
    empleado_nombre = Column(String(150), nullable=True)

    order = relationship("Order", back_populates="payment_allocations")
