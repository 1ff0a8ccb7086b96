from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.database import Base
from app.common.mixins import IdMixin
import enum


class CreditEntryType(str, enum.Enum):
    CARGO = "cargo"   # Consumo cargado al crédito del empleado
    ABONO = "abono"   # Pago que reduce el saldo


class EmployeeCreditEntry(Base, IdMixin):
    __tablename__ = "employee_credit_history"

    empleado_id = Column(String(64), ForeignKey("empleados.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(String(64), nullable=True, index=True)
    order_numero = Column(Integer, nullable=True)
    monto = Column(Integer, nullable=False)
    tipo = Column(String(10), nullable=False, default=CreditEntryType.CARGO.value)
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)

    empleado = relationship("Empleado", lazy="joined")
