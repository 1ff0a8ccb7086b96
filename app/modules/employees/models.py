from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database.database import Base
from app.common.mixins import BaseMixin, IdMixin, TimestampMixin


class Empleado(Base, BaseMixin):
    __tablename__ = "empleados"

    nombre = Column(String(150), nullable=False)
    telefono = Column(String(30), nullable=True)
    email = Column(String(150), nullable=True)
    horas_dia = Column(Float, nullable=False, default=8)
    dias_semana = Column(Integer, nullable=False, default=5)
    salario_hora = Column(Integer, nullable=False, default=0)  # COP
    activo = Column(Boolean, nullable=False, default=True)
    horario_base = Column(JSON, nullable=True)  # {"monday": {"active": true, "hours": 8}, ...}

    weekly_hours = relationship("EmployeeWeeklyHours", back_populates="empleado", cascade="all, delete-orphan")


class EmployeeWeeklyHours(Base, IdMixin, TimestampMixin):
    __tablename__ = "employee_weekly_hours"

    empleado_id = Column(String(64), ForeignKey("empleados.id", ondelete="CASCADE"), nullable=False, index=True)
    week_key = Column(String(10), nullable=False, index=True)  # 2025-W05
    horas = Column(JSON, nullable=False)

    empleado = relationship("Empleado", back_populates="weekly_hours")

    __table_args__ = (
        UniqueConstraint("empleado_id", "week_key", name="uq_employee_week"),
    )
