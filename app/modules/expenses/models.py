from sqlalchemy import Column, Date, Integer, String
from app.database.database import Base
from app.common.mixins import BaseMixin


class Gasto(Base, BaseMixin):
    __tablename__ = "gastos"

    descripcion = Column(String(255), nullable=False)
    monto = Column(Integer, nullable=False)  # COP
    categoria = Column(String(100), nullable=False, default="")
    fecha = Column(Date, nullable=False, index=True)
    metodo_pago = Column(String(30), nullable=False, default="efectivo")
