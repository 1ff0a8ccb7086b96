from sqlalchemy import Column, Integer, String, Text
from app.database.database import Base
from app.common.mixins import IdMixin, TimestampMixin


class MenuItem(Base, IdMixin, TimestampMixin):
    __tablename__ = "menu_items"

    codigo = Column(String(120), nullable=False, unique=True, index=True)
    nombre = Column(String(150), nullable=False)
    precio = Column(Integer, nullable=False, default=0)  # COP
    descripcion = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    categoria = Column(String(100), nullable=False, default="", index=True)
    stock = Column(Integer, nullable=False, default=0)

    # Inventariables / No inventariables
    inventario_categoria = Column(String(30), nullable=False, default="No inventariables")
    inventario_tipo = Column(String(20), nullable=True)   # cantidad | gramos
    unidad_medida = Column(String(5), nullable=True)      # kg | g | mg | ml (solo gramos)
