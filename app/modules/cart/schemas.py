"""
Esquemas Pydantic del carrito de la caja
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from app.modules.menu.schemas import MenuItemOut


class BowlCustomization(BaseModel):
    bases: List[str] = Field(default_factory=list)
    toppings: List[str] = Field(default_factory=list)
    proteina: str = ""


class CartItem(BaseModel):
    """Línea del carrito o de una orden"""
    item: MenuItemOut
    cantidad: int = Field(..., gt=0)
    precio_unitario: Optional[int] = Field(None, ge=0, description="Precio capturado al agregar")
    student_discount: bool = False
    notas: Optional[str] = None
    custom_key: Optional[str] = None
    bowl_customization: Optional[BowlCustomization] = None

    class Config:
        from_attributes = True


class CartQuoteRequest(BaseModel):
    items: List[CartItem]


class CartLineQuote(BaseModel):
    item_id: str
    nombre: str
    cantidad: int
    custom_key: Optional[str] = None
    student_discount: bool
    unit_price: int
    effective_unit_price: int
    subtotal: int


class CartQuoteOut(BaseModel):
    lines: List[CartLineQuote]
    raw_total: int = Field(description="Suma de subtotales")
    total: int = Field(description="Total con redondeo de caja")
    total_formatted: str


class BowlLineRequest(BaseModel):
    item: MenuItemOut
    customization: BowlCustomization
