from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class InventoryCategory(str, Enum):
    INVENTARIABLES = "Inventariables"
    NO_INVENTARIABLES = "No inventariables"


class InventoryType(str, Enum):
    CANTIDAD = "cantidad"
    GRAMOS = "gramos"


class MeasureUnit(str, Enum):
    KG = "kg"
    G = "g"
    MG = "mg"
    ML = "ml"


class MenuItemCreate(BaseModel):
    id: Optional[str] = Field(None, max_length=64, description="ID propio (ej: sanduches-0)")
    codigo: Optional[str] = Field(None, max_length=120)
    nombre: str = Field(..., min_length=1, max_length=150)
    precio: int = Field(..., ge=0, description="Precio en COP")
    descripcion: Optional[str] = None
    keywords: Optional[str] = None
    categoria: str = Field(..., min_length=1, max_length=100)
    stock: int = Field(default=0)
    inventario_categoria: InventoryCategory = InventoryCategory.NO_INVENTARIABLES
    inventario_tipo: Optional[InventoryType] = None
    unidad_medida: Optional[MeasureUnit] = None

    @field_validator('nombre', 'categoria')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El campo no puede estar vacío')
        return cleaned


class MenuItemUpdate(BaseModel):
    codigo: Optional[str] = None
    nombre: Optional[str] = None
    precio: Optional[int] = Field(None, ge=0)
    descripcion: Optional[str] = None
    keywords: Optional[str] = None
    categoria: Optional[str] = None
    stock: Optional[int] = None
    inventario_categoria: Optional[InventoryCategory] = None
    inventario_tipo: Optional[InventoryType] = None
    unidad_medida: Optional[MeasureUnit] = None


class MenuItemOut(BaseModel):
    id: str
    codigo: Optional[str] = None
    nombre: str
    precio: int
    descripcion: Optional[str] = None
    keywords: Optional[str] = None
    categoria: str = ""
    stock: int = 0
    inventario_categoria: InventoryCategory = InventoryCategory.NO_INVENTARIABLES
    inventario_tipo: Optional[InventoryType] = None
    unidad_medida: Optional[MeasureUnit] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MenuItemList(BaseModel):
    menu_items: List[MenuItemOut]
    total: int


class InventoryAdjustment(BaseModel):
    item_id: str
    delta: float = Field(..., description="Cambio de stock (negativo para descontar)")


class InventoryAdjustmentRequest(BaseModel):
    adjustments: List[InventoryAdjustment]


class QuantityNormalizationRequest(BaseModel):
    cantidad: Optional[float] = None
    tipo: Optional[InventoryType] = None
    unidad: Optional[MeasureUnit] = None


class QuantityNormalizationOut(BaseModel):
    item_id: str
    cantidad: float
