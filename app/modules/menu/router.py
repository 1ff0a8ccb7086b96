from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database.database import get_db
from app.modules.menu import service
from app.modules.menu.schemas import (
    InventoryAdjustmentRequest, MenuItemCreate, MenuItemList, MenuItemOut, MenuItemUpdate,
    QuantityNormalizationOut, QuantityNormalizationRequest
)

menu_router = APIRouter(prefix="/menu", tags=["Menu"])


@menu_router.get("/", response_model=MenuItemList)
def list_menu_items(
    q: Optional[str] = Query(None, description="Buscar por nombre, código o keywords"),
    categoria: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    menu_service = service.MenuService(db)
    return menu_service.fetch_menu_items(q, categoria)


@menu_router.post("/", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(item: MenuItemCreate, db: Session = Depends(get_db)):
    menu_service = service.MenuService(db)
    return menu_service.create_menu_item(item)


@menu_router.post("/inventory/adjustments", response_model=List[MenuItemOut])
def apply_inventory_adjustments(request: InventoryAdjustmentRequest, db: Session = Depends(get_db)):
    """Descuenta o suma stock; retorna solo los productos que cambiaron."""
    menu_service = service.MenuService(db)
    return menu_service.apply_inventory_adjustments(request.adjustments)


@menu_router.get("/{item_id}", response_model=MenuItemOut)
def get_menu_item(item_id: str, db: Session = Depends(get_db)):
    menu_service = service.MenuService(db)
    return menu_service.get_menu_item(item_id)


@menu_router.post("/{item_id}/normalize-quantity", response_model=QuantityNormalizationOut)
def normalize_quantity(item_id: str, request: QuantityNormalizationRequest, db: Session = Depends(get_db)):
    menu_service = service.MenuService(db)
    cantidad = menu_service.normalize_quantity(item_id, request.cantidad, request.tipo, request.unidad)
    return {"item_id": item_id, "cantidad": cantidad}


@menu_router.patch("/{item_id}", response_model=MenuItemOut)
def update_menu_item(item_id: str, update: MenuItemUpdate, db: Session = Depends(get_db)):
    menu_service = service.MenuService(db)
    return menu_service.update_menu_item(item_id, update)


@menu_router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(item_id: str, db: Session = Depends(get_db)):
    menu_service = service.MenuService(db)
    menu_service.delete_menu_item(item_id)
