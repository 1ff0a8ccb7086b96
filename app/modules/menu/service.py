from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from typing import Dict, Any, List, Optional
import logging

from app.common.text import generate_menu_item_code, normalize_text
from app.modules.menu.inventory import apply_inventory_adjustments, normalize_quantity_for_item
from app.modules.menu.models import MenuItem
from app.modules.menu.schemas import (
    InventoryAdjustment, InventoryCategory, InventoryType, MeasureUnit, MenuItemCreate, MenuItemUpdate
)

logger = logging.getLogger(__name__)


def _enum_or_none(enum_cls, value):
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


def ensure_menu_item_shape(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica las reglas de forma de un producto:
    - inventario_tipo solo para productos inventariables
    - unidad_medida solo para inventario por gramos
    - codigo generado a partir de categoría y nombre si falta
    """
    shaped = dict(data)
    categoria_inv = _enum_or_none(InventoryCategory, shaped.get("inventario_categoria"))
    tipo = _enum_or_none(InventoryType, shaped.get("inventario_tipo"))
    unidad = _enum_or_none(MeasureUnit, shaped.get("unidad_medida"))

    if categoria_inv != InventoryCategory.INVENTARIABLES:
        categoria_inv = InventoryCategory.NO_INVENTARIABLES
        tipo = None
    if tipo != InventoryType.GRAMOS:
        unidad = None

    shaped["inventario_categoria"] = categoria_inv.value
    shaped["inventario_tipo"] = tipo.value if tipo else None
    shaped["unidad_medida"] = unidad.value if unidad else None

    codigo = (shaped.get("codigo") or "").strip()
    shaped["codigo"] = codigo or generate_menu_item_code(shaped.get("nombre", ""), shaped.get("categoria"))
    return shaped


class MenuService:
    """Servicio para el catálogo del menú"""

    def __init__(self, db: Session):
        self.db = db

    def fetch_menu_items(self, q: Optional[str] = None, categoria: Optional[str] = None) -> Dict[str, Any]:
        """
        Listar productos del menú ordenados por nombre

        Args:
            q: Texto a buscar en nombre, código, descripción o keywords (sin tildes)
            categoria: Filtrar por categoría exacta

        Returns:
            Dict con menu_items y total
        """
        query = self.db.query(MenuItem)
        if categoria:
            query = query.filter(MenuItem.categoria == categoria)
        items = query.order_by(MenuItem.nombre).all()

        needle = normalize_text(q).strip() if q else ""
        if needle:
            items = [
                item for item in items
                if any(
                    needle in normalize_text(value)
                    for value in (item.nombre, item.codigo, item.descripcion, item.keywords)
                )
            ]

        return {"menu_items": items, "total": len(items)}

    def get_menu_item(self, item_id: str) -> MenuItem:
        item = self.db.query(MenuItem).filter(MenuItem.id == item_id).first()
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Producto no encontrado"
            )
        return item

    def create_menu_item(self, item_data: MenuItemCreate) -> MenuItem:
        """
        Crear producto del menú

        Raises:
            HTTPException: 409 si el id o el código ya existen
        """
        try:
            data = ensure_menu_item_shape(item_data.model_dump(exclude_none=True))

            existing = self.db.query(MenuItem).filter(MenuItem.codigo == data["codigo"]).first()
            if existing:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe un producto con el código '{data['codigo']}'"
                )
            if data.get("id") and self.db.get(MenuItem, data["id"]):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe un producto con el id '{data['id']}'"
                )

            item = MenuItem(**data)
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)
            logger.info(f"Producto creado: {item.id} ({item.nombre})")
            return item

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Error de integridad en base de datos"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    def update_menu_item(self, item_id: str, update_data: MenuItemUpdate) -> MenuItem:
        try:
            item = self.get_menu_item(item_id)

            current = {
                "codigo": item.codigo,
                "nombre": item.nombre,
                "categoria": item.categoria,
                "inventario_categoria": item.inventario_categoria,
                "inventario_tipo": item.inventario_tipo,
                "unidad_medida": item.unidad_medida,
            }
            merged = {**current, **update_data.model_dump(exclude_unset=True)}
            shaped = ensure_menu_item_shape(merged)

            if shaped["codigo"] != item.codigo:
                duplicate = self.db.query(MenuItem).filter(
                    MenuItem.codigo == shaped["codigo"],
                    MenuItem.id != item_id
                ).first()
                if duplicate:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=f"Ya existe otro producto con el código '{shaped['codigo']}'"
                    )

            for field, value in shaped.items():
                setattr(item, field, value)

            self.db.commit()
            self.db.refresh(item)
            return item

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando producto: {str(e)}"
            )

    def delete_menu_item(self, item_id: str) -> Dict[str, str]:
        try:
            item = self.get_menu_item(item_id)
            self.db.delete(item)
            self.db.commit()
            logger.info(f"Producto eliminado: {item_id}")
            return {"message": "Producto eliminado exitosamente"}

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="El producto tiene órdenes asociadas y no puede eliminarse"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando producto: {str(e)}"
            )

    def apply_inventory_adjustments(self, adjustments: List[InventoryAdjustment]) -> List[MenuItem]:
        """
        Aplica ajustes de stock (deltas) a los productos indicados

        Returns:
            Productos cuyo stock cambió
        """
        item_ids = {adjustment.item_id for adjustment in adjustments}
        if not item_ids:
            return []

        try:
            items = self.db.query(MenuItem).filter(MenuItem.id.in_(item_ids)).all()
            missing = item_ids - {item.id for item in items}
            if missing:
                logger.warning(f"Ajustes de inventario para productos inexistentes: {sorted(missing)}")

            changed = apply_inventory_adjustments(items, adjustments)
            self.db.commit()
            for item in changed:
                self.db.refresh(item)
            logger.info(f"Inventario ajustado en {len(changed)} productos")
            return changed

        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error interno: {str(e)}"
            )

    def normalize_quantity(self, item_id: str, cantidad: Optional[float],
                           tipo: Optional[str] = None, unidad: Optional[str] = None) -> float:
        item = self.get_menu_item(item_id)
        return normalize_quantity_for_item(item, cantidad, tipo, unidad)
