"""
Cantidades de inventario

Los productos inventariables se cuentan por unidades ("cantidad") o por peso
("gramos", guardado en la unidad del producto: mg, g o kg). Los mililitros no
se convierten a peso.
"""

import logging
import math
from typing import Any, Dict, Iterable, Optional

from app.modules.menu.schemas import InventoryCategory, InventoryType, MeasureUnit

logger = logging.getLogger(__name__)

WEIGHT_FACTORS = {
    MeasureUnit.MG: 0.001,
    MeasureUnit.G: 1,
    MeasureUnit.KG: 1000,
}


def _to_unit(value: Any, fallback: MeasureUnit) -> MeasureUnit:
    try:
        return MeasureUnit(value) if value else fallback
    except ValueError:
        return fallback


def _to_js_round(value: float) -> int:
    # Mitades hacia +infinito
    return math.floor(value + 0.5)


def convert_between_units(value: float, from_unit: MeasureUnit, to_unit: MeasureUnit) -> float:
    if from_unit == to_unit:
        return value
    if MeasureUnit.ML in (from_unit, to_unit):
        logger.warning(
            f"Conversión entre unidades incompatibles ({from_unit.value} -> {to_unit.value}), "
            f"se conserva el valor original"
        )
        return value
    return value * WEIGHT_FACTORS[from_unit] / WEIGHT_FACTORS[to_unit]


def normalize_quantity_for_item(
    item: Any,
    cantidad: Optional[float],
    tipo: Optional[str] = None,
    unidad: Optional[str] = None
) -> float:
    """
    Convierte una cantidad ingresada a la unidad de inventario del producto.

    Args:
        item: Producto del menú (o None)
        cantidad: Cantidad ingresada
        tipo: Tipo de inventario con que se ingresó (por defecto el del producto)
        unidad: Unidad con que se ingresó (por defecto la del producto)

    Returns:
        Cantidad en la unidad del producto; 0 para productos no inventariables
    """
    try:
        safe_cantidad = float(cantidad or 0)
    except (TypeError, ValueError):
        safe_cantidad = 0.0
    if not math.isfinite(safe_cantidad):
        safe_cantidad = 0.0

    if item is None or getattr(item, "inventario_categoria", None) != InventoryCategory.INVENTARIABLES.value \
            or safe_cantidad == 0:
        return 0

    resolved_tipo = tipo or getattr(item, "inventario_tipo", None) or InventoryType.CANTIDAD.value
    if resolved_tipo != InventoryType.GRAMOS.value:
        return _to_js_round(safe_cantidad)

    item_unit = _to_unit(getattr(item, "unidad_medida", None), MeasureUnit.G)
    from_unit = _to_unit(unidad, item_unit)

    if item_unit == MeasureUnit.ML:
        if from_unit != MeasureUnit.ML:
            logger.warning(
                f"No se puede convertir a mililitros desde {from_unit.value} (producto {item.id})"
            )
            return _to_js_round(safe_cantidad)
        return safe_cantidad

    if from_unit == MeasureUnit.ML:
        return _to_js_round(safe_cantidad)

    return _to_js_round(convert_between_units(safe_cantidad, from_unit, item_unit))


def aggregate_adjustments(adjustments: Iterable[Any]) -> Dict[str, float]:
    """Suma los deltas por producto; ignora deltas nulos o no finitos."""
    delta_by_item: Dict[str, float] = {}
    for adjustment in adjustments:
        delta = getattr(adjustment, "delta", None)
        if delta is None or not math.isfinite(delta) or delta == 0:
            continue
        delta_by_item[adjustment.item_id] = delta_by_item.get(adjustment.item_id, 0) + delta
    return delta_by_item


def apply_inventory_adjustments(menu_items: Iterable[Any], adjustments: Iterable[Any]) -> list:
    """
    Aplica los ajustes de stock sobre los productos (in situ).

    El stock resultante se redondea y nunca baja de 0.

    Returns:
        Productos cuyo stock cambió
    """
    delta_by_item = aggregate_adjustments(adjustments)
    if not delta_by_item:
        return []

    changed = []
    for item in menu_items:
        delta = delta_by_item.get(item.id)
        if delta is None:
            continue
        current_stock = item.stock or 0
        updated_stock = max(0, _to_js_round(current_stock + delta))
        if updated_stock != current_stock:
            item.stock = updated_stock
            changed.append(item)
    return changed
