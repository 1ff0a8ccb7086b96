"""
Tests para el módulo de Menú

Cubre:
- CRUD de productos con reglas de forma del inventario
- Búsqueda sin tildes
- Normalización de cantidades (unidades y gramos)
- Ajustes de stock
"""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.modules.menu.inventory import (
    aggregate_adjustments, apply_inventory_adjustments, convert_between_units, normalize_quantity_for_item
)
from app.modules.menu.schemas import InventoryAdjustment, MeasureUnit, MenuItemCreate, MenuItemUpdate
from app.modules.menu.service import MenuService, ensure_menu_item_shape


def inventory_item(**overrides):
    data = {
        "id": "item-1",
        "stock": 10,
        "inventario_categoria": "Inventariables",
        "inventario_tipo": "gramos",
        "unidad_medida": "kg",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestMenuItemShape:
    """Tests de las reglas de forma"""

    def test_non_inventory_item_clears_type_and_unit(self):
        shaped = ensure_menu_item_shape({
            "nombre": "Café", "categoria": "Bebidas",
            "inventario_categoria": "No inventariables", "inventario_tipo": "gramos", "unidad_medida": "g"
        })
        assert shaped["inventario_tipo"] is None
        assert shaped["unidad_medida"] is None

    def test_unit_only_for_weight_inventory(self):
        shaped = ensure_menu_item_shape({
            "nombre": "Galletas", "categoria": "Snacks",
            "inventario_categoria": "Inventariables", "inventario_tipo": "cantidad", "unidad_medida": "kg"
        })
        assert shaped["inventario_tipo"] == "cantidad"
        assert shaped["unidad_medida"] is None

    def test_invalid_values_fall_back(self):
        shaped = ensure_menu_item_shape({"nombre": "X", "inventario_categoria": "otra", "inventario_tipo": "litros"})
        assert shaped["inventario_categoria"] == "No inventariables"
        assert shaped["inventario_tipo"] is None

    def test_generates_code_when_missing(self):
        shaped = ensure_menu_item_shape({"nombre": "Jugo de Mango", "categoria": "Bebidas Naturales"})
        assert shaped["codigo"].startswith("bebidas-naturales-jugo-de-mango-")
        assert ensure_menu_item_shape({"nombre": "X", "codigo": " abc "})["codigo"] == "abc"


class TestQuantityNormalization:
    """Tests de conversión de cantidades"""

    def test_non_inventory_item_is_zero(self):
        assert normalize_quantity_for_item(inventory_item(inventario_categoria="No inventariables"), 5) == 0
        assert normalize_quantity_for_item(None, 5) == 0

    def test_count_inventory_rounds(self):
        item = inventory_item(inventario_tipo="cantidad", unidad_medida=None)
        assert normalize_quantity_for_item(item, 2.5) == 3
        assert normalize_quantity_for_item(item, 2.4) == 2

    def test_grams_to_item_unit(self):
        item = inventory_item()
        assert normalize_quantity_for_item(item, 1500, unidad="g") == 2
        assert normalize_quantity_for_item(item, 3) == 3

    def test_kilograms_to_grams(self):
        item = inventory_item(unidad_medida="g")
        assert normalize_quantity_for_item(item, 0.25, unidad="kg") == 250

    def test_milliliters_are_not_converted(self):
        item = inventory_item(unidad_medida="ml")
        assert normalize_quantity_for_item(item, 333.3, unidad="ml") == 333.3
        assert normalize_quantity_for_item(item, 2.6, unidad="g") == 3
        assert convert_between_units(5, MeasureUnit.ML, MeasureUnit.G) == 5

    def test_invalid_quantity_is_zero(self):
        assert normalize_quantity_for_item(inventory_item(), "abc") == 0
        assert normalize_quantity_for_item(inventory_item(), float("inf")) == 0


class TestInventoryAdjustments:
    """Tests de ajustes de stock"""

    def test_aggregates_by_item(self):
        adjustments = [
            InventoryAdjustment(item_id="a", delta=-2),
            InventoryAdjustment(item_id="a", delta=-1),
            InventoryAdjustment(item_id="b", delta=0),
        ]
        assert aggregate_adjustments(adjustments) == {"a": -3}

    def test_stock_never_negative(self):
        items = [inventory_item(id="a", stock=2), inventory_item(id="b", stock=5)]
        changed = apply_inventory_adjustments(items, [
            InventoryAdjustment(item_id="a", delta=-5),
            InventoryAdjustment(item_id="b", delta=1.4),
        ])
        assert [item.id for item in changed] == ["a", "b"]
        assert items[0].stock == 0
        assert items[1].stock == 6

    def test_unchanged_items_not_returned(self):
        items = [inventory_item(id="a", stock=0)]
        assert apply_inventory_adjustments(items, [InventoryAdjustment(item_id="a", delta=-3)]) == []


class TestMenuService:
    """Tests del servicio de menú"""

    def test_create_and_search_without_accents(self, db_session):
        menu_service = MenuService(db_session)
        menu_service.create_menu_item(MenuItemCreate(
            nombre="Sándwich cubano", precio=15000, categoria="Sándwiches", keywords="cerdo"
        ))
        menu_service.create_menu_item(MenuItemCreate(nombre="Aromática", precio=3000, categoria="Bebidas"))

        result = menu_service.fetch_menu_items(q="sandwich")
        assert result["total"] == 1
        assert result["menu_items"][0].nombre == "Sándwich cubano"
        assert menu_service.fetch_menu_items(q="CERDO")["total"] == 1
        assert menu_service.fetch_menu_items(categoria="Bebidas")["total"] == 1

    def test_duplicate_code_conflict(self, db_session, sandwich):
        menu_service = MenuService(db_session)
        with pytest.raises(HTTPException) as exc_info:
            menu_service.create_menu_item(MenuItemCreate(
                codigo=sandwich.codigo, nombre="Otro", precio=1000, categoria="Sándwiches"
            ))
        assert exc_info.value.status_code == 409

    def test_update_reshapes_inventory_fields(self, db_session, bebida):
        menu_service = MenuService(db_session)
        updated = menu_service.update_menu_item(bebida.id, MenuItemUpdate(inventario_categoria="No inventariables"))
        assert updated.inventario_categoria == "No inventariables"
        assert updated.inventario_tipo is None

    def test_get_missing_item(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            MenuService(db_session).get_menu_item("no-existe")
        assert exc_info.value.status_code == 404


class TestMenuEndpoints:
    """Tests de los endpoints del menú"""

    def test_list(self, client, sandwich, bebida):
        response = client.get("/api/v1/menu/")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [item["nombre"] for item in data["menu_items"]] == ["Limonada de coco", "Sándwich de pollo"]

    def test_create_rejects_blank_name(self, client):
        response = client.post("/api/v1/menu/", json={"nombre": "   ", "precio": 1000, "categoria": "Bebidas"})
        assert response.status_code == 422

    def test_inventory_adjustments(self, client, bebida):
        response = client.post("/api/v1/menu/inventory/adjustments", json={
            "adjustments": [{"item_id": bebida.id, "delta": -3}, {"item_id": "no-existe", "delta": -1}]
        })
        assert response.status_code == 200
        assert response.json()[0]["stock"] == 7

    def test_normalize_quantity(self, client, bebida):
        response = client.post(f"/api/v1/menu/{bebida.id}/normalize-quantity", json={"cantidad": 1.6})
        assert response.status_code == 200
        assert response.json() == {"item_id": bebida.id, "cantidad": 2}

    def test_delete(self, client, bebida):
        assert client.delete(f"/api/v1/menu/{bebida.id}").status_code == 204
        assert client.get(f"/api/v1/menu/{bebida.id}").status_code == 404
