"""
Tests para el motor de precios del carrito y el Bowl salado
"""

import pytest

from app.modules.cart.bowl import (
    BowlCustomizationError, build_bowl_custom_key, build_bowl_notes,
    is_bowl_salado, validate_bowl_customization
)
from app.modules.cart.pricing import (
    add_to_cart, build_notes_with_student_discount, calculate_cart_total,
    calculate_raw_cart_total, extract_student_discount_from_notes, get_effective_unit_price,
    get_line_subtotal, get_unit_price, is_sandwich_item, normalize_cart_total,
    remove_from_cart, toggle_student_discount, update_quantity
)
from app.modules.cart.schemas import BowlCustomization, CartItem
from app.modules.menu.schemas import MenuItemOut


# ===== FIXTURES =====

@pytest.fixture
def sandwich_item():
    return MenuItemOut(id="sanduches-0", nombre="Sándwich de pollo", precio=13333, categoria="Sándwiches")


@pytest.fixture
def drink_item():
    return MenuItemOut(id="bebidas-0", nombre="Limonada", precio=8500, categoria="Bebidas")


@pytest.fixture
def bowl_item():
    return MenuItemOut(id="bowlssalados-0", nombre="Bowl salado", precio=22000, categoria="Bowls")


@pytest.fixture
def full_bowl():
    return BowlCustomization(
        bases=["Quinua", "Arroz"],
        toppings=["Guacamole", "Maíz tierno", "Pepino", "Queso feta"],
        proteina="Pechuga de pollo"
    )


class TestPricing:
    """Tests de precios por línea y total"""

    def test_student_discount_rounds_to_peso(self, sandwich_item):
        line = CartItem(item=sandwich_item, cantidad=1, student_discount=True)
        assert get_effective_unit_price(line) == 12000

    def test_unit_price_prefers_captured_price(self, sandwich_item):
        line = CartItem(item=sandwich_item, cantidad=2, precio_unitario=10000)
        assert get_unit_price(line) == 10000
        assert get_line_subtotal(line) == 20000

    def test_captured_price_zero_is_kept(self, drink_item):
        line = CartItem(item=drink_item, cantidad=1, precio_unitario=0)
        assert get_unit_price(line) == 0

    def test_unit_price_falls_back_to_menu(self, drink_item):
        assert get_unit_price(CartItem(item=drink_item, cantidad=1)) == 8500

    def test_normalize_total(self):
        assert normalize_cart_total(12050) == 12100
        assert normalize_cart_total(12000) == 12000
        assert normalize_cart_total(12049.6) == 12100
        assert normalize_cart_total(150) == 200
        assert normalize_cart_total(0) == 0

    def test_cart_total_is_normalized(self, drink_item, sandwich_item):
        cart = [
            CartItem(item=drink_item, cantidad=3),
            CartItem(item=sandwich_item, cantidad=1, precio_unitario=13000),
        ]
        assert calculate_raw_cart_total(cart) == 38500
        assert calculate_cart_total(cart) == 38500

        cart.append(CartItem(item=drink_item, cantidad=1, precio_unitario=50))
        assert calculate_cart_total(cart) == 38600

    def test_sandwich_detection_ignores_accents(self, sandwich_item, drink_item):
        assert is_sandwich_item(sandwich_item)
        assert is_sandwich_item(MenuItemOut(id="x", nombre="Sanduche", precio=1, categoria="Sanduches"))
        assert not is_sandwich_item(drink_item)


class TestCartEditing:
    """Tests de edición del carrito"""

    def test_add_same_item_increments_quantity(self, drink_item):
        cart = add_to_cart([], drink_item)
        cart = add_to_cart(cart, drink_item)
        assert len(cart) == 1
        assert cart[0].cantidad == 2
        assert cart[0].precio_unitario == 8500

    def test_different_custom_key_is_new_line(self, bowl_item):
        cart = add_to_cart([], bowl_item, custom_key="a")
        cart = add_to_cart(cart, bowl_item, custom_key="b")
        assert len(cart) == 2

    def test_update_quantity_zero_removes_line(self, drink_item):
        cart = add_to_cart([], drink_item)
        assert update_quantity(cart, drink_item.id, None, 0) == []
        assert update_quantity(cart, drink_item.id, None, 4)[0].cantidad == 4

    def test_remove_from_cart(self, drink_item, sandwich_item):
        cart = add_to_cart(add_to_cart([], drink_item), sandwich_item)
        assert [line.item.id for line in remove_from_cart(cart, drink_item.id, None)] == [sandwich_item.id]

    def test_student_discount_only_for_sandwiches(self, drink_item, sandwich_item):
        cart = add_to_cart(add_to_cart([], drink_item), sandwich_item)
        cart = toggle_student_discount(cart, drink_item.id, None)
        cart = toggle_student_discount(cart, sandwich_item.id, None)
        assert [line.student_discount for line in cart] == [False, True]


class TestStudentDiscountNotes:
    """Tests de la marca de descuento en notas heredadas"""

    def test_extracts_marker_line(self):
        assert extract_student_discount_from_notes("Sin cebolla\nDescuento estudiante 10%") == (True, "Sin cebolla")
        assert extract_student_discount_from_notes("descuento ESTUDIANTE 10%") == (True, None)
        assert extract_student_discount_from_notes(None) == (False, None)

    def test_build_notes(self):
        assert build_notes_with_student_discount("Sin cebolla", True) == "Sin cebolla\nDescuento estudiante 10%"
        assert build_notes_with_student_discount(None, True) == "Descuento estudiante 10%"
        assert build_notes_with_student_discount("Sin cebolla\nDescuento estudiante 10%", False) == "Sin cebolla"


class TestBowlSalado:
    """Tests de la personalización del Bowl salado"""

    def test_detects_bowl(self, bowl_item, drink_item):
        assert is_bowl_salado(bowl_item)
        assert not is_bowl_salado(drink_item)

    def test_valid_customization(self, full_bowl):
        validate_bowl_customization(full_bowl)

    def test_incomplete_selection_rejected(self, full_bowl):
        incomplete = full_bowl.model_copy(update={"toppings": ["Guacamole"]})
        with pytest.raises(BowlCustomizationError):
            validate_bowl_customization(incomplete)

    def test_complete_selection_needs_both_bases(self, full_bowl):
        with pytest.raises(BowlCustomizationError):
            validate_bowl_customization(full_bowl.model_copy(update={"bases": ["Arroz"]}))

    def test_unknown_protein_rejected(self, full_bowl):
        with pytest.raises(BowlCustomizationError):
            validate_bowl_customization(full_bowl.model_copy(update={"proteina": "Tofu"}))

    def test_custom_key_ignores_selection_order(self, full_bowl):
        reordered = full_bowl.model_copy(update={
            "bases": ["Arroz", "Quinua"],
            "toppings": list(reversed(full_bowl.toppings)),
        })
        assert build_bowl_custom_key("bowlssalados-0", full_bowl) == build_bowl_custom_key("bowlssalados-0", reordered)

    def test_notes(self, full_bowl):
        notes = build_bowl_notes(full_bowl)
        assert notes.splitlines() == [
            "Bases: Quinua, Arroz",
            "Toppings: Guacamole, Maíz tierno, Pepino, Queso feta",
            "Proteína: Pechuga de pollo",
        ]


class TestCartEndpoints:
    """Tests de los endpoints del carrito"""

    def test_quote(self, client, sandwich_item, drink_item):
        payload = {"items": [
            {"item": sandwich_item.model_dump(mode="json"), "cantidad": 1, "student_discount": True},
            {"item": drink_item.model_dump(mode="json"), "cantidad": 1, "precio_unitario": 50},
        ]}
        response = client.post("/api/v1/cart/quote", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["raw_total"] == 12050
        assert data["total"] == 12100
        assert data["total_formatted"] == "$12.100"
        assert data["lines"][0]["effective_unit_price"] == 12000

    def test_bowl_line(self, client, bowl_item, full_bowl):
        payload = {"item": bowl_item.model_dump(mode="json"), "customization": full_bowl.model_dump()}
        response = client.post("/api/v1/cart/bowl", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["cantidad"] == 1
        assert data["precio_unitario"] == 22000
        assert data["custom_key"].startswith("bowlssalados-0|Arroz-Quinua|")

    def test_bowl_line_rejects_other_items(self, client, drink_item, full_bowl):
        payload = {"item": drink_item.model_dump(mode="json"), "customization": full_bowl.model_dump()}
        response = client.post("/api/v1/cart/bowl", json=payload)
        assert response.status_code == 422

    def test_bowl_line_rejects_incomplete_selection(self, client, bowl_item):
        payload = {"item": bowl_item.model_dump(mode="json"), "customization": {"bases": ["Arroz"]}}
        response = client.post("/api/v1/cart/bowl", json=payload)
        assert response.status_code == 422
