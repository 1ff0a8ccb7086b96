"""
Motor de precios del carrito

Calcula precio unitario, precio efectivo (descuento estudiante), subtotal por
línea y total del carrito. Incluye las operaciones de edición del carrito de
la caja (agregar, cambiar cantidad, quitar, descuento estudiante).

Las funciones aceptan tanto esquemas CartItem como filas OrderItem: solo
leen item.precio, precio_unitario, cantidad y student_discount.
"""

from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from app.common.formatters import round_to_cop
from app.common.text import normalize_text
from app.modules.cart.schemas import CartItem


STUDENT_DISCOUNT_RATE = Decimal("0.1")
STUDENT_DISCOUNT_NOTE = "Descuento estudiante 10%"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_sandwich_item(item: Any) -> bool:
    categoria = normalize_text(getattr(item, "categoria", None))
    return "sandwich" in categoria or "sanduch" in categoria


def get_unit_price(cart_item: Any):
    """Precio unitario guardado en la línea; si no existe, el del catálogo."""
    precio_unitario = getattr(cart_item, "precio_unitario", None)
    if _is_number(precio_unitario):
        return precio_unitario
    return cart_item.item.precio


def get_effective_unit_price(cart_item: Any):
    """Precio unitario con el 10% de descuento estudiante (redondeado) si aplica."""
    base_price = get_unit_price(cart_item)
    if getattr(cart_item, "student_discount", False):
        return round_to_cop(Decimal(str(base_price)) * (1 - STUDENT_DISCOUNT_RATE))
    return base_price


def get_line_subtotal(cart_item: Any):
    return get_effective_unit_price(cart_item) * cart_item.cantidad


def normalize_cart_total(total: Any) -> int:
    """
    Redondeo de caja: un total terminado en 50 (módulo 100) sube 50 pesos.
    """
    rounded = round_to_cop(total)
    if rounded % 100 == 50:
        return rounded + 50
    return rounded


def calculate_raw_cart_total(cart: Iterable[Any]):
    return sum(get_line_subtotal(cart_item) for cart_item in cart)


def calculate_cart_total(cart: Iterable[Any]) -> int:
    return normalize_cart_total(calculate_raw_cart_total(cart))


# ===== NOTAS (registros heredados) =====

def extract_student_discount_from_notes(notes: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Los registros antiguos marcan el descuento estudiante como una línea de
    las notas. Retorna (student_discount, notas_sin_la_marca).
    """
    if not notes:
        return False, None

    student_discount = False
    kept_lines = []
    for raw_line in notes.split("\n"):
        if raw_line.strip().lower() == STUDENT_DISCOUNT_NOTE.lower():
            student_discount = True
            continue
        kept_lines.append(raw_line)

    cleaned = "\n".join(kept_lines).strip()
    return student_discount, cleaned or None


def build_notes_with_student_discount(notes: Optional[str], student_discount: bool) -> Optional[str]:
    _, cleaned = extract_student_discount_from_notes(notes)
    if not student_discount:
        return cleaned
    return f"{cleaned}\n{STUDENT_DISCOUNT_NOTE}" if cleaned else STUDENT_DISCOUNT_NOTE


# ===== EDICIÓN DEL CARRITO =====

def _same_line(cart_item: Any, item_id: str, custom_key: Optional[str]) -> bool:
    return cart_item.item.id == item_id and cart_item.custom_key == custom_key


def add_to_cart(cart: List[Any], item: Any, notas: Optional[str] = None,
                custom_key: Optional[str] = None, bowl_customization: Any = None) -> List[Any]:
    """
    Agrega una unidad del producto. Si ya existe una línea con el mismo
    producto y custom_key, solo incrementa la cantidad.
    """
    if any(_same_line(entry, item.id, custom_key) for entry in cart):
        return [
            entry.model_copy(update={"cantidad": entry.cantidad + 1})
            if _same_line(entry, item.id, custom_key) else entry
            for entry in cart
        ]

    return [*cart, CartItem(
        item=item,
        cantidad=1,
        notas=notas,
        custom_key=custom_key,
        bowl_customization=bowl_customization,
        precio_unitario=item.precio,
        student_discount=False,
    )]


def update_quantity(cart: List[Any], item_id: str, custom_key: Optional[str], cantidad: int) -> List[Any]:
    """Cambia la cantidad de una línea; cantidad <= 0 la elimina."""
    if cantidad <= 0:
        return remove_from_cart(cart, item_id, custom_key)
    return [
        entry.model_copy(update={"cantidad": cantidad})
        if _same_line(entry, item_id, custom_key) else entry
        for entry in cart
    ]


def remove_from_cart(cart: List[Any], item_id: str, custom_key: Optional[str]) -> List[Any]:
    return [entry for entry in cart if not _same_line(entry, item_id, custom_key)]


def toggle_student_discount(cart: List[Any], item_id: str, custom_key: Optional[str]) -> List[Any]:
    """El descuento estudiante solo aplica a sándwiches."""
    return [
        entry.model_copy(update={"student_discount": not entry.student_discount})
        if _same_line(entry, item_id, custom_key) and is_sandwich_item(entry.item) else entry
        for entry in cart
    ]
