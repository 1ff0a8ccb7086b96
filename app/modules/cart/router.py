from fastapi import APIRouter, HTTPException, status

from app.common.formatters import format_cop, round_to_cop
from app.modules.cart.bowl import (
    BowlCustomizationError, build_bowl_custom_key, build_bowl_notes,
    is_bowl_salado, validate_bowl_customization
)
from app.modules.cart.pricing import (
    calculate_raw_cart_total, get_effective_unit_price, get_line_subtotal,
    get_unit_price, normalize_cart_total
)
from app.modules.cart.schemas import (
    BowlLineRequest, CartItem, CartLineQuote, CartQuoteOut, CartQuoteRequest
)

cart_router = APIRouter(prefix="/cart", tags=["Cart"])


@cart_router.post("/quote", response_model=CartQuoteOut)
def quote_cart(request: CartQuoteRequest):
    """
    Cotiza un carrito: precio unitario, precio con descuento estudiante,
    subtotal por línea y total con redondeo de caja.
    """
    lines = [
        CartLineQuote(
            item_id=cart_item.item.id,
            nombre=cart_item.item.nombre,
            cantidad=cart_item.cantidad,
            custom_key=cart_item.custom_key,
            student_discount=cart_item.student_discount,
            unit_price=round_to_cop(get_unit_price(cart_item)),
            effective_unit_price=round_to_cop(get_effective_unit_price(cart_item)),
            subtotal=round_to_cop(get_line_subtotal(cart_item))
        )
        for cart_item in request.items
    ]
    raw_total = round_to_cop(calculate_raw_cart_total(request.items))
    total = normalize_cart_total(raw_total)
    return CartQuoteOut(lines=lines, raw_total=raw_total, total=total, total_formatted=format_cop(total))


@cart_router.post("/bowl", response_model=CartItem)
def build_bowl_line(request: BowlLineRequest):
    """
    Valida la personalización de un Bowl salado y retorna la línea lista
    para agregar al carrito (notas y custom_key incluidos).
    """
    if not is_bowl_salado(request.item):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="El producto no es un Bowl salado"
        )
    try:
        validate_bowl_customization(request.customization)
    except BowlCustomizationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return CartItem(
        item=request.item,
        cantidad=1,
        precio_unitario=request.item.precio,
        notas=build_bowl_notes(request.customization),
        custom_key=build_bowl_custom_key(request.item.id, request.customization),
        bowl_customization=request.customization
    )
