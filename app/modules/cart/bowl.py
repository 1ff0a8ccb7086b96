"""
Personalización del Bowl salado

El bowl se arma eligiendo bases, toppings y una proteína. Cada combinación
distinta es una línea independiente del carrito (custom_key).
"""

from typing import Any, List

BOWL_SALADO_ID = "bowlssalados-0"
BOWL_BASE_OPTIONS = ("Arroz", "Pasta", "Quinua")
BOWL_TOPPING_OPTIONS = (
    "Maíz tierno",
    "Champiñones",
    "Pico de gallo",
    "Guacamole",
    "Tocineta",
    "Chips de arracacha",
    "Queso feta",
    "Zanahoria",
    "Pepino",
)
BOWL_PROTEIN_OPTIONS = ("Pechuga de pollo", "Jamón de cerdo", "Carne desmechada", "Champiñones", "Carne Molida")
BOWL_BASE_LIMIT = 2
BOWL_TOPPING_LIMIT = 4


class BowlCustomizationError(ValueError):
    """Selección de bowl incompleta o con opciones desconocidas"""


def is_bowl_salado(item: Any) -> bool:
    nombre = (getattr(item, "nombre", None) or "").lower()
    return getattr(item, "id", None) == BOWL_SALADO_ID or nombre == "bowl salado"


def _check_options(selected: List[str], options: tuple, label: str) -> None:
    unknown = [option for option in selected if option not in options]
    if unknown:
        raise BowlCustomizationError(f"{label} no válidos: {', '.join(unknown)}")
    if len(set(selected)) != len(selected):
        raise BowlCustomizationError(f"{label} repetidos en la selección")


def validate_bowl_customization(customization: Any) -> None:
    """
    Una selección completa tiene exactamente BOWL_BASE_LIMIT bases,
    BOWL_TOPPING_LIMIT toppings y una proteína del catálogo.

    Raises:
        BowlCustomizationError: Si la selección no es válida
    """
    bases = list(customization.bases)
    toppings = list(customization.toppings)

    _check_options(bases, BOWL_BASE_OPTIONS, "Bases")
    _check_options(toppings, BOWL_TOPPING_OPTIONS, "Toppings")

    if len(bases) != BOWL_BASE_LIMIT:
        raise BowlCustomizationError(f"Debe seleccionar {BOWL_BASE_LIMIT} bases")
    if len(toppings) != BOWL_TOPPING_LIMIT:
        raise BowlCustomizationError(f"Debe seleccionar {BOWL_TOPPING_LIMIT} toppings")
    if customization.proteina not in BOWL_PROTEIN_OPTIONS:
        raise BowlCustomizationError("Debe seleccionar una proteína válida")


def build_bowl_notes(customization: Any) -> str:
    return "\n".join([
        f"Bases: {', '.join(customization.bases)}",
        f"Toppings: {', '.join(customization.toppings)}",
        f"Proteína: {customization.proteina}",
    ])


def build_bowl_custom_key(item_id: str, customization: Any) -> str:
    """Clave estable: el orden en que se eligieron las opciones no importa."""
    return "|".join([
        item_id,
        "-".join(sorted(customization.bases)),
        "-".join(sorted(customization.toppings)),
        customization.proteina,
    ])
