"""
Formateadores y redondeo para pesos colombianos (COP)

El peso colombiano no maneja centavos en caja: todos los montos del sistema
son enteros y se muestran con punto como separador de miles ("$20.000").
"""
import math
import random
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_DOWN, ROUND_HALF_UP
from typing import Any


MONTHS_ES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre"
]
WEEKDAYS_ES = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]


def to_number(value: Any) -> float:
    """
    Convierte un valor arbitrario a número.

    Retorna NaN cuando el valor no es numérico; None equivale a 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return 0.0
        try:
            return float(cleaned)
        except ValueError:
            return math.nan
    return math.nan


def round_to_cop(value: Any) -> int:
    """
    Redondea al peso más cercano. Las mitades suben hacia +infinito
    (2.5 -> 3, -2.5 -> -2). Valores no numéricos o infinitos retornan 0.
    """
    number = to_number(value)
    if not math.isfinite(number):
        return 0
    try:
        exact = Decimal(str(number))
    except InvalidOperation:
        return 0
    rounding = ROUND_HALF_UP if exact >= 0 else ROUND_HALF_DOWN
    return int(exact.to_integral_value(rounding=rounding))


def format_cop(value: Any) -> str:
    """Formatea un monto como "$20.000" (sin decimales)."""
    amount = round_to_cop(value)
    formatted = f"{abs(amount):,}".replace(",", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}${formatted}"


def format_date_time(value: datetime) -> str:
    """Fecha y hora corta: 05/03/2025 14:30"""
    return value.strftime("%d/%m/%Y %H:%M")


def format_date(value: datetime) -> str:
    """Fecha larga en español con la primera letra en mayúscula."""
    weekday = WEEKDAYS_ES[value.weekday()]
    month = MONTHS_ES[value.month - 1]
    formatted = f"{weekday}, {value.day:02d} de {month} de {value.year}"
    return formatted[0].upper() + formatted[1:]


def generate_order_number() -> int:
    """Número de comanda de 4 dígitos."""
    return random.randint(1000, 9999)
