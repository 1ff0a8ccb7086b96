"""
Tests para utilidades comunes: redondeo COP, formatos, texto y middleware
"""

import math
from datetime import datetime

from app.common.formatters import (
    format_cop, format_date, format_date_time, generate_order_number, round_to_cop, to_number
)
from app.common.text import generate_menu_item_code, normalize_text, slugify


class TestCopRounding:
    """Tests de redondeo a pesos"""

    def test_half_up(self):
        assert round_to_cop(2.5) == 3
        assert round_to_cop(-2.5) == -2
        assert round_to_cop(11999.7) == 12000

    def test_invalid_values(self):
        assert round_to_cop(math.nan) == 0
        assert round_to_cop(math.inf) == 0
        assert round_to_cop("abc") == 0
        assert round_to_cop(None) == 0

    def test_to_number(self):
        assert to_number(" 1500 ") == 1500
        assert to_number("") == 0
        assert math.isnan(to_number([]))


class TestFormatters:
    """Tests de formatos en español"""

    def test_format_cop(self):
        assert format_cop(20000) == "$20.000"
        assert format_cop(1234567.6) == "$1.234.568"
        assert format_cop(-1500) == "-$1.500"
        assert format_cop(0) == "$0"

    def test_format_dates(self):
        value = datetime(2025, 3, 5, 14, 30)
        assert format_date_time(value) == "05/03/2025 14:30"
        assert format_date(value) == "Miércoles, 05 de marzo de 2025"

    def test_order_number_has_four_digits(self):
        assert all(1000 <= generate_order_number() <= 9999 for _ in range(50))


class TestText:
    """Tests de utilidades de texto"""

    def test_normalize_text(self):
        assert normalize_text("Sándwich Cubano") == "sandwich cubano"
        assert normalize_text(None) == ""

    def test_slugify(self):
        assert slugify("  Jugos & Batidos ") == "jugos-batidos"

    def test_menu_item_code(self):
        code = generate_menu_item_code("Limonada", "Bebidas")
        assert code.startswith("bebidas-limonada-")
        assert len(code.rsplit("-", 1)[1]) == 4
        assert generate_menu_item_code("", None).startswith("item-")


class TestApplication:
    """Tests de la aplicación y sus middlewares"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Process-Time"].endswith("ms")
