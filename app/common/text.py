"""
Utilidades de texto para búsquedas y códigos de productos
"""
import re
import secrets
import string
import unicodedata
from typing import Optional


def normalize_text(value: Optional[str]) -> str:
    """Minúsculas y sin tildes, para comparar búsquedas."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return without_marks.lower()


def slugify(value: Optional[str]) -> str:
    if not value:
        return ""
    slug = re.sub(r"[^a-z0-9]+", "-", normalize_text(value))
    return slug.strip("-")


def generate_menu_item_code(nombre: str, categoria: Optional[str] = None) -> str:
    """
    Genera un código legible para un producto del menú:
    "<categoria>-<nombre>-<sufijo aleatorio de 4 caracteres>"
    """
    parts = [slugify(part) for part in (categoria, nombre) if part and part.strip()]
    base = "-".join(part for part in parts if part) or "item"
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(4))
    return f"{base}-{suffix}"
