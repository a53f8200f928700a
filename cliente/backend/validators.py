"""Validaciones para entradas del cliente."""

from __future__ import annotations

import re
from pathlib import Path

from shared.errors import ValidationError

BARCODE_PATTERN = re.compile(r"^\d{13}$")
MAX_PRODUCT_NAME_LENGTH = 50


def parse_positive_int(raw_value: str | int | None) -> int | None:
    """Retorna el entero positivo del valor o None si no lo es."""
    if isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, int):
        return raw_value if raw_value > 0 else None

    text = (raw_value or "").strip()
    if not text:
        return None
    try:
        value = int(text)
    except ValueError:
        return None
    return value if value > 0 else None


def collect_product_errors(
    codigo: str,
    nombre: str,
    stock: str | int | None,
) -> dict[str, str]:
    """Valida el formulario de producto y retorna errores por campo."""
    errors: dict[str, str] = {}

    codigo_clean = (codigo or "").strip()
    if not codigo_clean:
        errors["codigo"] = "El código de barras es obligatorio"
    elif not BARCODE_PATTERN.fullmatch(codigo_clean):
        errors["codigo"] = "El código debe tener 13 dígitos numéricos"

    nombre_clean = (nombre or "").strip()
    if not nombre_clean:
        errors["nombre"] = "El nombre del producto es obligatorio"
    elif len(nombre_clean) > MAX_PRODUCT_NAME_LENGTH:
        errors["nombre"] = (
            f"El nombre no puede exceder los {MAX_PRODUCT_NAME_LENGTH} caracteres"
        )

    if stock is None or (isinstance(stock, str) and not stock.strip()):
        errors["stock"] = "El stock inicial es obligatorio"
    elif parse_positive_int(stock) is None:
        errors["stock"] = "El stock debe ser un número entero positivo"

    return errors


def collect_sale_line_errors(codigo: str, cantidad: str | int | None) -> dict[str, str]:
    """Valida una linea de venta antes de agregarla al carrito."""
    errors: dict[str, str] = {}

    if not (codigo or "").strip():
        errors["codigo"] = "El código de barras es obligatorio"

    if cantidad is None or (isinstance(cantidad, str) and not cantidad.strip()):
        errors["cantidad"] = "La cantidad es obligatoria"
    elif parse_positive_int(cantidad) is None:
        errors["cantidad"] = "La cantidad debe ser un número entero positivo"

    return errors


def collect_cashier_errors(cajero: str) -> dict[str, str]:
    """Valida que exista nombre de cajero."""
    if not (cajero or "").strip():
        return {"cajero": "El nombre del cajero es obligatorio"}
    return {}


def validate_output_dir(path: Path) -> None:
    """Valida que la ruta de salida sea utilizable para archivos CSV."""
    if path.exists() and not path.is_dir():
        raise ValidationError(f"La ruta no es un directorio: {path}")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ValidationError(f"No se pudo crear/acceder al directorio: {path}") from exc
