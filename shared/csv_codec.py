"""Codificacion y decodificacion del dialecto CSV de productos y ventas.

El dialecto es simple: separador coma, registros separados por ``\\n`` y
comillas dobles para valores que contienen coma, comillas o saltos de linea.
Dentro de un valor entre comillas, una comilla doble se escribe duplicada.

La decodificacion es tolerante: nunca lanza excepciones, aplica defaults
(``0``/``""``) a valores ausentes o invalidos y, ante un fallo interno,
registra el error y retorna una coleccion vacia.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from shared.csv_schema import (
    CODIGO_HEADER,
    PRODUCT_HEADERS,
    PRODUCT_INTEGER_FIELDS,
    PRODUCT_NUMERIC_FIELDS,
    PRODUCT_OPTIONAL_FIELDS,
    SALE_HEADERS,
    SALE_INTEGER_FIELDS,
    SALE_NUMERIC_FIELDS,
)
from shared.models import Product, Sale

LOGGER = logging.getLogger(__name__)

_CHARS_REQUIRING_QUOTES = (",", '"', "\n", "\r")


def escape_csv_value(value: Any) -> str:
    """Escapa un valor para CSV, agregando comillas solo cuando es necesario."""
    if value is None:
        return ""

    text = str(value)
    if any(char in text for char in _CHARS_REQUIRING_QUOTES):
        return '"' + text.replace('"', '""') + '"'
    return text


def encode_csv(records: Iterable[Mapping[str, Any]], fields: Sequence[str]) -> str:
    """Serializa filas planas a texto CSV con encabezado en el orden de ``fields``."""
    lines = [",".join(fields)]
    for record in records:
        lines.append(",".join(escape_csv_value(record.get(field)) for field in fields))
    return "\n".join(lines)


def split_csv_records(text: str) -> list[list[str]]:
    """Separa texto CSV en registros y campos con un scanner de comillas.

    Una comilla alterna el estado "dentro de comillas"; dentro de comillas,
    ``""`` es una comilla literal. Coma y salto de linea solo separan fuera
    de comillas.
    """
    records: list[list[str]] = []
    row: list[str] = []
    buffer: list[str] = []
    inside_quotes = False
    # Un \r fuera de comillas antes de \n es fin de linea CRLF, no dato.
    pending_cr = False
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        ends_with_cr = pending_cr
        pending_cr = False
        if char == '"':
            if inside_quotes and index + 1 < length and text[index + 1] == '"':
                buffer.append('"')
                index += 2
                continue
            inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            row.append("".join(buffer))
            buffer = []
        elif char == "\n" and not inside_quotes:
            if ends_with_cr:
                buffer.pop()
            row.append("".join(buffer))
            records.append(row)
            row = []
            buffer = []
        else:
            buffer.append(char)
            pending_cr = char == "\r" and not inside_quotes
        index += 1

    if buffer or row:
        row.append("".join(buffer))
        records.append(row)

    return records


def decode_csv(
    text: str,
    fields: Sequence[str],
    numeric_fields: frozenset[str] = frozenset(),
    integer_fields: frozenset[str] = frozenset(),
    optional_fields: frozenset[str] = frozenset(),
) -> list[dict[str, Any]]:
    """Decodifica texto CSV a filas tipadas segun un esquema posicional fijo.

    La primera fila es el encabezado y se ignora: los valores se asignan por
    posicion a ``fields``.
    """
    try:
        raw_records = split_csv_records(text or "")
        rows: list[dict[str, Any]] = []
        for values in raw_records[1:]:
            if not "".join(values).strip():
                continue
            rows.append(
                _coerce_row(values, fields, numeric_fields, integer_fields, optional_fields)
            )
        return rows
    except Exception:
        LOGGER.exception("Error al decodificar CSV con columnas: %s", ",".join(fields))
        return []


def decode_products(text: str) -> dict[str, Product]:
    """Decodifica el CSV de productos a un mapeo ``codigo -> Product``."""
    try:
        rows = decode_csv(
            text,
            PRODUCT_HEADERS,
            numeric_fields=PRODUCT_NUMERIC_FIELDS,
            integer_fields=PRODUCT_INTEGER_FIELDS,
            optional_fields=PRODUCT_OPTIONAL_FIELDS,
        )
        products: dict[str, Product] = {}
        for row in rows:
            codigo = row[CODIGO_HEADER]
            if not codigo:
                continue
            products[codigo] = Product.from_record(row)
        return products
    except Exception:
        LOGGER.exception("Error al decodificar CSV de productos.")
        return {}


def decode_sales(text: str) -> list[Sale]:
    """Decodifica el CSV de ventas a una lista ordenada de Sale."""
    try:
        rows = decode_csv(
            text,
            SALE_HEADERS,
            numeric_fields=SALE_NUMERIC_FIELDS,
            integer_fields=SALE_INTEGER_FIELDS,
        )
        return [Sale.from_record(row) for row in rows]
    except Exception:
        LOGGER.exception("Error al decodificar CSV de ventas.")
        return []


def _coerce_row(
    values: Sequence[str],
    fields: Sequence[str],
    numeric_fields: frozenset[str],
    integer_fields: frozenset[str],
    optional_fields: frozenset[str],
) -> dict[str, Any]:
    """Aplica tipos a una fila cruda usando defaults ante valores invalidos."""
    row: dict[str, Any] = {}
    for index, field in enumerate(fields):
        raw_value = values[index] if index < len(values) else ""
        if field in optional_fields and not raw_value.strip():
            row[field] = None
        elif field in integer_fields:
            row[field] = _to_int(raw_value)
        elif field in numeric_fields:
            row[field] = _to_float(raw_value)
        else:
            row[field] = raw_value
    return row


def _to_float(raw_value: str) -> float:
    try:
        return float(raw_value)
    except ValueError:
        return 0.0


def _to_int(raw_value: str) -> int:
    try:
        return int(raw_value)
    except ValueError:
        pass

    try:
        return int(float(raw_value))
    except (ValueError, OverflowError):
        return 0
