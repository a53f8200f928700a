"""Esquema canonico de columnas CSV de productos y ventas."""

from __future__ import annotations

PRODUCTS_RESOURCE = "products"
SALES_RESOURCE = "sales"

PRODUCTS_FILENAME = f"{PRODUCTS_RESOURCE}.csv"
SALES_FILENAME = f"{SALES_RESOURCE}.csv"

CODIGO_HEADER = "codigo"
STOCK_MINIMO_HEADER = "stockMinimo"

PRODUCT_HEADERS: tuple[str, ...] = (
    CODIGO_HEADER,
    "nombre",
    "stock",
    "precio",
    "categoria",
    "imagen",
    STOCK_MINIMO_HEADER,
)

SALE_HEADERS: tuple[str, ...] = (
    "fecha_hora",
    "codigo_barra",
    "nombre_producto",
    "cantidad_vendida",
    "cajero",
)

PRODUCT_NUMERIC_FIELDS: frozenset[str] = frozenset({"precio"})
PRODUCT_INTEGER_FIELDS: frozenset[str] = frozenset({"stock", STOCK_MINIMO_HEADER})
PRODUCT_OPTIONAL_FIELDS: frozenset[str] = frozenset({STOCK_MINIMO_HEADER})

SALE_NUMERIC_FIELDS: frozenset[str] = frozenset()
SALE_INTEGER_FIELDS: frozenset[str] = frozenset({"cantidad_vendida"})

RESOURCE_HEADERS: dict[str, tuple[str, ...]] = {
    PRODUCTS_RESOURCE: PRODUCT_HEADERS,
    SALES_RESOURCE: SALE_HEADERS,
}


def header_line(headers: tuple[str, ...]) -> str:
    """Retorna la linea de encabezado CSV para un esquema."""
    return ",".join(headers)


def default_csv_for(resource_name: str) -> str:
    """Retorna el CSV vacio (solo encabezado) para un recurso conocido."""
    for resource, headers in RESOURCE_HEADERS.items():
        if resource in resource_name:
            return header_line(headers) + "\n"
    return ""
