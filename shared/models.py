"""Modelos de dominio del kiosko: productos y ventas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from parametros import DEFAULT_STOCK_MINIMO
from shared.csv_schema import PRODUCT_HEADERS, SALE_HEADERS, STOCK_MINIMO_HEADER

# Atributo Python -> columna CSV cuando difieren.
PRODUCT_ATTRIBUTE_TO_HEADER: dict[str, str] = {"stock_minimo": STOCK_MINIMO_HEADER}
PRODUCT_HEADER_TO_ATTRIBUTE: dict[str, str] = {
    header: attribute for attribute, header in PRODUCT_ATTRIBUTE_TO_HEADER.items()
}


@dataclass(frozen=True, slots=True)
class Product:
    """Producto en inventario, identificado por su codigo de barras."""

    codigo: str
    nombre: str = ""
    stock: int = 0
    precio: float = 0.0
    categoria: str = ""
    imagen: str = ""
    stock_minimo: int | None = None

    @property
    def effective_stock_minimo(self) -> int:
        """Umbral de stock minimo aplicando el default canonico."""
        return self.stock_minimo or DEFAULT_STOCK_MINIMO

    def to_record(self) -> dict[str, Any]:
        """Retorna el producto como fila plana indexada por columna CSV."""
        record: dict[str, Any] = {}
        for field in fields(self):
            header = PRODUCT_ATTRIBUTE_TO_HEADER.get(field.name, field.name)
            record[header] = getattr(self, field.name)
        return {header: record[header] for header in PRODUCT_HEADERS}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Product:
        """Construye un producto desde una fila CSV ya tipada."""
        values = normalize_product_keys(record)
        return cls(**values)


@dataclass(frozen=True, slots=True)
class Sale:
    """Linea de venta inmutable del registro de ventas."""

    fecha_hora: str
    codigo_barra: str
    nombre_producto: str
    cantidad_vendida: int
    cajero: str

    def to_record(self) -> dict[str, Any]:
        """Retorna la venta como fila plana indexada por columna CSV."""
        return {header: getattr(self, header) for header in SALE_HEADERS}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Sale:
        """Construye una venta desde una fila CSV ya tipada."""
        return cls(
            fecha_hora=str(record.get("fecha_hora") or ""),
            codigo_barra=str(record.get("codigo_barra") or ""),
            nombre_producto=str(record.get("nombre_producto") or ""),
            cantidad_vendida=int(record.get("cantidad_vendida") or 0),
            cajero=str(record.get("cajero") or ""),
        )


def normalize_product_keys(values: Mapping[str, Any]) -> dict[str, Any]:
    """Traduce columnas CSV a atributos de Product, descartando claves desconocidas."""
    known = {field.name for field in fields(Product)}
    normalized: dict[str, Any] = {}
    for key, value in values.items():
        attribute = PRODUCT_HEADER_TO_ATTRIBUTE.get(key, key)
        if attribute in known:
            normalized[attribute] = value
    return normalized
