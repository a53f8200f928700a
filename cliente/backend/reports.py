"""Reportes de inventario y ventas, exportacion a CSV y estado de guardado."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from shared.errors import ServiceError, ValidationError
from shared.models import Product, Sale

from .store import StockStore
from .validators import validate_output_dir

LOGGER = logging.getLogger(__name__)

INVENTORY_EXPORT_STEM = "inventario"
SALES_EXPORT_STEM = "ventas"


@dataclass(slots=True)
class InventoryReport:
    """Inventario ordenado por nombre con totales."""

    products: list[Product]
    total_productos: int
    stock_total: int


@dataclass(slots=True)
class SalesReport:
    """Historial de ventas, mas recientes primero, con totales."""

    sales: list[Sale]
    total_ventas: int
    unidades_vendidas: int


def inventory_report(products: Mapping[str, Product] | Iterable[Product]) -> InventoryReport:
    values = list(products.values()) if isinstance(products, Mapping) else list(products)
    ordered = sorted(values, key=lambda product: product.nombre.casefold())
    return InventoryReport(
        products=ordered,
        total_productos=len(ordered),
        stock_total=sum(product.stock for product in ordered),
    )


def sales_history(sales: Sequence[Sale]) -> SalesReport:
    ordered = sorted(sales, key=lambda sale: parse_timestamp(sale.fecha_hora), reverse=True)
    return SalesReport(
        sales=ordered,
        total_ventas=len(ordered),
        unidades_vendidas=sum(sale.cantidad_vendida for sale in ordered),
    )


def parse_timestamp(value: str) -> datetime:
    """Parsea un ISO 8601 (acepta sufijo Z); valores invalidos quedan al final."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def export_report_csv(
    records: Sequence[Mapping[str, Any]],
    fields: Sequence[str],
    output_dir: Path,
    filename_stem: str,
    today: date | None = None,
) -> Path:
    """Escribe ``{stem}_{YYYY-MM-DD}.csv`` y retorna su ruta."""
    if not records:
        raise ValidationError("No hay datos para exportar.")

    stem = filename_stem.strip()
    if not stem:
        raise ValidationError("El nombre del reporte no puede estar vacio.")

    validate_output_dir(output_dir)
    export_date = (today or date.today()).isoformat()
    output_path = output_dir / f"{stem}_{export_date}.csv"

    try:
        with output_path.open("w", newline="", encoding="utf-8") as csv_file:
            writer = csv.writer(csv_file, lineterminator="\n")
            writer.writerow(fields)
            writer.writerows([record.get(field) for field in fields] for record in records)
    except OSError as exc:
        raise ServiceError(f"No fue posible escribir el reporte: {output_path}") from exc

    LOGGER.info("Reporte exportado: %s (%d filas)", output_path, len(records))
    return output_path


def save_status_text(store: StockStore) -> str:
    """Texto del indicador de guardado."""
    if store.is_loading:
        return "Cargando datos..."

    if store.last_saved is not None:
        return f"Guardado: {store.last_saved.strftime('%H:%M:%S')}"
    return "Datos sincronizados"
