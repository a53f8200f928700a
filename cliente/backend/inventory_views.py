"""Vistas derivadas del inventario: niveles de stock, filtros, orden y metricas."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from shared.models import Product, Sale

LEVEL_LOW = "bajo"
LEVEL_MEDIUM = "medio"
LEVEL_HIGH = "alto"

LOW_LEVEL_PERCENT = 25.0
MEDIUM_LEVEL_PERCENT = 50.0

CRITICAL_STOCK_UNITS = 5
MEDIUM_STOCK_UNITS = 15

UNCATEGORIZED_LABEL = "Sin Categoría"
SORT_FIELDS = ("nombre", "stock", "precio")


@dataclass(slots=True)
class InventoryFilters:
    """Filtros del tablero de inventario; campos vacios no filtran."""

    categoria: str = ""
    nivel_stock: str = ""
    precio_min: float | None = None
    precio_max: float | None = None
    busqueda: str = ""


def stock_percentage(product: Product) -> float:
    """Stock actual como porcentaje del stock minimo."""
    return product.stock / product.effective_stock_minimo * 100


def stock_level(product: Product) -> str:
    percentage = stock_percentage(product)
    if percentage < LOW_LEVEL_PERCENT:
        return LEVEL_LOW
    if percentage < MEDIUM_LEVEL_PERCENT:
        return LEVEL_MEDIUM
    return LEVEL_HIGH


def is_low_stock(product: Product) -> bool:
    return product.stock < product.effective_stock_minimo


def list_categories(products: Iterable[Product]) -> list[str]:
    return sorted({product.categoria for product in products if product.categoria})


def filter_products(products: Iterable[Product], filters: InventoryFilters) -> list[Product]:
    """Aplica filtros de categoria, nivel de stock, rango de precio y busqueda."""
    busqueda = filters.busqueda.strip()
    busqueda_lower = busqueda.lower()
    matches: list[Product] = []

    for product in products:
        if filters.categoria and product.categoria != filters.categoria:
            continue
        if filters.nivel_stock and stock_level(product) != filters.nivel_stock:
            continue
        if filters.precio_min is not None and product.precio < filters.precio_min:
            continue
        if filters.precio_max is not None and product.precio > filters.precio_max:
            continue
        if busqueda and not (
            busqueda_lower in product.nombre.lower() or busqueda in product.codigo
        ):
            continue
        matches.append(product)

    return matches


def sort_products(
    products: Iterable[Product],
    field: str = "nombre",
    order: str = "asc",
) -> list[Product]:
    """Ordena productos por nombre, stock o precio."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Campo de orden invalido: {field}")

    return sorted(
        products,
        key=lambda product: (
            product.nombre.casefold() if field == "nombre" else getattr(product, field)
        ),
        reverse=order == "desc",
    )


def stock_buckets(products: Iterable[Product]) -> dict[str, int]:
    """Cuenta productos en stock critico (<=5), medio (6-15) y alto (>15)."""
    buckets = {LEVEL_LOW: 0, LEVEL_MEDIUM: 0, LEVEL_HIGH: 0}
    for product in products:
        if product.stock <= CRITICAL_STOCK_UNITS:
            buckets[LEVEL_LOW] += 1
        elif product.stock <= MEDIUM_STOCK_UNITS:
            buckets[LEVEL_MEDIUM] += 1
        else:
            buckets[LEVEL_HIGH] += 1
    return buckets


def inventory_value_by_category(products: Iterable[Product]) -> dict[str, float]:
    """Valor del inventario (stock x precio) agrupado por categoria."""
    totals: dict[str, float] = {}
    for product in products:
        categoria = product.categoria or UNCATEGORIZED_LABEL
        totals[categoria] = totals.get(categoria, 0.0) + product.stock * product.precio
    return {categoria: round(valor, 2) for categoria, valor in totals.items()}


def sale_revenue(sale: Sale, products: Mapping[str, Product]) -> float:
    """Ingreso de una venta con el precio actual; 0 si el producto ya no existe."""
    product = products.get(sale.codigo_barra)
    if product is None:
        return 0.0
    return product.precio * sale.cantidad_vendida


def daily_sales(
    sales: Sequence[Sale],
    products: Mapping[str, Product],
    today: date,
    days: int = 7,
) -> list[dict[str, object]]:
    """Unidades e ingresos por dia para los ultimos ``days`` dias (incluye hoy)."""
    summary: list[dict[str, object]] = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        day_sales = [sale for sale in sales if sale.fecha_hora.startswith(day)]
        summary.append(
            {
                "fecha": day,
                "ventas": sum(sale.cantidad_vendida for sale in day_sales),
                "ingresos": round(sum(sale_revenue(sale, products) for sale in day_sales), 2),
            }
        )
    return summary


@dataclass(slots=True)
class ProductSalesTotal:
    """Acumulado de ventas de un producto."""

    codigo: str
    nombre: str
    cantidad: int = 0
    ingresos: float = 0.0


def top_products(
    sales: Sequence[Sale],
    products: Mapping[str, Product],
    limit: int = 5,
) -> list[ProductSalesTotal]:
    """Productos mas vendidos por unidades; ignora ventas de productos eliminados."""
    totals: dict[str, ProductSalesTotal] = {}
    for sale in sales:
        product = products.get(sale.codigo_barra)
        if product is None:
            continue
        total = totals.get(product.codigo)
        if total is None:
            total = totals[product.codigo] = ProductSalesTotal(product.codigo, product.nombre)
        total.cantidad += sale.cantidad_vendida
        total.ingresos += product.precio * sale.cantidad_vendida

    ranked = sorted(totals.values(), key=lambda total: total.cantidad, reverse=True)[:limit]
    for total in ranked:
        total.ingresos = round(total.ingresos, 2)
    return ranked


def kpis(products: Mapping[str, Product], sales: Sequence[Sale]) -> dict[str, float | int]:
    """Resumen de indicadores del tablero principal."""
    return {
        "total_productos": len(products),
        "total_ventas": sum(sale.cantidad_vendida for sale in sales),
        "ingresos_totales": round(sum(sale_revenue(sale, products) for sale in sales), 2),
        "productos_stock_bajo": sum(
            1 for product in products.values() if product.stock <= CRITICAL_STOCK_UNITS
        ),
    }
