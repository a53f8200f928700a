"""Store en memoria de productos y ventas del kiosko."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from shared.csv_codec import decode_products, decode_sales, encode_csv
from shared.csv_schema import (
    PRODUCT_HEADERS,
    PRODUCTS_RESOURCE,
    SALE_HEADERS,
    SALES_RESOURCE,
)
from shared.models import Product, Sale, normalize_product_keys

from .gateway import PersistenceGateway

LOGGER = logging.getLogger(__name__)


class StockStore:
    """Estado autoritativo de productos (por codigo) y ventas (registro ordenado).

    Las mutaciones son sincronicas y no persisten por si mismas; el
    autoguardado compara el CSV actual contra la ultima instantanea guardada.
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway
        self._products: dict[str, Product] = {}
        self._sales: list[Sale] = []
        self._is_loading = True
        self._initialized = False
        self._last_saved: datetime | None = None
        self._saved_snapshots: dict[str, str] = {
            PRODUCTS_RESOURCE: "",
            SALES_RESOURCE: "",
        }

    @property
    def products(self) -> Mapping[str, Product]:
        return MappingProxyType(self._products)

    @property
    def sales(self) -> tuple[Sale, ...]:
        return tuple(self._sales)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_saved(self) -> datetime | None:
        return self._last_saved

    def initialize(self) -> None:
        """Carga productos y ventas en paralelo. Solo se ejecuta una vez."""
        if self._initialized:
            LOGGER.warning("StockStore ya fue inicializado; se ignora la nueva carga.")
            return

        self._initialized = True
        self._is_loading = True
        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="stock-load") as pool:
                products_future = pool.submit(self._gateway.load, PRODUCTS_RESOURCE)
                sales_future = pool.submit(self._gateway.load, SALES_RESOURCE)

            products_csv = self._result_or_empty(products_future, PRODUCTS_RESOURCE)
            sales_csv = self._result_or_empty(sales_future, SALES_RESOURCE)

            self._products = decode_products(products_csv)
            self._sales = decode_sales(sales_csv)
            self.mark_saved(PRODUCTS_RESOURCE, self.serialize_products())
            self.mark_saved(SALES_RESOURCE, self.serialize_sales())

            LOGGER.info(
                "Datos iniciales cargados: %d productos, %d ventas.",
                len(self._products),
                len(self._sales),
            )
        finally:
            self._is_loading = False

    def add_product(self, product: Product) -> None:
        """Inserta o reemplaza el producto en su codigo."""
        self._products[product.codigo] = product

    def update_product(self, changes: Product | Mapping[str, Any]) -> Product | None:
        """Mezcla superficialmente los campos dados sobre el producto existente.

        Sin ``codigo`` no modifica nada y retorna None.
        """
        if isinstance(changes, Product):
            values = {key: value for key, value in asdict(changes).items() if value is not None}
        else:
            values = normalize_product_keys(changes)

        codigo = values.get("codigo")
        if not codigo:
            LOGGER.warning("update_product sin codigo; se ignora el cambio.")
            return None

        current = self._products.get(codigo)
        merged = replace(current, **values) if current is not None else Product(**values)
        self._products[codigo] = merged
        return merged

    def add_sale(self, sale: Sale) -> None:
        """Agrega la venta al final del registro."""
        self._sales.append(sale)

    def decrease_stock(self, codigo: str, quantity: int) -> bool:
        """Descuenta stock si alcanza; retorna False sin mutar en caso contrario."""
        product = self._products.get(codigo)
        if product is None or quantity <= 0 or product.stock < quantity:
            return False

        self._products[codigo] = replace(product, stock=product.stock - quantity)
        return True

    def get_product(self, codigo: str) -> Product | None:
        return self._products.get(codigo)

    def product_records(self) -> list[dict[str, Any]]:
        """Copia de productos como filas CSV, en orden de insercion."""
        return [product.to_record() for product in self._products.values()]

    def sale_records(self) -> list[dict[str, Any]]:
        """Copia de ventas como filas CSV, en orden del registro."""
        return [sale.to_record() for sale in self._sales]

    def serialize_products(self) -> str:
        return encode_csv(self.product_records(), PRODUCT_HEADERS)

    def serialize_sales(self) -> str:
        return encode_csv(self.sale_records(), SALE_HEADERS)

    def saved_snapshot(self, resource_name: str) -> str:
        """Ultimo CSV guardado (o cargado) para el recurso."""
        return self._saved_snapshots.get(resource_name, "")

    def mark_saved(self, resource_name: str, serialized: str) -> None:
        self._saved_snapshots[resource_name] = serialized

    def touch_saved(self, when: datetime) -> None:
        self._last_saved = when

    @staticmethod
    def _result_or_empty(future: Any, resource_name: str) -> str:
        # Un fallo en un recurso no cancela la carga del otro.
        try:
            return future.result()
        except Exception:
            LOGGER.exception("Fallo la carga inicial de '%s'.", resource_name)
            return ""
