"""Controlador principal del kiosko: registro de productos y carrito de ventas."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from shared.models import Product, Sale

from .store import StockStore
from .validators import (
    collect_cashier_errors,
    collect_product_errors,
    collect_sale_line_errors,
    parse_positive_int,
)

LOGGER = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_UPDATED = "updated"
STATUS_EXISTS = "exists"
STATUS_INVALID = "invalid"
STATUS_ADDED = "added"
STATUS_NOT_FOUND = "not_found"
STATUS_INSUFFICIENT_STOCK = "insufficient_stock"
STATUS_EMPTY_CART = "empty_cart"
STATUS_COMPLETED = "completed"
STATUS_PARTIAL = "partial"

BARCODE_LENGTH = 13


@dataclass(slots=True)
class RegistrationResult:
    """Resultado del formulario de registro de producto."""

    status: str
    product: Product | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_CREATED, STATUS_UPDATED)


@dataclass(frozen=True, slots=True)
class CartItem:
    """Linea pendiente de la venta en curso."""

    id: str
    codigo: str
    nombre: str
    cantidad: int


@dataclass(slots=True)
class CartResult:
    """Resultado de agregar una linea al carrito."""

    status: str
    item: CartItem | None = None
    errors: dict[str, str] = field(default_factory=dict)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_ADDED


@dataclass(slots=True)
class CheckoutResult:
    """Resultado de finalizar la venta."""

    status: str
    sales: list[Sale] = field(default_factory=list)
    failed_items: list[CartItem] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_COMPLETED


def utc_timestamp() -> str:
    """Timestamp ISO 8601 en UTC con milisegundos y sufijo Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class KioskController:
    """Coordina formularios del kiosko con el store de productos y ventas."""

    def __init__(
        self,
        store: StockStore,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or utc_timestamp
        self._cart: list[CartItem] = []

    @property
    def cart(self) -> tuple[CartItem, ...]:
        return tuple(self._cart)

    def lookup_for_form(self, codigo: str) -> Product | None:
        """Busca producto para autocompletar el formulario con codigo completo."""
        codigo_clean = codigo.strip()
        if len(codigo_clean) != BARCODE_LENGTH:
            return None
        return self._store.get_product(codigo_clean)

    def register_product(
        self,
        codigo: str,
        nombre: str,
        stock: str | int | None,
        precio: float | None = None,
        categoria: str | None = None,
        imagen: str | None = None,
        stock_minimo: int | None = None,
        allow_update: bool = False,
    ) -> RegistrationResult:
        """Valida y registra un producto; si ya existe solo actualiza con confirmacion."""
        errors = collect_product_errors(codigo, nombre, stock)
        if errors:
            return RegistrationResult(status=STATUS_INVALID, errors=errors)

        codigo_clean = codigo.strip()
        existing = self._store.get_product(codigo_clean)
        if existing is not None and not allow_update:
            LOGGER.info("Producto ya registrado, se solicita confirmacion: %s", codigo_clean)
            return RegistrationResult(status=STATUS_EXISTS, product=existing)

        changes: dict[str, object] = {
            "codigo": codigo_clean,
            "nombre": nombre.strip(),
            "stock": parse_positive_int(stock),
        }
        optional_values = {
            "precio": precio,
            "categoria": categoria,
            "imagen": imagen,
            "stock_minimo": stock_minimo,
        }
        changes.update({key: value for key, value in optional_values.items() if value is not None})

        if existing is not None:
            product = self._store.update_product(changes)
            LOGGER.info("Producto actualizado: %s", codigo_clean)
            return RegistrationResult(status=STATUS_UPDATED, product=product)

        product = Product(**changes)  # type: ignore[arg-type]
        self._store.add_product(product)
        LOGGER.info("Producto registrado: %s (%s)", codigo_clean, product.nombre)
        return RegistrationResult(status=STATUS_CREATED, product=product)

    def add_to_cart(self, codigo: str, cantidad: str | int | None) -> CartResult:
        """Agrega una linea al carrito si el producto existe y hay stock."""
        errors = collect_sale_line_errors(codigo, cantidad)
        if errors:
            return CartResult(status=STATUS_INVALID, errors=errors)

        codigo_clean = codigo.strip()
        product = self._store.get_product(codigo_clean)
        if product is None:
            return CartResult(status=STATUS_NOT_FOUND, message="Producto no encontrado")

        cantidad_value = parse_positive_int(cantidad) or 0
        available = product.stock - self._reserved_units(codigo_clean)
        if available < cantidad_value:
            return CartResult(
                status=STATUS_INSUFFICIENT_STOCK,
                message=f"Stock insuficiente. Stock actual: {product.stock}",
            )

        item = CartItem(
            id=uuid.uuid4().hex,
            codigo=product.codigo,
            nombre=product.nombre,
            cantidad=cantidad_value,
        )
        self._cart.append(item)
        return CartResult(
            status=STATUS_ADDED,
            item=item,
            message=f"{product.nombre} agregado a la venta",
        )

    def remove_from_cart(self, item_id: str) -> bool:
        """Quita una linea del carrito por id."""
        for index, item in enumerate(self._cart):
            if item.id == item_id:
                del self._cart[index]
                return True
        return False

    def clear_cart(self) -> None:
        self._cart.clear()

    def cart_total_units(self) -> int:
        return sum(item.cantidad for item in self._cart)

    def finish_sale(self, cajero: str) -> CheckoutResult:
        """Descuenta stock y registra una venta por linea del carrito."""
        errors = collect_cashier_errors(cajero)
        if errors:
            return CheckoutResult(status=STATUS_INVALID, errors=errors)

        if not self._cart:
            return CheckoutResult(status=STATUS_EMPTY_CART)

        fecha_hora = self._clock()
        cajero_clean = cajero.strip()
        sales: list[Sale] = []
        failed_items: list[CartItem] = []

        for item in self._cart:
            if not self._store.decrease_stock(item.codigo, item.cantidad):
                LOGGER.warning(
                    "No se pudo procesar %s (%s): stock insuficiente.",
                    item.nombre,
                    item.codigo,
                )
                failed_items.append(item)
                continue

            sale = Sale(
                fecha_hora=fecha_hora,
                codigo_barra=item.codigo,
                nombre_producto=item.nombre,
                cantidad_vendida=item.cantidad,
                cajero=cajero_clean,
            )
            self._store.add_sale(sale)
            sales.append(sale)

        # Solo quedan en el carrito las lineas que no se pudieron cobrar.
        self._cart = failed_items.copy()

        status = STATUS_PARTIAL if failed_items else STATUS_COMPLETED
        LOGGER.info(
            "Venta finalizada (%s): %d lineas registradas, %d fallidas, cajero=%s",
            status,
            len(sales),
            len(failed_items),
            cajero_clean,
        )
        return CheckoutResult(status=status, sales=sales, failed_items=failed_items)

    def _reserved_units(self, codigo: str) -> int:
        return sum(item.cantidad for item in self._cart if item.codigo == codigo)
