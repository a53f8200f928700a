"""Tests del controlador de registro y ventas."""

from __future__ import annotations

import unittest

from cliente.backend.controller import (
    STATUS_ADDED,
    STATUS_COMPLETED,
    STATUS_CREATED,
    STATUS_EMPTY_CART,
    STATUS_EXISTS,
    STATUS_INSUFFICIENT_STOCK,
    STATUS_INVALID,
    STATUS_NOT_FOUND,
    STATUS_PARTIAL,
    STATUS_UPDATED,
    KioskController,
    utc_timestamp,
)
from cliente.backend.store import StockStore
from cliente.backend.validators import collect_product_errors, parse_positive_int
from shared.models import Product
from tests.test_store import FakeGateway

AGUA = "1234567890123"
PAN = "7800000000001"
FIXED_TIMESTAMP = "2026-10-18T12:00:00.000Z"


class KioskControllerTests(unittest.TestCase):
    """Valida registro, carrito y cierre de venta."""

    def setUp(self) -> None:
        self.store = StockStore(gateway=FakeGateway())
        self.store.initialize()
        self.store.add_product(Product(codigo=AGUA, nombre="Agua", stock=20, precio=1.5))
        self.store.add_product(Product(codigo=PAN, nombre="Pan", stock=5, precio=0.8))
        self.controller = KioskController(self.store, clock=lambda: FIXED_TIMESTAMP)

    def test_register_new_product(self) -> None:
        """Un formulario valido debe crear el producto en el store."""
        result = self.controller.register_product(
            " 7790000000002 ", " Galletas ", "12", precio=2.0, categoria="Snacks"
        )

        self.assertEqual(result.status, STATUS_CREATED)
        self.assertTrue(result.ok)
        product = self.store.get_product("7790000000002")
        self.assertEqual(product.nombre, "Galletas")
        self.assertEqual(product.stock, 12)
        self.assertEqual(product.categoria, "Snacks")

    def test_register_existing_requires_confirmation(self) -> None:
        """Un codigo existente no se sobrescribe sin confirmacion."""
        result = self.controller.register_product(AGUA, "Agua con gas", "3")

        self.assertEqual(result.status, STATUS_EXISTS)
        self.assertEqual(result.product.nombre, "Agua")
        self.assertEqual(self.store.get_product(AGUA).stock, 20)

    def test_register_existing_with_confirmation_merges(self) -> None:
        """Con confirmacion se actualiza sin perder campos no informados."""
        result = self.controller.register_product(AGUA, "Agua con gas", 3, allow_update=True)

        self.assertEqual(result.status, STATUS_UPDATED)
        product = self.store.get_product(AGUA)
        self.assertEqual(product.nombre, "Agua con gas")
        self.assertEqual(product.stock, 3)
        self.assertEqual(product.precio, 1.5)

    def test_register_invalid_form_returns_errors(self) -> None:
        """Errores de formulario se reportan por campo sin tocar el store."""
        result = self.controller.register_product("123", "", "-2")

        self.assertEqual(result.status, STATUS_INVALID)
        self.assertEqual(set(result.errors), {"codigo", "nombre", "stock"})
        self.assertIsNone(self.store.get_product("123"))

    def test_lookup_only_with_full_barcode(self) -> None:
        """El autocompletado solo busca codigos de 13 caracteres."""
        self.assertIsNone(self.controller.lookup_for_form("123456"))
        self.assertEqual(self.controller.lookup_for_form(f" {AGUA} ").nombre, "Agua")

    def test_add_to_cart_checks_existing_reservations(self) -> None:
        """Las unidades ya agregadas cuentan contra el stock disponible."""
        first = self.controller.add_to_cart(PAN, "3")
        second = self.controller.add_to_cart(PAN, "3")

        self.assertEqual(first.status, STATUS_ADDED)
        self.assertEqual(first.message, "Pan agregado a la venta")
        self.assertEqual(second.status, STATUS_INSUFFICIENT_STOCK)
        self.assertEqual(second.message, "Stock insuficiente. Stock actual: 5")
        self.assertEqual(self.controller.cart_total_units(), 3)

    def test_add_to_cart_unknown_and_invalid(self) -> None:
        """Producto inexistente o cantidad invalida no agregan lineas."""
        missing = self.controller.add_to_cart("9999999999999", 1)
        invalid = self.controller.add_to_cart(AGUA, "cero")

        self.assertEqual(missing.status, STATUS_NOT_FOUND)
        self.assertEqual(missing.message, "Producto no encontrado")
        self.assertEqual(invalid.status, STATUS_INVALID)
        self.assertIn("cantidad", invalid.errors)
        self.assertEqual(self.controller.cart, ())

    def test_remove_and_clear_cart(self) -> None:
        """Debe quitar lineas por id y vaciar el carrito."""
        item = self.controller.add_to_cart(AGUA, 1).item
        self.controller.add_to_cart(PAN, 1)

        self.assertTrue(self.controller.remove_from_cart(item.id))
        self.assertFalse(self.controller.remove_from_cart(item.id))
        self.assertEqual([line.codigo for line in self.controller.cart], [PAN])

        self.controller.clear_cart()
        self.assertEqual(self.controller.cart, ())

    def test_finish_sale_records_sales_and_decreases_stock(self) -> None:
        """Cada linea genera una venta con el mismo timestamp y cajero."""
        self.controller.add_to_cart(AGUA, 5)
        self.controller.add_to_cart(PAN, 2)

        result = self.controller.finish_sale(" Ana ")

        self.assertEqual(result.status, STATUS_COMPLETED)
        self.assertEqual(len(result.sales), 2)
        self.assertEqual({sale.fecha_hora for sale in result.sales}, {FIXED_TIMESTAMP})
        self.assertEqual({sale.cajero for sale in result.sales}, {"Ana"})
        self.assertEqual(self.store.get_product(AGUA).stock, 15)
        self.assertEqual(self.store.get_product(PAN).stock, 3)
        self.assertEqual(list(self.store.sales), result.sales)
        self.assertEqual(self.controller.cart, ())

    def test_finish_sale_keeps_failed_lines(self) -> None:
        """Si el stock cambio, la linea sin stock queda en el carrito."""
        self.controller.add_to_cart(AGUA, 1)
        self.controller.add_to_cart(PAN, 4)
        self.store.decrease_stock(PAN, 3)

        result = self.controller.finish_sale("Ana")

        self.assertEqual(result.status, STATUS_PARTIAL)
        self.assertEqual([sale.codigo_barra for sale in result.sales], [AGUA])
        self.assertEqual([item.codigo for item in self.controller.cart], [PAN])
        self.assertEqual(self.store.get_product(PAN).stock, 2)

    def test_finish_sale_requires_cashier_and_items(self) -> None:
        """Sin cajero o con carrito vacio no se registra nada."""
        self.assertEqual(self.controller.finish_sale("").status, STATUS_INVALID)
        self.assertEqual(self.controller.finish_sale("Ana").status, STATUS_EMPTY_CART)
        self.assertEqual(self.store.sales, ())


class ValidatorsTests(unittest.TestCase):
    """Valida las reglas del formulario de producto."""

    def test_parse_positive_int(self) -> None:
        """Solo enteros mayores a cero son validos."""
        self.assertEqual(parse_positive_int(" 7 "), 7)
        self.assertEqual(parse_positive_int(3), 3)
        self.assertIsNone(parse_positive_int("0"))
        self.assertIsNone(parse_positive_int("1.5"))
        self.assertIsNone(parse_positive_int(True))
        self.assertIsNone(parse_positive_int(None))

    def test_product_error_messages(self) -> None:
        """Mensajes por campo para codigo, nombre y stock."""
        errors = collect_product_errors("12345", "x" * 51, "")

        self.assertEqual(errors["codigo"], "El código debe tener 13 dígitos numéricos")
        self.assertEqual(errors["nombre"], "El nombre no puede exceder los 50 caracteres")
        self.assertEqual(errors["stock"], "El stock inicial es obligatorio")
        self.assertEqual(collect_product_errors(AGUA, "Agua", "4"), {})

    def test_utc_timestamp_format(self) -> None:
        """El timestamp usa milisegundos y sufijo Z."""
        stamp = utc_timestamp()

        self.assertTrue(stamp.endswith("Z"))
        self.assertEqual(len(stamp), len(FIXED_TIMESTAMP))


if __name__ == "__main__":
    unittest.main()
