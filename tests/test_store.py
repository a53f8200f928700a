"""Tests del store en memoria de productos y ventas."""

from __future__ import annotations

import threading
import unittest
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from cliente.backend.store import StockStore
from shared.csv_schema import PRODUCTS_RESOURCE, SALES_RESOURCE
from shared.models import Product, Sale

PRODUCTS_CSV = (
    "codigo,nombre,stock,precio,categoria,imagen,stockMinimo\n"
    "1234567890123,Agua,20,1.5,Bebidas,,\n"
    '7800000000001,"Pan, marraqueta",40,0.8,Panadería,,30\n'
)
SALES_CSV = (
    "fecha_hora,codigo_barra,nombre_producto,cantidad_vendida,cajero\n"
    "2026-10-17T12:00:00.000Z,1234567890123,Agua,2,Ana\n"
)


class FakeGateway:
    """Gateway en memoria que registra llamadas."""

    def __init__(self, texts: Mapping[str, str] | None = None, failing: Iterable[str] = ()) -> None:
        self.texts = dict(texts or {})
        self.failing = set(failing)
        self.load_calls: list[str] = []
        self.saves: list[tuple[list[dict[str, Any]], tuple[str, ...], str]] = []
        self.save_result = True
        self._lock = threading.Lock()

    def load(self, resource_name: str) -> str:
        with self._lock:
            self.load_calls.append(resource_name)
        if resource_name in self.failing:
            raise RuntimeError(f"fallo cargando {resource_name}")
        return self.texts.get(resource_name, "")

    def save(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[str],
        filename: str,
    ) -> bool:
        with self._lock:
            self.saves.append(([dict(record) for record in records], tuple(fields), filename))
        return self.save_result


def build_loaded_store(**texts: str) -> tuple[StockStore, FakeGateway]:
    gateway = FakeGateway(texts or {PRODUCTS_RESOURCE: PRODUCTS_CSV, SALES_RESOURCE: SALES_CSV})
    store = StockStore(gateway=gateway)
    store.initialize()
    return store, gateway


class StockStoreInitializeTests(unittest.TestCase):
    """Valida la carga inicial."""

    def test_initialize_loads_products_and_sales(self) -> None:
        """Debe poblar colecciones, tomar instantaneas y terminar la carga."""
        gateway = FakeGateway({PRODUCTS_RESOURCE: PRODUCTS_CSV, SALES_RESOURCE: SALES_CSV})
        store = StockStore(gateway=gateway)
        self.assertTrue(store.is_loading)

        store.initialize()

        self.assertFalse(store.is_loading)
        self.assertIsNone(store.last_saved)
        self.assertEqual(sorted(gateway.load_calls), [PRODUCTS_RESOURCE, SALES_RESOURCE])
        self.assertEqual(len(store.products), 2)
        self.assertEqual(store.products["7800000000001"].nombre, "Pan, marraqueta")
        self.assertEqual(store.products["7800000000001"].stock_minimo, 30)
        self.assertEqual(store.sales[0].cajero, "Ana")
        self.assertEqual(store.saved_snapshot(PRODUCTS_RESOURCE), store.serialize_products())
        self.assertEqual(store.saved_snapshot(SALES_RESOURCE), store.serialize_sales())

    def test_initialize_runs_only_once(self) -> None:
        """Una segunda llamada no debe volver a cargar."""
        store, gateway = build_loaded_store()

        with self.assertLogs("cliente.backend.store", level="WARNING"):
            store.initialize()

        self.assertEqual(len(gateway.load_calls), 2)

    def test_failure_in_one_resource_does_not_cancel_the_other(self) -> None:
        """Si falla la carga de productos, las ventas deben cargarse igual."""
        gateway = FakeGateway({SALES_RESOURCE: SALES_CSV}, failing=[PRODUCTS_RESOURCE])
        store = StockStore(gateway=gateway)

        with self.assertLogs("cliente.backend.store", level="ERROR"):
            store.initialize()

        self.assertFalse(store.is_loading)
        self.assertEqual(dict(store.products), {})
        self.assertEqual(len(store.sales), 1)


class StockStoreMutationTests(unittest.TestCase):
    """Valida operaciones de mutacion y lectura."""

    def setUp(self) -> None:
        self.store, _ = build_loaded_store()

    def test_decrease_stock_scenario(self) -> None:
        """Descuento valido resta stock; descuento excesivo no muta."""
        agua = Product(
            codigo="1234567890123",
            nombre="Agua",
            stock=20,
            precio=1.5,
            categoria="Bebidas",
        )
        self.store.add_product(agua)

        self.assertTrue(self.store.decrease_stock("1234567890123", 5))
        self.assertEqual(self.store.get_product("1234567890123").stock, 15)

        self.assertFalse(self.store.decrease_stock("1234567890123", 100))
        self.assertEqual(self.store.get_product("1234567890123").stock, 15)

    def test_decrease_stock_never_goes_negative(self) -> None:
        """Para cualquier cantidad el stock nunca debe quedar negativo."""
        self.store.add_product(Product(codigo="1", nombre="Chicle", stock=3))

        for quantity in (0, -1, 4, 3, 1):
            before = self.store.get_product("1").stock
            result = self.store.decrease_stock("1", quantity)
            after = self.store.get_product("1").stock
            if result:
                self.assertEqual(after, before - quantity)
            else:
                self.assertEqual(after, before)
            self.assertGreaterEqual(after, 0)

        self.assertEqual(self.store.get_product("1").stock, 0)
        self.assertFalse(self.store.decrease_stock("no-existe", 1))

    def test_decrease_stock_rejects_zero_quantity(self) -> None:
        """Descontar cero unidades se rechaza sin mutar el producto."""
        before = self.store.get_product("1234567890123")

        self.assertFalse(self.store.decrease_stock("1234567890123", 0))
        self.assertIs(self.store.get_product("1234567890123"), before)

    def test_update_product_without_codigo_is_ignored(self) -> None:
        """Sin codigo no se lanza excepcion ni se modifica el store."""
        before = dict(self.store.products)

        with self.assertLogs("cliente.backend.store", level="WARNING"):
            result = self.store.update_product({"nombre": "Sin codigo", "stock": 3})

        self.assertIsNone(result)
        self.assertEqual(dict(self.store.products), before)

    def test_add_product_overwrites_by_codigo(self) -> None:
        """Registrar un codigo existente debe reemplazarlo completo."""
        self.store.add_product(Product(codigo="1234567890123", nombre="Agua mineral", stock=1))

        product = self.store.get_product("1234567890123")
        self.assertEqual(product.nombre, "Agua mineral")
        self.assertEqual(product.precio, 0.0)

    def test_update_product_preserves_unspecified_fields(self) -> None:
        """Actualizar solo stock no debe tocar nombre, precio ni categoria."""
        self.store.update_product({"codigo": "1234567890123", "stock": 7})

        product = self.store.get_product("1234567890123")
        self.assertEqual(product.stock, 7)
        self.assertEqual(product.nombre, "Agua")
        self.assertEqual(product.precio, 1.5)
        self.assertEqual(product.categoria, "Bebidas")

    def test_update_product_accepts_csv_header_names_and_products(self) -> None:
        """Debe aceptar columnas CSV y Product con campos None como ausentes."""
        self.store.update_product({"codigo": "7800000000001", "stockMinimo": 50})
        self.store.update_product(
            Product(codigo="7800000000001", nombre="Marraqueta", stock=10, stock_minimo=None)
        )

        product = self.store.get_product("7800000000001")
        self.assertEqual(product.stock_minimo, 50)
        self.assertEqual(product.nombre, "Marraqueta")

    def test_update_missing_product_inserts_partial_record(self) -> None:
        """Sin entrada previa debe insertar el registro parcial con defaults."""
        product = self.store.update_product({"codigo": "999", "nombre": "Nuevo"})

        self.assertEqual(product, Product(codigo="999", nombre="Nuevo"))
        self.assertIs(self.store.get_product("999"), product)

    def test_add_sale_is_append_only(self) -> None:
        """Agregar venta debe sumar exactamente una al final sin alterar previas."""
        before = self.store.sales
        sale = Sale("2026-10-18T09:00:00.000Z", "1234567890123", "Agua", 1, "Luis")

        self.store.add_sale(sale)

        after = self.store.sales
        self.assertEqual(len(after), len(before) + 1)
        self.assertEqual(after[:-1], before)
        self.assertEqual(after[-1], sale)

    def test_sale_may_reference_missing_product(self) -> None:
        """No se valida la existencia del producto referenciado."""
        self.store.add_sale(Sale("2026-10-18", "no-existe", "Fantasma", 1, "Ana"))

        self.assertEqual(self.store.sales[-1].codigo_barra, "no-existe")

    def test_products_view_is_read_only(self) -> None:
        """La vista de productos no debe permitir mutacion directa."""
        with self.assertRaises(TypeError):
            self.store.products["x"] = Product(codigo="x")  # type: ignore[index]

    def test_mutations_do_not_touch_snapshots(self) -> None:
        """Las mutaciones no persisten ni cambian la instantanea guardada."""
        snapshot = self.store.saved_snapshot(PRODUCTS_RESOURCE)

        self.store.decrease_stock("1234567890123", 1)

        self.assertEqual(self.store.saved_snapshot(PRODUCTS_RESOURCE), snapshot)
        self.assertNotEqual(self.store.serialize_products(), snapshot)


if __name__ == "__main__":
    unittest.main()
