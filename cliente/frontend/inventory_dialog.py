"""Dialogo de consulta de inventario con filtros y orden."""

from __future__ import annotations

from collections.abc import Mapping

from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QHBoxLayout,
    QLineEdit,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.inventory_views import (
    LEVEL_HIGH,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    InventoryFilters,
    filter_products,
    list_categories,
    sort_products,
    stock_level,
)
from shared.models import Product

COLUMNS = ("Código", "Nombre", "Categoría", "Stock", "Precio", "Nivel")
SORT_OPTIONS = (
    ("Nombre (A-Z)", "nombre", "asc"),
    ("Stock (menor a mayor)", "stock", "asc"),
    ("Stock (mayor a menor)", "stock", "desc"),
    ("Precio (menor a mayor)", "precio", "asc"),
    ("Precio (mayor a menor)", "precio", "desc"),
)


class InventoryDialog(QDialog):
    """Tabla de productos filtrable por categoria, nivel de stock y busqueda."""

    def __init__(self, products: Mapping[str, Product], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._products = products

        self.setWindowTitle("Inventario")
        self.resize(760, 480)

        self._search_input = QLineEdit(self)
        self._search_input.setPlaceholderText("Buscar por nombre o código")
        self._category_combo = QComboBox(self)
        self._category_combo.addItem("Todas las categorías", "")
        for categoria in list_categories(products.values()):
            self._category_combo.addItem(categoria, categoria)
        self._level_combo = QComboBox(self)
        self._level_combo.addItem("Todos los niveles", "")
        for level in (LEVEL_LOW, LEVEL_MEDIUM, LEVEL_HIGH):
            self._level_combo.addItem(level.capitalize(), level)
        self._sort_combo = QComboBox(self)
        for label, field, order in SORT_OPTIONS:
            self._sort_combo.addItem(label, (field, order))

        self._table = QTableWidget(0, len(COLUMNS), self)
        self._table.setHorizontalHeaderLabels(COLUMNS)
        self._table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)

        filters_layout = QHBoxLayout()
        filters_layout.addWidget(self._search_input, 2)
        filters_layout.addWidget(self._category_combo, 1)
        filters_layout.addWidget(self._level_combo, 1)
        filters_layout.addWidget(self._sort_combo, 1)

        root_layout = QVBoxLayout(self)
        root_layout.addLayout(filters_layout)
        root_layout.addWidget(self._table)

        self._search_input.textChanged.connect(self._refresh)
        self._category_combo.currentIndexChanged.connect(self._refresh)
        self._level_combo.currentIndexChanged.connect(self._refresh)
        self._sort_combo.currentIndexChanged.connect(self._refresh)
        self._refresh()

    def _refresh(self, *_args: object) -> None:
        filters = InventoryFilters(
            categoria=self._category_combo.currentData() or "",
            nivel_stock=self._level_combo.currentData() or "",
            busqueda=self._search_input.text(),
        )
        field, order = self._sort_combo.currentData()
        rows = sort_products(filter_products(self._products.values(), filters), field, order)

        self._table.setRowCount(len(rows))
        for row_index, product in enumerate(rows):
            values = (
                product.codigo,
                product.nombre,
                product.categoria,
                str(product.stock),
                f"${product.precio:,.2f}",
                stock_level(product),
            )
            for column_index, value in enumerate(values):
                self._table.setItem(row_index, column_index, QTableWidgetItem(value))
