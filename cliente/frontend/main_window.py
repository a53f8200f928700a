"""Ventana principal del kiosko: estado de guardado, resumen y exportaciones."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from cliente.backend import inventory_views
from cliente.backend.reports import (
    INVENTORY_EXPORT_STEM,
    SALES_EXPORT_STEM,
    export_report_csv,
    inventory_report,
    sales_history,
    save_status_text,
)
from cliente.backend.controller import KioskController
from cliente.backend.store import StockStore
from cliente.frontend.dialogs import show_error, show_info
from cliente.frontend.inventory_dialog import InventoryDialog
from cliente.frontend.register_product_dialog import RegisterProductDialog
from cliente.frontend.sale_dialog import SaleDialog
from parametros import REPORTS_DIR
from shared.csv_schema import PRODUCT_HEADERS, SALE_HEADERS
from shared.errors import ServiceError, ValidationError


class MainWindow(QMainWindow):
    """Ventana con indicadores del inventario y acciones de reporte."""

    def __init__(self, store: StockStore, controller: KioskController) -> None:
        super().__init__()
        self._store = store
        self._controller = controller

        self._status_label: QLabel
        self._summary_label: QLabel
        self._register_button: QPushButton
        self._sale_button: QPushButton
        self._inventory_button: QPushButton
        self._export_inventory_button: QPushButton
        self._export_sales_button: QPushButton
        self._exit_button: QPushButton

        self.setWindowTitle("Kiosko Stock")
        self.resize(520, 560)
        self._build_ui()
        self._apply_styles()
        self._connect_signals()
        self.refresh()

    def refresh(self, *_args: object) -> None:
        """Actualiza estado de guardado y resumen desde el store."""
        self._status_label.setText(save_status_text(self._store))

        indicators = inventory_views.kpis(self._store.products, self._store.sales)
        self._summary_label.setText(
            f"Productos: {indicators['total_productos']}\n"
            f"Unidades vendidas: {indicators['total_ventas']}\n"
            f"Ingresos: ${indicators['ingresos_totales']:,.2f}\n"
            f"Productos con stock bajo: {indicators['productos_stock_bajo']}"
        )

    def _build_ui(self) -> None:
        page = QWidget(self)
        self.setCentralWidget(page)

        root_layout = QVBoxLayout(page)
        root_layout.setContentsMargins(32, 32, 32, 32)
        root_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        card = QFrame(page)
        card.setObjectName("mainCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(32, 32, 32, 32)
        card_layout.setSpacing(12)

        title_label = QLabel("Kiosko Stock", card)
        title_label.setFont(QFont("Segoe UI", 20, QFont.Weight.Bold))
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._status_label = QLabel(card)
        self._status_label.setObjectName("statusLabel")
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._summary_label = QLabel(card)
        self._summary_label.setAlignment(Qt.AlignmentFlag.AlignLeft)

        self._register_button = self._build_button("Registrar producto")
        self._sale_button = self._build_button("Registrar venta")
        self._inventory_button = self._build_button("Ver inventario")
        self._export_inventory_button = self._build_button("Exportar inventario a CSV")
        self._export_sales_button = self._build_button("Exportar ventas a CSV")
        self._exit_button = self._build_button("Salir")
        self._exit_button.setObjectName("exitButton")

        card_layout.addWidget(title_label)
        card_layout.addWidget(self._status_label)
        card_layout.addSpacing(8)
        card_layout.addWidget(self._summary_label)
        card_layout.addSpacing(8)
        card_layout.addWidget(self._register_button)
        card_layout.addWidget(self._sale_button)
        card_layout.addWidget(self._inventory_button)
        card_layout.addWidget(self._export_inventory_button)
        card_layout.addWidget(self._export_sales_button)
        card_layout.addWidget(self._exit_button)

        root_layout.addWidget(card)

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            QMainWindow {
                background-color: #eef1f4;
            }
            QFrame#mainCard {
                background-color: #ffffff;
                border-radius: 18px;
                min-width: 380px;
            }
            QLabel#statusLabel {
                color: #15803d;
            }
            QPushButton {
                background-color: #2563eb;
                border: none;
                border-radius: 10px;
                color: #ffffff;
                font-size: 14px;
                font-weight: 600;
                min-height: 44px;
            }
            QPushButton:hover {
                background-color: #1d4ed8;
            }
            QPushButton#exitButton {
                background-color: #e5e7eb;
                color: #1f2937;
            }
            """
        )

    def _connect_signals(self) -> None:
        self._register_button.clicked.connect(self._on_register_clicked)
        self._sale_button.clicked.connect(self._on_sale_clicked)
        self._inventory_button.clicked.connect(self._on_inventory_clicked)
        self._export_inventory_button.clicked.connect(self._on_export_inventory_clicked)
        self._export_sales_button.clicked.connect(self._on_export_sales_clicked)
        self._exit_button.clicked.connect(self._on_exit_clicked)

    def _on_register_clicked(self, _checked: bool = False) -> None:
        dialog = RegisterProductDialog(self._controller, parent=self)
        if dialog.exec():
            self.refresh()

    def _on_sale_clicked(self, _checked: bool = False) -> None:
        SaleDialog(self._controller, parent=self).exec()
        self.refresh()

    def _on_inventory_clicked(self, _checked: bool = False) -> None:
        InventoryDialog(self._store.products, parent=self).exec()

    def _on_export_inventory_clicked(self, _checked: bool = False) -> None:
        report = inventory_report(self._store.products)
        records = [product.to_record() for product in report.products]
        self._export(records, PRODUCT_HEADERS, INVENTORY_EXPORT_STEM)

    def _on_export_sales_clicked(self, _checked: bool = False) -> None:
        report = sales_history(self._store.sales)
        records = [sale.to_record() for sale in report.sales]
        self._export(records, SALE_HEADERS, SALES_EXPORT_STEM)

    def _export(self, records: list[dict[str, object]], fields: tuple[str, ...], stem: str) -> None:
        try:
            path = export_report_csv(records, fields, REPORTS_DIR, stem)
        except (ValidationError, ServiceError) as exc:
            show_error(self, "Error de exportacion", str(exc))
            return

        show_info(self, "Reporte exportado", f"Archivo creado en:\n{path}")

    def _on_exit_clicked(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.quit()

    @staticmethod
    def _build_button(text: str) -> QPushButton:
        button = QPushButton(text)
        button.setCursor(Qt.CursorShape.PointingHandCursor)
        return button
