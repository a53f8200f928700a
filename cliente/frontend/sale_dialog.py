"""Dialogo de registro de ventas con carrito."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QDialog,
    QFormLayout,
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.controller import (
    STATUS_EMPTY_CART,
    STATUS_PARTIAL,
    KioskController,
)
from cliente.frontend.dialogs import show_error, show_info


class SaleDialog(QDialog):
    """Carrito de venta: agrega lineas, quita lineas y finaliza con cajero."""

    def __init__(
        self,
        controller: KioskController,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._codigo_input: QLineEdit
        self._cantidad_input: QSpinBox
        self._cajero_input: QLineEdit
        self._cart_list: QListWidget
        self._total_label: QLabel
        self._message_label: QLabel

        self.setWindowTitle("Registrar venta")
        self.setModal(True)
        self.setMinimumSize(500, 520)

        self._build_ui()
        self._apply_styles()
        self._refresh_cart()

    def _build_ui(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(18, 18, 18, 18)

        card = QFrame(self)
        card.setObjectName("dialogCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(24, 24, 24, 24)
        card_layout.setSpacing(12)

        title_label = QLabel("Registrar venta", card)
        title_label.setObjectName("titleLabel")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._codigo_input = QLineEdit(card)
        self._codigo_input.setPlaceholderText("Código de barras")
        self._cantidad_input = QSpinBox(card)
        self._cantidad_input.setRange(1, 10_000)
        add_button = QPushButton("Agregar", card)

        line_layout = QHBoxLayout()
        line_layout.addWidget(self._codigo_input, 3)
        line_layout.addWidget(self._cantidad_input, 1)
        line_layout.addWidget(add_button)

        self._message_label = QLabel(card)
        self._message_label.setObjectName("messageLabel")
        self._message_label.setWordWrap(True)

        self._cart_list = QListWidget(card)
        self._total_label = QLabel(card)

        remove_button = QPushButton("Quitar seleccionado", card)
        remove_button.setObjectName("cancelButton")

        self._cajero_input = QLineEdit(card)
        cashier_layout = QFormLayout()
        cashier_layout.addRow("Cajero", self._cajero_input)

        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch(1)
        close_button = QPushButton("Cerrar", card)
        close_button.setObjectName("cancelButton")
        finish_button = QPushButton("Finalizar venta", card)
        buttons_layout.addWidget(close_button)
        buttons_layout.addWidget(finish_button)

        add_button.clicked.connect(self._on_add_clicked)
        self._codigo_input.returnPressed.connect(self._on_add_clicked)
        remove_button.clicked.connect(self._on_remove_clicked)
        close_button.clicked.connect(self.reject)
        finish_button.clicked.connect(self._on_finish_clicked)

        card_layout.addWidget(title_label)
        card_layout.addLayout(line_layout)
        card_layout.addWidget(self._message_label)
        card_layout.addWidget(self._cart_list, 1)
        card_layout.addWidget(self._total_label)
        card_layout.addWidget(remove_button)
        card_layout.addLayout(cashier_layout)
        card_layout.addLayout(buttons_layout)

        shadow = QGraphicsDropShadowEffect(card)
        shadow.setBlurRadius(30)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(0, 0, 0, 35))
        card.setGraphicsEffect(shadow)

        root_layout.addWidget(card)
        self._codigo_input.setFocus()

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            QDialog {
                background-color: #eef1f4;
            }
            QFrame#dialogCard {
                background-color: #ffffff;
                border-radius: 16px;
            }
            QLabel#titleLabel {
                color: #20232a;
                font-size: 22px;
                font-weight: 700;
            }
            QLabel#messageLabel {
                color: #475569;
                font-size: 12px;
            }
            QLineEdit, QSpinBox, QListWidget {
                background-color: #f8fafc;
                border: 1px solid #d1d5db;
                border-radius: 8px;
                color: #111827;
                font-size: 13px;
                padding: 6px;
            }
            QPushButton {
                background-color: #2563eb;
                border: none;
                border-radius: 10px;
                color: #ffffff;
                font-size: 13px;
                font-weight: 600;
                min-height: 38px;
                padding: 0 12px;
            }
            QPushButton:hover {
                background-color: #1d4ed8;
            }
            QPushButton#cancelButton {
                background-color: #e5e7eb;
                color: #1f2937;
            }
            """
        )

    def _refresh_cart(self) -> None:
        self._cart_list.clear()
        for item in self._controller.cart:
            row = QListWidgetItem(f"{item.nombre} ({item.codigo}) x {item.cantidad}")
            row.setData(Qt.ItemDataRole.UserRole, item.id)
            self._cart_list.addItem(row)
        self._total_label.setText(f"Unidades: {self._controller.cart_total_units()}")

    def _on_add_clicked(self, _checked: bool = False) -> None:
        result = self._controller.add_to_cart(
            self._codigo_input.text(),
            self._cantidad_input.value(),
        )
        if result.errors:
            self._message_label.setText("\n".join(result.errors.values()))
            return

        self._message_label.setText(result.message)
        if result.ok:
            self._codigo_input.clear()
            self._cantidad_input.setValue(1)
            self._refresh_cart()

    def _on_remove_clicked(self, _checked: bool = False) -> None:
        row = self._cart_list.currentItem()
        if row is None:
            return
        self._controller.remove_from_cart(row.data(Qt.ItemDataRole.UserRole))
        self._refresh_cart()

    def _on_finish_clicked(self, _checked: bool = False) -> None:
        result = self._controller.finish_sale(self._cajero_input.text())

        if result.errors:
            show_error(self, "Venta incompleta", "\n".join(result.errors.values()))
            return
        if result.status == STATUS_EMPTY_CART:
            show_error(self, "Venta vacia", "Agregue productos antes de finalizar.")
            return

        self._refresh_cart()
        if result.status == STATUS_PARTIAL:
            failed = ", ".join(item.nombre for item in result.failed_items)
            show_error(
                self,
                "Venta parcial",
                f"Se registraron {len(result.sales)} lineas. Sin stock: {failed}",
            )
            return

        show_info(self, "Venta registrada", f"Se registraron {len(result.sales)} lineas.")
        self.accept()
