"""Dialogo para registrar o actualizar productos del kiosko."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QDialog,
    QDoubleSpinBox,
    QFormLayout,
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.controller import STATUS_EXISTS, KioskController
from cliente.frontend.dialogs import ask_confirmation, show_error, show_info


class RegisterProductDialog(QDialog):
    """Formulario modal de registro; un codigo existente pide confirmacion."""

    def __init__(
        self,
        controller: KioskController,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._codigo_input: QLineEdit
        self._nombre_input: QLineEdit
        self._stock_input: QLineEdit
        self._precio_input: QDoubleSpinBox
        self._categoria_input: QLineEdit
        self._errors_label: QLabel

        self.setWindowTitle("Registrar producto")
        self.setModal(True)
        self.setMinimumSize(460, 380)

        self._build_ui()
        self._apply_styles()

    def _build_ui(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(18, 18, 18, 18)

        card = QFrame(self)
        card.setObjectName("dialogCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(24, 24, 24, 24)
        card_layout.setSpacing(12)

        title_label = QLabel("Registrar producto", card)
        title_label.setObjectName("titleLabel")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._codigo_input = QLineEdit(card)
        self._codigo_input.setPlaceholderText("7801234567890")
        self._codigo_input.setMaxLength(13)
        self._nombre_input = QLineEdit(card)
        self._nombre_input.setMaxLength(50)
        self._stock_input = QLineEdit(card)
        self._stock_input.setPlaceholderText("Unidades")
        self._precio_input = QDoubleSpinBox(card)
        self._precio_input.setDecimals(2)
        self._precio_input.setMaximum(1_000_000)
        self._categoria_input = QLineEdit(card)

        form_layout = QFormLayout()
        form_layout.addRow("Código de barras", self._codigo_input)
        form_layout.addRow("Nombre", self._nombre_input)
        form_layout.addRow("Stock", self._stock_input)
        form_layout.addRow("Precio", self._precio_input)
        form_layout.addRow("Categoría", self._categoria_input)

        self._errors_label = QLabel(card)
        self._errors_label.setObjectName("errorsLabel")
        self._errors_label.setWordWrap(True)
        self._errors_label.hide()

        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch(1)

        cancel_button = QPushButton("Cancelar", card)
        cancel_button.setObjectName("cancelButton")
        save_button = QPushButton("Guardar", card)

        cancel_button.clicked.connect(self.reject)
        save_button.clicked.connect(self._on_save_clicked)
        self._codigo_input.textChanged.connect(self._on_codigo_changed)

        buttons_layout.addWidget(cancel_button)
        buttons_layout.addWidget(save_button)

        card_layout.addWidget(title_label)
        card_layout.addLayout(form_layout)
        card_layout.addWidget(self._errors_label)
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
                font-family: "Segoe UI";
                font-size: 22px;
                font-weight: 700;
            }
            QLabel#errorsLabel {
                color: #b91c1c;
                font-size: 12px;
            }
            QLineEdit, QDoubleSpinBox {
                background-color: #f8fafc;
                border: 1px solid #d1d5db;
                border-radius: 8px;
                color: #111827;
                font-size: 13px;
                padding: 8px;
            }
            QLineEdit:focus, QDoubleSpinBox:focus {
                border: 1px solid #2563eb;
                background-color: #ffffff;
            }
            QPushButton {
                background-color: #2563eb;
                border: none;
                border-radius: 10px;
                color: #ffffff;
                font-size: 13px;
                font-weight: 600;
                min-height: 40px;
                min-width: 100px;
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

    def _on_codigo_changed(self, codigo: str) -> None:
        """Autocompleta el formulario cuando el codigo ya esta registrado."""
        product = self._controller.lookup_for_form(codigo)
        if product is None:
            return

        self._nombre_input.setText(product.nombre)
        self._stock_input.setText(str(product.stock))
        self._precio_input.setValue(product.precio)
        self._categoria_input.setText(product.categoria)

    def _on_save_clicked(self) -> None:
        values = {
            "codigo": self._codigo_input.text(),
            "nombre": self._nombre_input.text(),
            "stock": self._stock_input.text(),
            "precio": self._precio_input.value(),
            "categoria": self._categoria_input.text().strip() or None,
        }
        result = self._controller.register_product(**values)

        if result.status == STATUS_EXISTS:
            confirmed = ask_confirmation(
                self,
                "Producto existente",
                f"El producto {result.product.nombre} ya existe. ¿Desea actualizarlo?",
            )
            if not confirmed:
                return
            result = self._controller.register_product(**values, allow_update=True)

        if result.errors:
            self._errors_label.setText("\n".join(result.errors.values()))
            self._errors_label.show()
            return

        if not result.ok:
            show_error(self, "Error al registrar", "No fue posible registrar el producto.")
            return

        show_info(self, "Producto guardado", f"Producto registrado: {result.product.nombre}")
        self.accept()
