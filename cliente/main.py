"""Inicializacion de la aplicacion de kiosko."""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from cliente.backend.autosave import AutoSaveScheduler
from cliente.backend.controller import KioskController
from cliente.backend.gateway import HttpCsvGateway
from cliente.backend.local_storage import LocalStorage
from cliente.backend.store import StockStore
from cliente.frontend.main_window import MainWindow

LOGGER = logging.getLogger(__name__)


def main() -> int:
    """Carga datos, inicia el autoguardado y ejecuta la interfaz grafica."""
    app = QApplication(sys.argv)

    gateway = HttpCsvGateway(storage=LocalStorage())
    store = StockStore(gateway=gateway)
    store.initialize()

    controller = KioskController(store=store)
    window = MainWindow(store=store, controller=controller)
    scheduler = AutoSaveScheduler(store=store, gateway=gateway, on_saved=window.refresh)
    scheduler.start()

    def shutdown() -> None:
        scheduler.stop()
        LOGGER.info("Aplicacion finalizada.")

    app.aboutToQuit.connect(shutdown)
    window.show()

    LOGGER.info("Aplicacion iniciada.")
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
