"""Autoguardado periodico del store con deteccion de cambios."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime
from functools import partial

from PyQt6.QtCore import QTimer

from parametros import AUTOSAVE_INTERVAL_MS
from shared.csv_schema import (
    PRODUCT_HEADERS,
    PRODUCTS_FILENAME,
    PRODUCTS_RESOURCE,
    SALE_HEADERS,
    SALES_FILENAME,
    SALES_RESOURCE,
)

from .gateway import PersistenceGateway
from .store import StockStore

LOGGER = logging.getLogger(__name__)


class AutoSaveScheduler:
    """Guarda productos y ventas cada ``interval_ms`` solo si cambiaron."""

    def __init__(
        self,
        store: StockStore,
        gateway: PersistenceGateway,
        interval_ms: int = AUTOSAVE_INTERVAL_MS,
        executor: Executor | None = None,
        clock: Callable[[], datetime] | None = None,
        on_saved: Callable[[datetime], None] | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._interval_ms = interval_ms
        self._owns_executor = executor is None
        self._executor = executor or self._build_executor()
        self._clock = clock or datetime.now
        self._on_saved = on_saved
        self._timer: QTimer | None = None

    @property
    def is_running(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def start(self) -> None:
        """Inicia el timer periodico en el hilo del event loop de Qt."""
        if self.is_running:
            return

        if self._executor is None:
            self._executor = self._build_executor()

        self._timer = QTimer()
        self._timer.setInterval(self._interval_ms)
        self._timer.timeout.connect(self.run_once)
        self._timer.start()
        LOGGER.info("Autoguardado iniciado cada %d ms.", self._interval_ms)

    def stop(self) -> None:
        """Detiene el timer; los guardados en curso terminan en segundo plano."""
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None
            LOGGER.info("Autoguardado detenido.")

        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def run_once(self) -> list[Future[bool]]:
        """Compara contra la ultima instantanea y despacha guardados pendientes."""
        if self._store.is_loading or self._executor is None:
            return []

        pending = (
            (
                PRODUCTS_RESOURCE,
                self._store.serialize_products(),
                self._store.product_records,
                PRODUCT_HEADERS,
                PRODUCTS_FILENAME,
            ),
            (
                SALES_RESOURCE,
                self._store.serialize_sales(),
                self._store.sale_records,
                SALE_HEADERS,
                SALES_FILENAME,
            ),
        )

        futures: list[Future[bool]] = []
        for resource_name, serialized, build_records, headers, filename in pending:
            if serialized == self._store.saved_snapshot(resource_name):
                continue

            try:
                future = self._executor.submit(
                    self._gateway.save, build_records(), headers, filename
                )
            except RuntimeError:
                LOGGER.warning("Executor cerrado; no se guardo %s.", filename)
                continue

            future.add_done_callback(partial(self._log_outcome, filename))
            self._store.mark_saved(resource_name, serialized)
            futures.append(future)

        if futures:
            saved_at = self._clock()
            self._store.touch_saved(saved_at)
            if self._on_saved is not None:
                self._on_saved(saved_at)

        return futures

    @staticmethod
    def _build_executor() -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=2, thread_name_prefix="autosave")

    @staticmethod
    def _log_outcome(filename: str, future: Future[bool]) -> None:
        exc = future.exception()
        if exc is not None:
            LOGGER.error("Fallo inesperado al guardar %s: %s", filename, exc)
        elif future.result():
            LOGGER.info("Autoguardado completado: %s", filename)
        else:
            LOGGER.warning("Autoguardado sin destino disponible: %s", filename)
