"""Gateway de persistencia CSV: servidor remoto con respaldo en almacen local."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

import requests

from parametros import (
    API_BASE_URL,
    HTTP_TIMEOUT_SECONDS,
    LOCAL_STORAGE_PREFIX,
    MAX_LOCAL_BACKUPS,
)
from shared.csv_codec import encode_csv
from shared.csv_schema import default_csv_for
from shared.errors import ServiceError, ValidationError
from shared.protocol import (
    SOURCE_DEFAULT,
    SOURCE_LOCAL,
    SOURCE_REMOTE,
    LoadResult,
    SaveResult,
)

from .local_storage import LocalStorage

LOGGER = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


class PersistenceGateway(Protocol):
    """Interfaz de persistencia consumida por el store y el autoguardado."""

    def load(self, resource_name: str) -> str:
        """Retorna el CSV de un recurso; nunca lanza excepciones."""

    def save(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[str],
        filename: str,
    ) -> bool:
        """Guarda filas como CSV; retorna True si quedo persistido en algun lado."""


class HttpCsvGateway:
    """Implementacion HTTP del gateway con fallback al almacen local."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        storage: LocalStorage | None = None,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        max_backups: int = MAX_LOCAL_BACKUPS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._storage = storage or LocalStorage()
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_backups = max_backups
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def local_key_for(filename: str) -> str:
        """Clave local primaria para un archivo CSV."""
        return f"{LOCAL_STORAGE_PREFIX}/{filename}"

    def load(self, resource_name: str) -> str:
        return self.fetch(resource_name).text

    def save(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[str],
        filename: str,
    ) -> bool:
        return self.push(records, fields, filename).ok

    def fetch(self, resource_name: str) -> LoadResult:
        """Carga un recurso desde el servidor; ante fallo usa almacen local o default."""
        url = f"{self._base_url}/{resource_name}"
        try:
            response = self._session.get(url, timeout=self._timeout)
            if response.ok:
                return LoadResult(
                    resource_name=resource_name,
                    text=response.text,
                    source=SOURCE_REMOTE,
                )
            error = f"HTTP {response.status_code}"
        except requests.RequestException as exc:
            error = str(exc) or exc.__class__.__name__

        LOGGER.warning(
            "No fue posible cargar '%s' desde el servidor (%s). Se usa respaldo local.",
            resource_name,
            error,
        )

        key = self.local_key_for(f"{resource_name}.csv")
        try:
            text = self._storage.get_item(key)
        except (ServiceError, ValidationError) as exc:
            LOGGER.error("Fallo lectura de respaldo local %s: %s", key, exc)
            text = None

        if text:
            return LoadResult(
                resource_name=resource_name,
                text=text,
                source=SOURCE_LOCAL,
                error=error,
            )

        LOGGER.info("Sin datos locales para '%s'; se usa CSV vacio.", resource_name)
        return LoadResult(
            resource_name=resource_name,
            text=default_csv_for(resource_name),
            source=SOURCE_DEFAULT,
            error=error,
        )

    def push(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[str],
        filename: str,
    ) -> SaveResult:
        """Guarda el CSV en el servidor y siempre deja copia en el almacen local."""
        csv_content = encode_csv(records, fields)
        errors: list[str] = []

        remote_ok = self._put_remote(filename, csv_content, errors)
        local_ok = self._write_local(filename, csv_content, errors)

        result = SaveResult(
            filename=filename,
            remote_ok=remote_ok,
            local_ok=local_ok,
            error="; ".join(errors) or None,
        )
        if not result.ok:
            LOGGER.error("No fue posible guardar %s en ningun destino: %s", filename, result.error)
        return result

    def _put_remote(self, filename: str, csv_content: str, errors: list[str]) -> bool:
        url = f"{self._base_url}/save-csv/{filename}"
        try:
            response = self._session.put(
                url,
                data=csv_content.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            error = str(exc) or exc.__class__.__name__
        else:
            if response.ok:
                return True
            error = f"HTTP {response.status_code}"

        errors.append(f"servidor: {error}")
        LOGGER.warning(
            "No fue posible guardar %s en el servidor (%s). Queda respaldo local.",
            filename,
            error,
        )
        return False

    def _write_local(self, filename: str, csv_content: str, errors: list[str]) -> bool:
        key = self.local_key_for(filename)
        try:
            self._storage.set_item(key, csv_content)
        except (ServiceError, ValidationError) as exc:
            errors.append(f"local: {exc}")
            LOGGER.error("Fallo escritura de respaldo local %s: %s", key, exc)
            return False

        try:
            self._write_backup(key, csv_content)
        except (ServiceError, ValidationError) as exc:
            LOGGER.warning("Fallo copia de respaldo con timestamp para %s: %s", key, exc)
        return True

    def _write_backup(self, key: str, csv_content: str) -> None:
        """Escribe una copia con timestamp y poda las copias mas antiguas."""
        timestamp = self._clock().strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        self._storage.set_item(f"{key}.{timestamp}{BACKUP_SUFFIX}", csv_content)
        self._prune_backups(key)

    def _prune_backups(self, key: str) -> None:
        backups = [
            backup_key
            for backup_key in self._storage.keys(prefix=f"{key}.")
            if backup_key.endswith(BACKUP_SUFFIX)
        ]
        excess = len(backups) - self._max_backups
        if excess <= 0:
            return

        for backup_key in backups[:excess]:
            self._storage.remove_item(backup_key)
        LOGGER.debug("Respaldos antiguos eliminados para %s: %d", key, excess)
