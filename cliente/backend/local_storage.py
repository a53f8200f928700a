"""Almacen clave-valor local usado como respaldo de la persistencia remota."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from parametros import LOCAL_STORAGE_DIR
from shared.errors import ServiceError, ValidationError

LOGGER = logging.getLogger(__name__)


class LocalStorage:
    """Guarda textos por clave tipo ruta (``/stockcsv/products.csv``) en un directorio."""

    _TMP_SUFFIX = ".tmp"

    def __init__(self, root_dir: Path = LOCAL_STORAGE_DIR) -> None:
        self._root_dir = root_dir

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def get_item(self, key: str) -> str | None:
        """Retorna el texto guardado para la clave o None si no existe."""
        path = self._path_for(key)
        if not path.is_file():
            return None

        try:
            with path.open("r", encoding="utf-8", newline="") as stored_file:
                return stored_file.read()
        except OSError as exc:
            raise ServiceError(f"No fue posible leer la clave local: {key}") from exc

    def set_item(self, key: str, value: str) -> None:
        """Sobrescribe la clave completa con reemplazo atomico del archivo."""
        path = self._path_for(key)
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=self._TMP_SUFFIX,
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp_file:
                tmp_file.write(value)
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise ServiceError(f"No fue posible escribir la clave local: {key}") from exc

        LOGGER.debug("Clave local actualizada: %s (%d bytes)", key, len(value))

    def remove_item(self, key: str) -> None:
        """Elimina la clave si existe."""
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise ServiceError(f"No fue posible eliminar la clave local: {key}") from exc

    def keys(self, prefix: str = "") -> list[str]:
        """Lista claves existentes que comienzan con ``prefix``, ordenadas."""
        if not self._root_dir.is_dir():
            return []

        found: list[str] = []
        for path in self._root_dir.rglob("*"):
            if not path.is_file() or path.name.endswith(self._TMP_SUFFIX):
                continue
            key = "/" + path.relative_to(self._root_dir).as_posix()
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)

    def _path_for(self, key: str) -> Path:
        """Resuelve la ruta de archivo de una clave, sin salir del directorio raiz."""
        relative = key.strip().lstrip("/")
        if not relative:
            raise ValidationError("La clave local no puede estar vacia.")

        root = self._root_dir.resolve()
        path = (root / relative).resolve()
        if root not in path.parents:
            raise ValidationError(f"Clave local fuera del almacen: {key}")
        return path
