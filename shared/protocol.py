"""DTOs del protocolo entre el store y el gateway de persistencia."""

from __future__ import annotations

from dataclasses import dataclass

SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"
SOURCE_DEFAULT = "default"


@dataclass(slots=True)
class LoadResult:
    """Resultado de cargar un recurso CSV."""

    resource_name: str
    text: str
    source: str
    error: str | None = None

    @property
    def used_fallback(self) -> bool:
        return self.source != SOURCE_REMOTE


@dataclass(slots=True)
class SaveResult:
    """Resultado de guardar un recurso CSV en servidor y respaldo local."""

    filename: str
    remote_ok: bool
    local_ok: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        """El respaldo local es el piso de durabilidad."""
        return self.remote_ok or self.local_ok
