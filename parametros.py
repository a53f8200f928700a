"""Parametros globales del proyecto."""

from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
LOCAL_STORAGE_DIR = DATA_DIR / "local_storage"
REPORTS_DIR = DATA_DIR / "reportes"

API_BASE_URL = os.environ.get("KIOSKO_API_URL", "http://localhost:3001/api").rstrip("/")
HTTP_TIMEOUT_SECONDS = 10.0
LOCAL_STORAGE_PREFIX = "/stockcsv"

AUTOSAVE_INTERVAL_MS = 5000
MAX_LOCAL_BACKUPS = 10

# Umbral unico para porcentaje de stock y alerta de stock bajo.
DEFAULT_STOCK_MINIMO = 10

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
