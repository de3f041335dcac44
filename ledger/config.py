from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("LEDGER_DATA_DIR", _PROJECT_ROOT / "data"))
SNAPSHOT_DIR = Path(os.getenv("LEDGER_SNAPSHOT_DIR", DATA_DIR / "snapshots"))

# Snapshots are stored under "<STORAGE_KEY>_<owner>".
STORAGE_KEY = os.getenv("LEDGER_STORAGE_KEY", "ledgerData")

DEFAULT_CURRENCY = os.getenv("LEDGER_CURRENCY", "BRL")

LOG_LEVEL = os.getenv("LEDGER_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, SNAPSHOT_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for applications embedding the engine."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
