# hamlet/config.py
from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DATA_DIR = PROJECT_ROOT / "data"

DB_PATH = DATA_DIR / "hamlet.db"
DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH.as_posix()}")

if DATABASE_URL.startswith("sqlite:///") and ":memory:" not in DATABASE_URL:
    DATA_DIR.mkdir(parents=True, exist_ok=True)

# Admin override key (single source of truth)
ADMIN_KEY: str = os.getenv("ADMIN_KEY", "")

# Ledger
STARTING_BALANCE: int = int(os.getenv("STARTING_BALANCE", "2000"))
TREASURY_HOLDER: str = os.getenv("TREASURY_HOLDER", "treasury")

SESSION_HOURS: int = int(os.getenv("SESSION_HOURS", "24"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
