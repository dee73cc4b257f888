"""Persistencia SQLite de la configuración de análisis."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeVar

from glucose_tir.layout import LayoutMode
from glucose_tir.units import DisplayUnit

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class AppSettings:
    """Thresholds (mg/dL), display unit and TIR layout."""

    low_limit: float = 70
    high_limit: float = 180
    units: DisplayUnit = DisplayUnit.MG_DL
    layout: LayoutMode = LayoutMode.STANDING


class SettingsStore:
    """Key/value settings table in SQLite."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def load_settings(self) -> AppSettings:
        """Devuelve configuracion guardada o defaults."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        defaults = AppSettings()
        return AppSettings(
            low_limit=_parse_float(values.get("low_limit"), defaults.low_limit),
            high_limit=_parse_float(values.get("high_limit"), defaults.high_limit),
            units=_parse_enum(DisplayUnit, values.get("units"), defaults.units),
            layout=_parse_enum(LayoutMode, values.get("layout"), defaults.layout),
        )

    def save_settings(self, settings: AppSettings) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            "low_limit": repr(float(settings.low_limit)),
            "high_limit": repr(float(settings.high_limit)),
            "units": settings.units.value,
            "layout": settings.layout.value,
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()


def _parse_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring stored threshold %r, using %s", raw, default)
        return default


def _parse_enum(enum_cls: type[_E], raw: str | None, default: _E) -> _E:
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning("ignoring stored %s %r", enum_cls.__name__, raw)
        return default
