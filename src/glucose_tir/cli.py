"""CLI para calcular Time-In-Range a partir de un CSV de lecturas."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import pandas as pd

from glucose_tir.analytics import analyze
from glucose_tir.errors import GlucoseTirError
from glucose_tir.excel_writer import ExcelLayout, write_tir_xlsx
from glucose_tir.frames import readings_from_frame, tir_frame
from glucose_tir.layout import LayoutMode
from glucose_tir.storage import AppSettings, SettingsStore
from glucose_tir.units import DisplayUnit

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Time-In-Range: lecturas bajas, en rango y altas."
    )
    parser.add_argument(
        "--readings",
        required=True,
        help="CSV con columnas de fecha/hora y glucosa (mg/dL).",
    )
    parser.add_argument("--low", type=float, help="Límite bajo en mg/dL.")
    parser.add_argument("--high", type=float, help="Límite alto en mg/dL.")
    parser.add_argument(
        "--units",
        choices=[u.value for u in DisplayUnit],
        help="Unidad de visualización.",
    )
    parser.add_argument(
        "--layout",
        choices=[m.value for m in LayoutMode],
        help="Forma del gráfico de TIR.",
    )
    parser.add_argument(
        "--settings",
        default=str(Path.cwd() / "glucose_tir.sqlite3"),
        help="Archivo SQLite de configuración.",
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Guarda los valores usados como nueva configuración.",
    )
    parser.add_argument("--xlsx", help="Exporta el resultado a este archivo Excel.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


def resolve_settings(ns: argparse.Namespace, stored: AppSettings) -> AppSettings:
    """Command-line values override the stored settings for this run."""
    settings = stored
    if ns.low is not None:
        settings = replace(settings, low_limit=ns.low)
    if ns.high is not None:
        settings = replace(settings, high_limit=ns.high)
    if ns.units is not None:
        settings = replace(settings, units=DisplayUnit(ns.units))
    if ns.layout is not None:
        settings = replace(settings, layout=LayoutMode(ns.layout))
    return settings


def main() -> int:
    """Run the TIR CLI.

    Returns:
        Exit code (0 on success, 1 on input errors).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = SettingsStore(Path(ns.settings).expanduser())
    settings = resolve_settings(ns, store.load_settings())

    readings_path = Path(ns.readings).expanduser()
    try:
        readings = readings_from_frame(pd.read_csv(readings_path))
        data = analyze(
            readings, settings.low_limit, settings.high_limit, settings.units
        )
    except FileNotFoundError as exc:
        print(f"Error: no existe {exc.filename or readings_path}", file=sys.stderr)
        return 1
    except (GlucoseTirError, ValueError) as exc:
        logger.debug("analysis failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if ns.save_settings:
        store.save_settings(settings)

    table = tir_frame(data.stats, settings.layout)
    for _, row in table.iterrows():
        print(f"{row['label']}: {row['annotation'] or '-'}")
    print(f"Lecturas: {len(readings)} (tamaño de punto {data.hint.symbol_size:g})")

    if ns.xlsx:
        out_path = Path(ns.xlsx).expanduser()
        write_tir_xlsx(data, out_path, ExcelLayout(), settings.layout)
        print(f"OK: Output: {out_path}")
    return 0
