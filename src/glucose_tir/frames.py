"""Vistas DataFrame de lecturas, puntos del gráfico y tabla de TIR."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import datetime

import pandas as pd
from dateutil import tz

from glucose_tir.analytics import display_value
from glucose_tir.errors import PreconditionViolation
from glucose_tir.layout import LayoutMode, bar_annotation
from glucose_tir.model import Band, BandStats, ChartData, Reading

_LOCAL_TZ = tz.tzlocal()

# Series order of the glucose chart.
_CHART_BANDS: tuple[Band, ...] = (Band.HIGH, Band.IN_RANGE, Band.LOW)

POINT_COLUMNS = ["datetime", "band", "glucose_mg_dl", "value", "symbol_size"]
TIR_COLUMNS = ["band", "label", "percentage", "annotation", "annotation_position"]


def readings_to_frame(readings: Sequence[Reading]) -> pd.DataFrame:
    """Convert readings to a DataFrame (datetime, glucose_mg_dl), input order kept."""
    rows = [{"datetime": r.timestamp, "glucose_mg_dl": r.glucose} for r in readings]
    if not rows:
        return pd.DataFrame(columns=["datetime", "glucose_mg_dl"])
    return pd.DataFrame(rows)


def readings_from_frame(df: pd.DataFrame) -> list[Reading]:
    """Build readings from tabular data.

    Accepts ``datetime``/``timestamp``/``date`` for the time column and
    ``glucose_mg_dl``/``glucose``/``mg/dL`` for the value. Values are rounded
    to whole mg/dL and naive timestamps get the local time zone. Rows are not
    filtered.

    Raises:
        ValueError: If a required column is missing.
        PreconditionViolation: If a row has no usable timestamp or value.
    """
    if df.empty:
        return []

    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    cols = list(df.columns)
    time_col = _find_col(cols, [r"^datetime$", r"^timestamp$", r"^date"])
    value_col = _find_col(cols, [r"^glucose_mg_dl$", r"^glucose$", r"mg/?dl", r"gluc"])
    if time_col is None or value_col is None:
        raise ValueError(f"Missing timestamp or glucose column in {cols}")

    # Per cell: offsets may differ across a DST change.
    times = df[time_col].map(lambda v: pd.to_datetime(v, errors="coerce"))
    values = pd.to_numeric(df[value_col], errors="coerce")

    out: list[Reading] = []
    for idx, (ts, value) in enumerate(zip(times, values)):
        if pd.isna(ts) or pd.isna(value) or not math.isfinite(value):
            raise PreconditionViolation(f"Row {idx}: unusable timestamp or glucose")
        out.append(Reading(timestamp=_ensure_tz_aware(ts), glucose=int(round(value))))
    return out


def chart_points(data: ChartData) -> pd.DataFrame:
    """One row per plotted reading, grouped High, In Range, Low."""
    rows: list[dict[str, object]] = []
    for band in _CHART_BANDS:
        for reading in data.classified.for_band(band):
            rows.append(
                {
                    "datetime": reading.timestamp,
                    "band": band.value,
                    "glucose_mg_dl": reading.glucose,
                    "value": display_value(reading, data.unit),
                    "symbol_size": data.hint.symbol_size,
                }
            )
    if not rows:
        return pd.DataFrame(columns=POINT_COLUMNS)
    return pd.DataFrame(rows, columns=POINT_COLUMNS)


def tir_frame(stats: Sequence[BandStats], mode: LayoutMode) -> pd.DataFrame:
    """One row per band with the bar annotation for the chosen layout."""
    rows: list[dict[str, object]] = []
    for stat in stats:
        annotation = bar_annotation(stat.percentage, mode)
        rows.append(
            {
                "band": stat.band.value,
                "label": stat.label,
                "percentage": stat.percentage,
                "annotation": annotation.text,
                "annotation_position": annotation.position,
            }
        )
    return pd.DataFrame(rows, columns=TIR_COLUMNS)


def _find_col(columns: list[str], patterns: list[str]) -> str | None:
    for pat in patterns:
        rx = re.compile(pat, re.IGNORECASE)
        for c in columns:
            if rx.search(c):
                return c
    return None


def _ensure_tz_aware(ts: pd.Timestamp) -> datetime:
    dt = ts.to_pydatetime()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=_LOCAL_TZ)
    return dt
