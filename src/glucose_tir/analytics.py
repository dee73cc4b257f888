"""Clasificación por bandas y Time-In-Range sobre una serie de lecturas."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

from glucose_tir.errors import EmptyDataSet, PreconditionViolation
from glucose_tir.model import (
    Band,
    BandStats,
    ChartData,
    ClassifiedReadings,
    DisplayHint,
    Reading,
    Thresholds,
)
from glucose_tir.units import DisplayUnit, format_threshold, to_display

logger = logging.getLogger(__name__)

Translate = Callable[[str], str]

_AXIS_TOP: dict[DisplayUnit, float] = {
    DisplayUnit.MG_DL: 270,
    DisplayUnit.MMOL_L: 15,
}


def classify(
    readings: Sequence[Reading],
    low_limit: float,
    high_limit: float,
) -> ClassifiedReadings:
    """Split readings into Low / In Range / High.

    Both limits are truncated to integers. A value equal to either limit is
    In Range. The relative order of the input is kept in every band.

    Args:
        readings: Readings in mg/dL.
        low_limit: Low limit in mg/dL.
        high_limit: High limit in mg/dL.

    Returns:
        The three bands as tuples.

    Raises:
        PreconditionViolation: If a glucose value is not a positive finite number.
    """
    _check_readings(readings)
    thresholds = _thresholds(low_limit, high_limit)
    low_cut = thresholds.effective_low
    high_cut = thresholds.effective_high

    low: list[Reading] = []
    in_range: list[Reading] = []
    high: list[Reading] = []
    for reading in readings:
        if reading.glucose > high_cut:
            high.append(reading)
        elif reading.glucose < low_cut:
            low.append(reading)
        else:
            in_range.append(reading)

    logger.debug(
        "classified %d readings: low=%d in_range=%d high=%d",
        len(readings),
        len(low),
        len(in_range),
        len(high),
    )
    return ClassifiedReadings(low=tuple(low), in_range=tuple(in_range), high=tuple(high))


def aggregate(
    readings: Sequence[Reading],
    low_limit: float,
    high_limit: float,
    unit: DisplayUnit = DisplayUnit.MG_DL,
    translate: Translate | None = None,
) -> list[BandStats]:
    """Time-In-Range percentages, ordered Low, In Range, High.

    Unlike :func:`classify`, both limits are inclusive here: a reading equal
    to the high limit counts as high and one equal to the low limit counts as
    low. An empty series yields 0.0 for every band.

    Args:
        readings: Readings in mg/dL.
        low_limit: Low limit in mg/dL.
        high_limit: High limit in mg/dL.
        unit: Unit used for the thresholds shown in the labels.
        translate: Localization hook applied to band names.

    Returns:
        Exactly three BandStats.
    """
    _check_readings(readings)
    thresholds = _thresholds(low_limit, high_limit)
    try:
        hypo_pct, in_range_pct, hyper_pct = _percentages(readings, thresholds)
    except EmptyDataSet:
        logger.debug("no readings, reporting 0%% for every band")
        hypo_pct, in_range_pct, hyper_pct = 0.0, 0.0, 0.0

    labels = band_labels(low_limit, high_limit, unit, translate)
    return [
        BandStats(Band.LOW, hypo_pct, labels[Band.LOW]),
        BandStats(Band.IN_RANGE, in_range_pct, labels[Band.IN_RANGE]),
        BandStats(Band.HIGH, hyper_pct, labels[Band.HIGH]),
    ]


def _percentages(
    readings: Sequence[Reading], thresholds: Thresholds
) -> tuple[float, float, float]:
    total = len(readings)
    if total == 0:
        raise EmptyDataSet("no readings to compute time in range")

    hyper_count = sum(1 for r in readings if r.glucose >= thresholds.effective_high)
    hypo_count = sum(1 for r in readings if r.glucose <= thresholds.effective_low)

    hyper_pct = 100 * hyper_count / total
    hypo_pct = 100 * hypo_count / total
    in_range_pct = 100 - (hypo_pct + hyper_pct)
    logger.debug(
        "tir over %d readings: hypo=%d hyper=%d", total, hypo_count, hyper_count
    )
    return hypo_pct, in_range_pct, hyper_pct


def symbol_size(count: int) -> float:
    """Chart point size; fewer readings get larger points."""
    if count < 20:
        return 50
    if count < 50:
        return 35
    if count > 2000:
        return 5
    return 15


def display_hint(count: int) -> DisplayHint:
    return DisplayHint(symbol_size=symbol_size(count))


def band_labels(
    low_limit: float,
    high_limit: float,
    unit: DisplayUnit = DisplayUnit.MG_DL,
    translate: Translate | None = None,
) -> dict[Band, str]:
    """Band names, with the threshold in the display unit for Low and High."""
    tr = translate or _identity
    return {
        Band.LOW: f"{tr(Band.LOW.value)} ({format_threshold(low_limit, unit)})",
        Band.IN_RANGE: tr(Band.IN_RANGE.value),
        Band.HIGH: f"{tr(Band.HIGH.value)} ({format_threshold(high_limit, unit)})",
    }


def axis_marks(
    low_limit: float,
    high_limit: float,
    unit: DisplayUnit = DisplayUnit.MG_DL,
) -> list[float]:
    """Y-axis marks: zero, both limits and a fixed top value per unit."""
    return [
        0,
        to_display(low_limit, unit),
        to_display(high_limit, unit),
        _AXIS_TOP[unit],
    ]


def display_value(reading: Reading, unit: DisplayUnit) -> float:
    """Reading value as plotted on the chart."""
    return to_display(float(reading.glucose), unit)


def analyze(
    readings: Sequence[Reading],
    low_limit: float,
    high_limit: float,
    unit: DisplayUnit = DisplayUnit.MG_DL,
    translate: Translate | None = None,
) -> ChartData:
    """Run classification, aggregation and display hints in one pass.

    Nothing is cached; call again whenever readings or settings change.
    """
    return ChartData(
        classified=classify(readings, low_limit, high_limit),
        stats=aggregate(readings, low_limit, high_limit, unit, translate),
        hint=display_hint(len(readings)),
        axis_marks=axis_marks(low_limit, high_limit, unit),
        unit=unit,
    )


def _thresholds(low_limit: float, high_limit: float) -> Thresholds:
    thresholds = Thresholds(low_limit=low_limit, high_limit=high_limit)
    if thresholds.inverted:
        logger.warning(
            "low limit %s is above high limit %s; bands will be degenerate",
            low_limit,
            high_limit,
        )
    return thresholds


def _check_readings(readings: Sequence[Reading]) -> None:
    for reading in readings:
        value = reading.glucose
        if not math.isfinite(value) or value <= 0:
            raise PreconditionViolation(
                f"glucose must be a positive finite value, got {value!r} "
                f"at {reading.timestamp}"
            )


def _identity(text: str) -> str:
    return text
