from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timedelta

import pytest

from glucose_tir.analytics import (
    aggregate,
    analyze,
    axis_marks,
    band_labels,
    classify,
    display_hint,
    display_value,
    symbol_size,
)
from glucose_tir.errors import PreconditionViolation
from glucose_tir.model import Band, Reading
from glucose_tir.units import DisplayUnit

_START = datetime(2025, 12, 15, 8, 0)


def _readings(values: list[float]) -> list[Reading]:
    # Newest first, like the reading store returns them.
    return [
        Reading(timestamp=_START - timedelta(minutes=5 * i), glucose=v)  # type: ignore[arg-type]
        for i, v in enumerate(values)
    ]


def _values(readings: tuple[Reading, ...]) -> list[float]:
    return [r.glucose for r in readings]


def test_end_to_end_scenario() -> None:
    readings = _readings([70, 120, 181, 59, 200])

    classified = classify(readings, 70, 180)
    assert _values(classified.low) == [59]
    assert _values(classified.in_range) == [70, 120]
    assert _values(classified.high) == [181, 200]

    stats = aggregate(readings, 70, 180)
    assert [s.band for s in stats] == [Band.LOW, Band.IN_RANGE, Band.HIGH]
    assert stats[0].percentage == 40
    assert stats[1].percentage == 20
    assert stats[2].percentage == 40


def test_classify_is_stable_partition() -> None:
    readings = _readings([200, 60, 100, 190, 50, 120])
    classified = classify(readings, 70, 180)
    assert _values(classified.high) == [200, 190]
    assert _values(classified.low) == [60, 50]
    assert _values(classified.in_range) == [100, 120]
    assert classified.total == len(readings)


def test_classify_truncates_decimal_limits() -> None:
    readings = _readings([70, 180, 181])
    classified = classify(readings, 70.9, 180.9)
    assert _values(classified.in_range) == [70, 180]
    assert _values(classified.high) == [181]


def test_high_boundary_in_range_for_classify_but_hyper_for_tir() -> None:
    readings = _readings([180, 100])
    classified = classify(readings, 70, 180.4)
    assert _values(classified.in_range) == [180, 100]
    assert classified.count(Band.HIGH) == 0

    stats = aggregate(readings, 70, 180.4)
    assert stats[2].percentage == 50
    assert stats[0].percentage == 0
    assert stats[1].percentage == 50


def test_low_boundary_in_range_for_classify_but_hypo_for_tir() -> None:
    readings = _readings([70, 100])
    classified = classify(readings, 70.6, 180)
    assert _values(classified.in_range) == [70, 100]
    assert classified.count(Band.LOW) == 0

    stats = aggregate(readings, 70.6, 180)
    assert stats[0].percentage == 50
    assert stats[1].percentage == 50
    assert stats[2].percentage == 0


def test_partition_and_percentages_over_random_series() -> None:
    rng = random.Random(20251215)
    for _ in range(50):
        values = [rng.randint(30, 400) for _ in range(rng.randint(1, 300))]
        readings = _readings(values)
        classified = classify(readings, 70, 180)
        counts = sum(classified.count(band) for band in Band)
        assert counts == len(readings)

        stats = aggregate(readings, 70, 180)
        assert sum(s.percentage for s in stats) == pytest.approx(100)
        for s in stats:
            assert 0 <= s.percentage <= 100


def test_aggregate_empty_returns_zeros() -> None:
    stats = aggregate([], 70, 180)
    assert len(stats) == 3
    for s in stats:
        assert s.percentage == 0.0
        assert not math.isnan(s.percentage)
    assert [s.label for s in stats] == ["Low (70.0)", "In Range", "High (180.0)"]


def test_classify_empty_returns_empty_bands() -> None:
    classified = classify([], 70, 180)
    assert classified.total == 0


def test_aggregate_labels_follow_display_unit() -> None:
    stats = aggregate(_readings([100]), 72, 180, DisplayUnit.MMOL_L)
    assert stats[0].label == "Low (4.0)"
    assert stats[1].label == "In Range"
    assert stats[2].label == "High (10.0)"
    assert stats[1].percentage == 100


def test_display_unit_does_not_change_percentages() -> None:
    readings = _readings([70, 120, 181, 59, 200])
    mg = aggregate(readings, 70, 180, DisplayUnit.MG_DL)
    mmol = aggregate(readings, 70, 180, DisplayUnit.MMOL_L)
    assert [s.percentage for s in mg] == [s.percentage for s in mmol]


def test_band_labels_translate_hook() -> None:
    spanish = {"Low": "Bajo", "In Range": "En rango", "High": "Alto"}
    labels = band_labels(70, 180, translate=spanish.__getitem__)
    assert labels == {
        Band.LOW: "Bajo (70.0)",
        Band.IN_RANGE: "En rango",
        Band.HIGH: "Alto (180.0)",
    }


@pytest.mark.parametrize(
    ("count", "expected"),
    [
        (0, 50),
        (5, 50),
        (19, 50),
        (20, 35),
        (49, 35),
        (50, 15),
        (500, 15),
        (2000, 15),
        (2001, 5),
    ],
)
def test_symbol_size_table(count: int, expected: float) -> None:
    assert symbol_size(count) == expected
    assert display_hint(count).symbol_size == expected


def test_axis_marks_per_unit() -> None:
    assert axis_marks(70, 180, DisplayUnit.MG_DL) == [0, 70, 180, 270]
    marks = axis_marks(70, 180, DisplayUnit.MMOL_L)
    assert marks == pytest.approx([0, 70 * 0.0555, 180 * 0.0555, 15])


def test_display_value_converts_reading() -> None:
    reading = Reading(timestamp=_START, glucose=100)
    assert display_value(reading, DisplayUnit.MG_DL) == 100
    assert display_value(reading, DisplayUnit.MMOL_L) == 100 * 0.0555


@pytest.mark.parametrize("bad", [0, -5, float("nan"), float("inf")])
def test_invalid_glucose_fails_fast(bad: float) -> None:
    readings = _readings([100, bad])
    with pytest.raises(PreconditionViolation):
        classify(readings, 70, 180)
    with pytest.raises(PreconditionViolation):
        aggregate(readings, 70, 180)


def test_inverted_thresholds_are_deterministic(caplog: pytest.LogCaptureFixture) -> None:
    readings = _readings([50, 100, 200])
    with caplog.at_level(logging.WARNING, logger="glucose_tir.analytics"):
        classified = classify(readings, 180, 70)
    assert "above high limit" in caplog.text
    assert _values(classified.low) == [50]
    assert _values(classified.in_range) == []
    assert _values(classified.high) == [100, 200]

    stats = aggregate(readings, 180, 70)
    assert stats[0].percentage == pytest.approx(200 / 3)
    assert stats[2].percentage == pytest.approx(200 / 3)
    assert stats[1].percentage == pytest.approx(-100 / 3)


def test_analyze_is_idempotent() -> None:
    readings = _readings([70, 120, 181, 59, 200])
    first = analyze(readings, 70, 180, DisplayUnit.MMOL_L)
    second = analyze(readings, 70, 180, DisplayUnit.MMOL_L)
    assert first == second
    assert first.hint.symbol_size == 50
    assert first.unit is DisplayUnit.MMOL_L
    assert first.axis_marks[-1] == 15
    assert first.classified.count(Band.HIGH) == 2
