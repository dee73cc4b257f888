"""Modelos tipados para lecturas de glucosa y resultados de TIR."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from glucose_tir.units import DisplayUnit


class Band(str, Enum):
    """Glucose band, declared in display order."""

    LOW = "Low"
    IN_RANGE = "In Range"
    HIGH = "High"


@dataclass(frozen=True)
class Reading:
    """One glucose measurement event in mg/dL."""

    timestamp: datetime
    glucose: int


@dataclass(frozen=True)
class Thresholds:
    """Low/high limits in mg/dL.

    Comparisons use the integer part of each limit, truncated toward zero.
    ``low_limit <= high_limit`` is expected but not checked here.
    """

    low_limit: float
    high_limit: float

    @property
    def effective_low(self) -> int:
        return int(self.low_limit)

    @property
    def effective_high(self) -> int:
        return int(self.high_limit)

    @property
    def inverted(self) -> bool:
        return self.low_limit > self.high_limit


@dataclass(frozen=True)
class BandStats:
    """Percentage of readings for one band, with its display label."""

    band: Band
    percentage: float
    label: str


@dataclass(frozen=True)
class DisplayHint:
    """Point size for the glucose chart."""

    symbol_size: float


@dataclass(frozen=True)
class ClassifiedReadings:
    """Stable three-way partition of a reading series."""

    low: tuple[Reading, ...]
    in_range: tuple[Reading, ...]
    high: tuple[Reading, ...]

    def for_band(self, band: Band) -> tuple[Reading, ...]:
        if band is Band.LOW:
            return self.low
        if band is Band.IN_RANGE:
            return self.in_range
        return self.high

    def count(self, band: Band) -> int:
        return len(self.for_band(band))

    @property
    def total(self) -> int:
        return len(self.low) + len(self.in_range) + len(self.high)


@dataclass(frozen=True)
class ChartData:
    """Everything the chart surface needs for one query."""

    classified: ClassifiedReadings
    stats: list[BandStats]
    hint: DisplayHint
    axis_marks: list[float]
    unit: DisplayUnit
