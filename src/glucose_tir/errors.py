"""Jerarquía de errores del motor de TIR."""

from __future__ import annotations


class GlucoseTirError(Exception):
    """Base error for glucose_tir."""


class DataError(GlucoseTirError):
    """The reading series cannot produce the requested value."""


class EmptyDataSet(DataError):
    """No readings to compute percentages over."""


class PreconditionViolation(GlucoseTirError, ValueError):
    """A reading breaks the upstream ``glucose > 0`` guarantee."""
