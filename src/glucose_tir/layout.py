"""Formas de presentación del gráfico de TIR."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LayoutMode(str, Enum):
    """Stacked single bar or one standing bar per band."""

    HORIZONTAL = "horizontal"
    STANDING = "standing"


@dataclass(frozen=True)
class BarAnnotation:
    """Text drawn on a TIR bar and where to draw it."""

    text: str
    position: str


def format_percentage(percentage: float) -> str:
    return f"{percentage:.0f} %"


def bar_annotation(percentage: float, mode: LayoutMode) -> BarAnnotation:
    """Annotation for one TIR bar.

    Standing bars hide a 0 % label and move small values (<= 9 %) above the
    bar, where they fit.
    """
    if mode is LayoutMode.HORIZONTAL:
        return BarAnnotation(format_percentage(percentage), "top")
    text = "" if percentage == 0 else format_percentage(percentage)
    position = "top" if percentage <= 9 else "overlay"
    return BarAnnotation(text, position)


def shows_legend(mode: LayoutMode) -> bool:
    return mode is LayoutMode.HORIZONTAL
