"""Punto de entrada: python -m glucose_tir."""

from __future__ import annotations

from glucose_tir.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
