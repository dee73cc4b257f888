"""Exportación a Excel de la tabla de TIR y los puntos del gráfico."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from glucose_tir.frames import chart_points, tir_frame
from glucose_tir.layout import LayoutMode
from glucose_tir.model import ChartData

_TIR_HEADERS: dict[str, str] = {
    "label": "Banda",
    "percentage": "Porcentaje",
    "annotation": "Etiqueta",
}

_POINT_HEADERS: dict[str, str] = {
    "datetime": "Fecha / Hora",
    "band": "Banda",
    "glucose_mg_dl": "Glucosa (mg/dL)",
    "value": "Valor",
}

_WIDTHS: dict[str, int] = {
    "Banda": 16,
    "Porcentaje": 12,
    "Etiqueta": 10,
    "Fecha / Hora": 18,
    "Glucosa (mg/dL)": 14,
    "Valor": 10,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Porcentaje": "0.0",
    "Fecha / Hora": "dd/mm/yyyy hh:mm",
    "Glucosa (mg/dL)": "0",
    "Valor": "0.0",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the TIR workbook."""

    tir_sheet: str = "TIR"
    readings_sheet: str = "Lecturas"


def write_tir_xlsx(
    data: ChartData,
    out_path: Path,
    layout: ExcelLayout,
    mode: LayoutMode = LayoutMode.STANDING,
) -> None:
    """Write TIR summary and classified readings to a formatted workbook.

    Args:
        data: Result of one analysis.
        out_path: Output path for the XLSX file.
        layout: Sheet names.
        mode: Layout used for the bar annotations.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    tir_df = tir_frame(data.stats, mode)[list(_TIR_HEADERS)].rename(
        columns=_TIR_HEADERS
    )
    points_df = _strip_timezone(chart_points(data))[list(_POINT_HEADERS)]
    points_df = points_df.rename(
        columns={**_POINT_HEADERS, "value": f"Valor ({data.unit.value})"}
    )

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        tir_df.to_excel(writer, index=False, sheet_name=layout.tir_sheet)
        points_df.to_excel(writer, index=False, sheet_name=layout.readings_sheet)
        _format_sheet(writer.book[layout.tir_sheet])
        _format_sheet(writer.book[layout.readings_sheet])


def _strip_timezone(points: pd.DataFrame) -> pd.DataFrame:
    """Excel no admite datetimes con timezone."""
    points = points.copy()
    if not points.empty:
        points["datetime"] = pd.to_datetime(
            points["datetime"].map(lambda dt: dt.replace(tzinfo=None))
        )
    return points


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _header_key(value: object) -> str:
    """Cabecera sin sufijo de unidad: 'Valor (mmol/L)' -> 'Valor'."""
    text = str(value)
    if text.startswith("Valor ("):
        return "Valor"
    return text


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    for cell in ws[1]:
        key = _header_key(cell.value)
        width = _WIDTHS.get(key)
        if width is not None:
            ws.column_dimensions[cell.column_letter].width = width
        fmt = _NUMBER_FORMATS.get(key)
        if fmt is None:
            continue
        for row in ws.iter_rows(min_row=2, min_col=cell.column, max_col=cell.column):
            row[0].number_format = fmt
