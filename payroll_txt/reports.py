"""Reporting utilities for reconciliation results."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from .models import Event, ReconciliationResult

COLUMNS = ("Matrícula", "Extras Restantes (h)", "Faltas Restantes (h)", "Detalhes")


def _serialize_result(result: ReconciliationResult) -> Dict[str, str]:
    return {
        "Matrícula": result.registration,
        "Extras Restantes (h)": f"{result.overtime_remaining:.2f}",
        "Faltas Restantes (h)": f"{result.absence_remaining:.2f}",
        "Detalhes": result.details,
    }


def _serialize_offset(result: ReconciliationResult) -> Dict[str, object]:
    return {
        "Matrícula": result.registration,
        "Extras 100% (h)": round(result.overtime_100_hours, 2),
        "Extras 50% (h)": round(result.overtime_50_hours, 2),
        "Faltas Injustificadas (h)": round(result.unjustified_absence_hours, 2),
        "Compensado das Extras 100% (h)": round(result.used_from_overtime_100, 2),
        "Compensado das Extras 50% (h)": round(result.used_from_overtime_50, 2),
        "Extras Restantes (h)": round(result.overtime_remaining, 2),
        "Faltas Restantes (h)": round(result.absence_remaining, 2),
        "Faltas Justificadas (h)": round(result.justified_absence_hours, 2),
        "Atestados (h)": round(result.medical_certificate_hours, 2),
    }


def results_frame(results: Sequence[ReconciliationResult]) -> pd.DataFrame:
    """Return the detailed offsetting figures as a DataFrame."""

    return pd.DataFrame([_serialize_offset(result) for result in results])


def render_table(title: str, records: Iterable[Dict[str, str]]) -> str:
    rows = list(records)
    lines = [title]
    if not rows:
        lines.append("Nenhum registro.")
        return "\n".join(lines)
    widths = {column: max(len(column), *(len(row[column]) for row in rows)) for column in COLUMNS}
    lines.append("  ".join(column.ljust(widths[column]) for column in COLUMNS))
    for row in rows:
        lines.append("  ".join(row[column].ljust(widths[column]) for column in COLUMNS))
    return "\n".join(lines)


def render_results(results: Sequence[ReconciliationResult], malformed: Sequence[Event] = ()) -> str:
    lines = [render_table("# Saldo de Horas", (_serialize_result(item) for item in results))]
    if malformed:
        lines.append("\n## Linhas com problemas")
        for event in malformed:
            lines.append(f"- Matrícula '{event.registration}': {'; '.join(event.problems)}")
    return "\n".join(lines)


def _ensure_openpyxl() -> Tuple["Workbook", Callable[[int], str]]:
    try:
        from openpyxl import Workbook
        from openpyxl.utils import get_column_letter
    except ModuleNotFoundError as exc:
        raise RuntimeError("A geração de relatórios Excel requer a instalação de 'openpyxl'.") from exc
    return Workbook, get_column_letter


def _autosize_columns(worksheet, get_column_letter) -> None:
    widths: Dict[int, int] = {}
    for row in worksheet.iter_rows(values_only=True):
        for index, value in enumerate(row, start=1):
            if value is None:
                continue
            widths[index] = max(widths.get(index, 0), len(str(value)))
    for index, width in widths.items():
        worksheet.column_dimensions[get_column_letter(index)].width = min(width + 2, 80)


def _write_sheet(workbook, get_column_letter, title: str, rows: List[Dict[str, object]]) -> None:
    sheet = workbook.create_sheet(title)
    if not rows:
        return
    headers = list(rows[0].keys())
    sheet.append(headers)
    for row in rows:
        sheet.append([row.get(header, "") for header in headers])
    _autosize_columns(sheet, get_column_letter)


def write_excel_report(
    results: Sequence[ReconciliationResult],
    path: Path,
    malformed: Sequence[Event] = (),
) -> None:
    """Persist the balances into an Excel workbook."""

    Workbook, get_column_letter = _ensure_openpyxl()
    workbook = Workbook()
    workbook.remove(workbook.active)

    _write_sheet(workbook, get_column_letter, "Saldos", [_serialize_result(item) for item in results])
    _write_sheet(workbook, get_column_letter, "Compensação", [_serialize_offset(item) for item in results])

    problems = [
        {"Matrícula": event.registration, "Evento": event.event_code, "Problemas": "; ".join(event.problems)}
        for event in malformed
    ]
    _write_sheet(workbook, get_column_letter, "Problemas", problems)

    workbook.save(path)
