"""Utilities for loading launch spreadsheets and legacy text files."""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterator, List

import pandas as pd

from .models import LaunchRecord


class DataValidationError(RuntimeError):
    """Raised when the input file is invalid."""


TEXT_ENCODINGS = ("utf-8-sig", "latin-1")

REQUIRED_COLUMNS = {"employee_id", "launch_date", "total_value"}


def _normalize_header(header: object) -> str:
    value = "" if header is None else str(header)
    value = value.replace("\ufeff", "")  # Remove UTF-8 BOM markers.
    value = " ".join(value.strip().split())
    return value.lower()


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, str):
        return " ".join(value.replace("\xa0", " ").strip().split())
    return str(value)


def _parse_date(value: object, *, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, "to_pydatetime"):
        return value.to_pydatetime().date()
    text = _stringify(value)
    if not text:
        raise DataValidationError(f"Data inválida '{value}' no campo '{field_name}'.")
    iso_like = len(text) >= 10 and text[4] == "-"
    try:
        parsed = pd.to_datetime(text, dayfirst=not iso_like, errors="raise")
    except (TypeError, ValueError) as exc:
        raise DataValidationError(f"Data inválida '{value}' no campo '{field_name}'.") from exc
    if pd.isna(parsed):
        raise DataValidationError(f"Data inválida '{value}' no campo '{field_name}'.")
    return parsed.to_pydatetime().date()


def _parse_float(value: object, *, field_name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not pd.isna(value):
        return float(value)
    text = _stringify(value)
    if not text:
        return 0.0
    cleaned = text.replace("R$", "").replace(" ", "")
    if "," in cleaned and cleaned.count(",") == 1:
        cleaned = cleaned.replace(".", "")
        cleaned = cleaned.replace(",", ".")
    try:
        return float(cleaned)
    except ValueError as exc:
        raise DataValidationError(f"Valor inválido '{value}' no campo '{field_name}'.") from exc


def _clean_row(row: Dict[str, object]) -> Dict[str, object]:
    cleaned = {header: ("" if value is None else value) for header, value in row.items()}
    if all(_stringify(value) == "" for value in cleaned.values()):
        return {}
    return cleaned


def _read_rows(path: Path) -> Iterator[Dict[str, object]]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with path.open("r", newline="", encoding="utf-8-sig") as handle:
            sample = handle.read(2048)
            handle.seek(0)
            delimiter = ";" if sample.count(";") > sample.count(",") else ","
            reader = csv.DictReader(handle, delimiter=delimiter)
            if not reader.fieldnames:
                raise DataValidationError("Arquivo CSV sem cabeçalho válido.")
            header_map = {name: _normalize_header(name) for name in reader.fieldnames}
            for raw_row in reader:
                cleaned = _clean_row({header_map[key]: raw_row.get(key, "") for key in reader.fieldnames})
                if cleaned:
                    yield cleaned
        return
    if suffix in {".xlsx", ".xlsm"}:
        try:
            dataframe = pd.read_excel(path, dtype=object, engine="openpyxl")
        except ValueError as exc:
            raise DataValidationError(f"Não foi possível ler a planilha: {exc}") from exc
        columns = [_normalize_header(name) for name in dataframe.columns]
        for _, series in dataframe.iterrows():
            cleaned = _clean_row({column: series[name] for column, name in zip(columns, dataframe.columns)})
            if cleaned:
                yield cleaned
        return
    if suffix == ".xls":
        raise DataValidationError("Planilhas .xls não são suportadas; utilize o formato .xlsx.")
    raise DataValidationError(f"Formato de arquivo não suportado: {path.suffix}.")


def load_launches(path: Path) -> List[LaunchRecord]:
    """Load event launches joined with employee and event data."""

    records: List[LaunchRecord] = []
    for row in _read_rows(path):
        if not REQUIRED_COLUMNS.issubset(row):
            missing = ", ".join(sorted(REQUIRED_COLUMNS - set(row)))
            raise DataValidationError(f"Campos obrigatórios ausentes: {missing}.")
        employee_id = _stringify(row["employee_id"])
        if not employee_id:
            raise DataValidationError("Lançamento sem 'employee_id'.")
        records.append(
            LaunchRecord(
                employee_id=employee_id,
                launch_date=_parse_date(row["launch_date"], field_name="launch_date"),
                event_code=_stringify(row.get("event_code")),
                event_description=_stringify(row.get("event_description")),
                employee_name=_stringify(row.get("name")),
                employee_code=_stringify(row.get("employee_code")),
                company_payroll_number=_stringify(row.get("company_payroll_number")),
                payroll_number=_stringify(row.get("payroll_number")),
                quantity=_parse_float(row.get("quantity"), field_name="quantity"),
                unit_value=_parse_float(row.get("unit_value"), field_name="unit_value"),
                total_value=_parse_float(row["total_value"], field_name="total_value"),
            )
        )
    return records


def read_text_file(path: Path) -> str:
    """Read a legacy text file, accepting UTF-8 or Latin-1 content."""

    data = path.read_bytes()
    for encoding in TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise DataValidationError(f"Codificação não reconhecida: {path}.")
