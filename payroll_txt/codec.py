"""Fixed-width rendering of a single layout field."""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Tuple

from .formatting import apply_factors, fit_width, format_date, scale_amount
from .models import FieldDescriptor, FieldWarning, Layout, LaunchRecord, RenderedField


class SourceKind(str, Enum):
    """Closed set of value sources a layout field can draw from."""

    COMPANY_PAYROLL_NUMBER = "company_payroll_number"
    PAYROLL_NUMBER = "payroll_number"
    EMPLOYEE_NAME = "employee_name"
    EMPLOYEE_CODE = "employee_code"
    EVENT_CODE = "event_code"
    EVENT_NAME = "event_name"
    DATE = "date"
    AMOUNT = "amount"
    DURATION = "duration"
    STATIC = "static"


EXACT_SOURCES = {
    "numero_folha_empresa": SourceKind.COMPANY_PAYROLL_NUMBER,
    "company_payroll_number": SourceKind.COMPANY_PAYROLL_NUMBER,
    "numero_folha": SourceKind.PAYROLL_NUMBER,
    "numero_matricula": SourceKind.PAYROLL_NUMBER,
    "payroll_number": SourceKind.PAYROLL_NUMBER,
    "nome_funcionario": SourceKind.EMPLOYEE_NAME,
    "codigo_funcionario": SourceKind.EMPLOYEE_CODE,
    "employee_code": SourceKind.EMPLOYEE_CODE,
    "codigo_evento": SourceKind.EVENT_CODE,
    "nome_evento": SourceKind.EVENT_NAME,
}

# Checked in order; the first token found in the source name wins.
TOKEN_SOURCES: Tuple[Tuple[Tuple[str, ...], SourceKind], ...] = (
    (("data", "date", "dia", "mes", "ano"), SourceKind.DATE),
    (("valor", "value"), SourceKind.AMOUNT),
    (("hora", "hour"), SourceKind.DURATION),
)


def classify_source(source: Optional[str]) -> SourceKind:
    name = source or ""
    if name in EXACT_SOURCES:
        return EXACT_SOURCES[name]
    for tokens, kind in TOKEN_SOURCES:
        if any(token in name for token in tokens):
            return kind
    return SourceKind.STATIC


def _static_value(descriptor: FieldDescriptor, value: Optional[object]) -> str:
    if value is not None and str(value) != "":
        return str(value)
    return descriptor.default_value or ""


def resolve_value(
    descriptor: FieldDescriptor,
    record: LaunchRecord,
    layout: Layout,
    value: Optional[object] = None,
) -> Tuple[str, List[FieldWarning]]:
    """Compute the raw, unpadded text of ``descriptor`` for ``record``."""

    warnings: List[FieldWarning] = []
    kind = classify_source(descriptor.source)

    if kind is SourceKind.COMPANY_PAYROLL_NUMBER:
        return record.company_payroll_number or "", warnings
    if kind is SourceKind.PAYROLL_NUMBER:
        return record.payroll_number or "", warnings
    if kind is SourceKind.EMPLOYEE_NAME:
        return record.employee_name or "", warnings
    if kind is SourceKind.EMPLOYEE_CODE:
        return record.employee_code or "", warnings
    if kind is SourceKind.EVENT_CODE:
        return descriptor.default_value or record.event_code or "", warnings
    if kind is SourceKind.EVENT_NAME:
        return record.event_description or "", warnings
    if kind is SourceKind.DATE:
        if record.launch_date is None:
            warnings.append(FieldWarning(descriptor.name, "Lançamento sem data."))
            return "", warnings
        return format_date(record.launch_date, descriptor.date_format or "aaaammdd"), warnings
    if kind is SourceKind.AMOUNT:
        adjusted = apply_factors(record.total_value, layout, record.event_code)
        if adjusted < 0:
            warnings.append(FieldWarning(descriptor.name, f"Valor negativo: {adjusted}."))
        return scale_amount(adjusted, descriptor.decimal_places), warnings
    if kind is SourceKind.DURATION:
        return str(math.trunc(record.quantity)), warnings
    return _static_value(descriptor, value), warnings


def render_field(
    descriptor: FieldDescriptor,
    record: LaunchRecord,
    layout: Layout,
    value: Optional[object] = None,
) -> RenderedField:
    """Render ``descriptor`` for ``record`` into exactly ``descriptor.size`` characters.

    Content longer than the field is cut and reported as a warning; shorter
    content is padded with the field's fill character.
    """

    raw, warnings = resolve_value(descriptor, record, layout, value)
    text, truncated = fit_width(
        raw,
        descriptor.size,
        descriptor.fill_type,
        descriptor.alignment,
        honor_alignment=layout.honor_alignment,
    )
    if truncated:
        warnings.append(
            FieldWarning(
                descriptor.name,
                f"Conteúdo '{raw}' truncado para {descriptor.size} caracteres.",
            )
        )
    return RenderedField(text=text, warnings=tuple(warnings))
