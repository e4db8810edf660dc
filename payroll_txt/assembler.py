"""Assembly of export documents from a layout and a stream of launches."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .codec import render_field, resolve_value
from .formatting import (
    apply_factors,
    apply_zero_mask,
    fit_width,
    format_decimal,
    separator_char,
    split_amount,
)
from .models import (
    ExportResult,
    FieldDescriptor,
    FieldWarning,
    Layout,
    LaunchRecord,
    ReportType,
)


class EmptyResultSet(RuntimeError):
    """Raised when no launch falls inside the requested period."""


def filter_period(
    records: Iterable[LaunchRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[LaunchRecord]:
    if start is None and end is None:
        return list(records)
    selected = []
    for record in records:
        if record.launch_date is None:
            continue
        if start is not None and record.launch_date < start:
            continue
        if end is not None and record.launch_date > end:
            continue
        selected.append(record)
    return selected


def order_launches(records: Sequence[LaunchRecord]) -> List[LaunchRecord]:
    """Sort launches by employee and then chronologically."""

    return sorted(records, key=lambda item: (item.employee_id, item.launch_date or date.min))


def export_file_name(layout: Layout, start: Optional[date], end: Optional[date]) -> str:
    name = layout.name or "exportacao"
    start_text = start.isoformat() if start else ""
    end_text = end.isoformat() if end else ""
    return f"{name}_{start_text}_{end_text}.txt"


def _with_line(warnings: Iterable[FieldWarning], line: int) -> List[FieldWarning]:
    return [replace(warning, line=line) for warning in warnings]


def _render_event_line(
    layout: Layout,
    fields: Sequence[FieldDescriptor],
    record: LaunchRecord,
) -> Tuple[str, List[FieldWarning]]:
    parts: List[str] = []
    warnings: List[FieldWarning] = []
    for descriptor in fields:
        rendered = render_field(descriptor, record, layout)
        parts.append(rendered.text)
        warnings.extend(rendered.warnings)
    return separator_char(layout.field_separator).join(parts), warnings


def _group_key(
    layout: Layout,
    fields: Sequence[FieldDescriptor],
    record: LaunchRecord,
) -> Tuple[str, ...]:
    key = [record.employee_id]
    for descriptor in fields:
        if descriptor.is_aggregation_field:
            key.append(resolve_value(descriptor, record, layout)[0])
    return tuple(key)


def group_launches(
    layout: Layout,
    records: Sequence[LaunchRecord],
) -> List[List[LaunchRecord]]:
    """Group launches by employee (and aggregation fields), keeping first-seen order."""

    fields = layout.ordered_fields()
    groups: Dict[Tuple[str, ...], List[LaunchRecord]] = {}
    for record in records:
        groups.setdefault(_group_key(layout, fields, record), []).append(record)
    return list(groups.values())


def _is_value_field(descriptor: FieldDescriptor) -> bool:
    return "Valor" in descriptor.name


def _group_value(layout: Layout, descriptor: FieldDescriptor, records: Sequence[LaunchRecord]) -> str:
    total = sum(apply_factors(item.total_value, layout, item.event_code) for item in records)
    lowered = descriptor.name.casefold()
    if "inteiro" in lowered:
        return split_amount(total)[0]
    if "decimal" in lowered:
        return split_amount(total)[1]
    return format_decimal(total, layout.decimal_separator)


def _render_employee_line(
    layout: Layout,
    fields: Sequence[FieldDescriptor],
    records: Sequence[LaunchRecord],
) -> Tuple[str, List[FieldWarning]]:
    first = records[0]
    parts: List[str] = []
    warnings: List[FieldWarning] = []
    for descriptor in fields:
        if _is_value_field(descriptor):
            raw = _group_value(layout, descriptor, records)
        else:
            raw, field_warnings = resolve_value(descriptor, first, layout)
            warnings.extend(field_warnings)
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
        # Secondary zero-mask pass; zeros beyond the field width are dropped from the left.
        text = apply_zero_mask(text, descriptor.format_pattern)[-descriptor.size:]
        parts.append(text)
    return separator_char(layout.field_separator).join(parts), warnings


def build_export(
    layout: Layout,
    records: Iterable[LaunchRecord],
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
    sort: bool = True,
) -> ExportResult:
    """Render ``records`` with ``layout`` into fixed-width lines.

    Launches outside ``start``/``end`` (inclusive) are dropped; when nothing is
    left, :class:`EmptyResultSet` is raised. With ``sort`` the launches are
    ordered by employee and date, otherwise the given order is kept.
    """

    selected = filter_period(records, start, end)
    logger.debug(f"Layout '{layout.name}': {len(selected)} lançamentos no período.")
    if not selected:
        raise EmptyResultSet("Nenhum lançamento encontrado no período selecionado.")
    if sort:
        selected = order_launches(selected)

    fields = layout.ordered_fields()
    lines: List[str] = []
    warnings: List[FieldWarning] = []
    if ReportType(layout.report_type) is ReportType.ONE_EVENT_PER_LINE:
        for record in selected:
            line, line_warnings = _render_event_line(layout, fields, record)
            lines.append(line)
            warnings.extend(_with_line(line_warnings, len(lines)))
    else:
        for group in group_launches(layout, selected):
            line, line_warnings = _render_employee_line(layout, fields, group)
            lines.append(line)
            warnings.extend(_with_line(line_warnings, len(lines)))

    for warning in warnings:
        logger.warning(f"Linha {warning.line}, campo '{warning.field_name}': {warning.message}")
    return ExportResult(layout_name=layout.name, lines=tuple(lines), warnings=tuple(warnings))
