"""Data models shared by the export codec and the balance engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class LayoutValidationError(ValueError):
    """Raised when a layout definition breaks its invariants."""


class FillType(str, Enum):
    """Pad character used to reach a field's fixed width."""

    SPACES = "spaces"
    ZEROS = "zeros"
    DASH = "dash"

    @property
    def char(self) -> str:
        return {"spaces": " ", "zeros": "0", "dash": "-"}[self.value]


class Alignment(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class DateFormat(str, Enum):
    """Date masks offered by the layout editor."""

    YEAR = "aaaa"
    DDMMYYYY = "ddmmaaaa"
    DD_MM_YYYY = "dd/mm/aaaa"
    DD_MM_YY = "dd/mm/aa"
    YYYYMMDD = "aaaammdd"
    YYYY_MM_DD = "aaaa-mm-dd"
    DDMMYY = "ddmmaa"
    YYYYMM = "aaaamm"
    MMYYYY = "mmaaaa"
    MONTH = "mm"
    DAY = "dd"


class ReportType(str, Enum):
    ONE_EVENT_PER_LINE = "one_event_per_line"
    ONE_EMPLOYEE_PER_LINE = "one_employee_per_line"


class FieldSeparator(str, Enum):
    NONE = "none"
    SPACE = "space"
    DASH = "dash"
    DOT = "dot"
    UNDERSCORE = "underscore"
    SEMICOLON = "semicolon"


class DecimalSeparator(str, Enum):
    DOT = "dot"
    COMMA = "comma"
    NONE = "none"


@dataclass(frozen=True)
class FieldDescriptor:
    """One output column of an export layout."""

    name: str
    source: str = ""
    size: int = 1
    order_position: int = 1
    start_position: int = 1
    end_position: int = 1
    fill_type: FillType = FillType.SPACES
    alignment: Alignment = Alignment.RIGHT
    date_format: str = DateFormat.YYYYMMDD.value
    decimal_places: int = 0
    default_value: Optional[str] = None
    format_pattern: Optional[str] = None
    field_type: str = "text"
    is_aggregation_field: bool = False

    def __post_init__(self) -> None:
        if self.size < 1:
            raise LayoutValidationError(f"Campo '{self.name}' com tamanho inválido: {self.size}.")
        if self.decimal_places < 0:
            raise LayoutValidationError(
                f"Campo '{self.name}' com casas decimais inválidas: {self.decimal_places}."
            )


@dataclass(frozen=True)
class Layout:
    """A named export format: ordered fixed-width fields plus line policy."""

    name: str
    fields: Tuple[FieldDescriptor, ...] = ()
    description: Optional[str] = None
    field_separator: FieldSeparator = FieldSeparator.NONE
    decimal_separator: DecimalSeparator = DecimalSeparator.DOT
    report_type: ReportType = ReportType.ONE_EVENT_PER_LINE
    multiply_extra_factor: bool = False
    extra_factor: float = 1.5
    multiply_night_factor: bool = False
    night_factor: float = 1.2
    honor_alignment: bool = False
    header: Optional[str] = None
    footer: Optional[str] = None

    def ordered_fields(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(sorted(self.fields, key=lambda item: item.order_position))

    @property
    def line_width(self) -> int:
        return sum(item.size for item in self.fields)


@dataclass(frozen=True)
class LaunchRecord:
    """An event launch joined with its employee and event data."""

    employee_id: str
    launch_date: Optional[date] = None
    event_code: str = ""
    event_description: str = ""
    employee_name: str = ""
    employee_code: str = ""
    company_payroll_number: str = ""
    payroll_number: str = ""
    quantity: float = 0.0
    unit_value: float = 0.0
    total_value: float = 0.0


@dataclass(frozen=True)
class FieldWarning:
    """Non-fatal diagnostic produced while rendering a field."""

    field_name: str
    message: str
    line: Optional[int] = None


@dataclass(frozen=True)
class RenderedField:
    text: str
    warnings: Tuple[FieldWarning, ...] = ()


@dataclass(frozen=True)
class ExportResult:
    """Rendered export document plus the diagnostics collected on the way."""

    layout_name: str
    lines: Tuple[str, ...] = ()
    warnings: Tuple[FieldWarning, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class Event:
    """A time-tracking record decoded from one legacy fixed-offset line."""

    company: str
    year: int
    month: int
    registration: str
    event_code: str
    value: int
    problems: Tuple[str, ...] = ()

    @property
    def is_malformed(self) -> bool:
        return bool(self.problems)


@dataclass(frozen=True)
class ParseResult:
    events: Tuple[Event, ...] = ()
    skipped_blank_lines: int = 0

    @property
    def malformed(self) -> Tuple[Event, ...]:
        return tuple(event for event in self.events if event.is_malformed)


@dataclass(frozen=True)
class ReconciliationResult:
    """Balances of one employee registration after offsetting."""

    registration: str
    overtime_remaining: float
    absence_remaining: float
    justified_absence_hours: float = 0.0
    medical_certificate_hours: float = 0.0
    overtime_100_hours: float = 0.0
    overtime_50_hours: float = 0.0
    unjustified_absence_hours: float = 0.0
    used_from_overtime_100: float = 0.0
    used_from_overtime_50: float = 0.0
    event_count: int = field(default=0, compare=False)

    @property
    def details(self) -> str:
        return (
            f"Faltas Just: {_hours_text(self.justified_absence_hours)}h"
            f" | Atestados: {_hours_text(self.medical_certificate_hours)}h"
        )


def _hours_text(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
