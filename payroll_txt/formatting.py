"""Value formatting helpers shared by the field renderer and the assembler."""

from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Tuple

from .models import Alignment, DecimalSeparator, FieldSeparator, FillType, Layout

EXTRA_MARKER = "EXTRA"
NIGHT_MARKER = "NOTURNO"

SEPARATOR_CHARS = {
    FieldSeparator.NONE: "",
    FieldSeparator.SPACE: " ",
    FieldSeparator.DASH: "-",
    FieldSeparator.DOT: ".",
    FieldSeparator.UNDERSCORE: "_",
    FieldSeparator.SEMICOLON: ";",
}


def separator_char(separator: FieldSeparator | str) -> str:
    try:
        return SEPARATOR_CHARS[FieldSeparator(separator)]
    except ValueError:
        return ""


def _to_decimal(value: float) -> Decimal:
    # Float noise below 1e-9 is dropped, so 21.36 * 1.5 scales to 3204, not 3203.
    return Decimal(str(round(value, 9)))


def format_decimal(value: float, decimal_separator: DecimalSeparator | str) -> str:
    """Render ``value`` with two decimals using the layout's separator policy."""

    text = str(_to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    separator = DecimalSeparator(decimal_separator)
    if separator is DecimalSeparator.NONE:
        return text.replace(".", "")
    if separator is DecimalSeparator.COMMA:
        return text.replace(".", ",")
    return text


def format_date(value: date, mask: str) -> str:
    """Render a date with one of the layout date masks.

    Unknown masks fall back to ``aaaammdd``.
    """

    year = f"{value.year:04d}"
    month = f"{value.month:02d}"
    day = f"{value.day:02d}"
    short_year = year[-2:]
    formats = {
        "aaaa": year,
        "ddmmaaaa": f"{day}{month}{year}",
        "dd/mm/aaaa": f"{day}/{month}/{year}",
        "dd/mm/aa": f"{day}/{month}/{short_year}",
        "aaaammdd": f"{year}{month}{day}",
        "aaaa-mm-dd": f"{year}-{month}-{day}",
        "ddmmaa": f"{day}{month}{short_year}",
        "aaaamm": f"{year}{month}",
        "mmaaaa": f"{month}{year}",
        "mm": month,
        "dd": day,
    }
    return formats.get(mask, formats["aaaammdd"])


def apply_factors(amount: float, layout: Layout, event_code: str) -> float:
    """Multiply ``amount`` by the layout's overtime and night factors.

    Each factor applies when enabled and the event code carries its marker;
    the extra factor is applied before the night factor.
    """

    result = amount
    code = event_code or ""
    if layout.multiply_extra_factor and EXTRA_MARKER in code:
        result *= layout.extra_factor
    if layout.multiply_night_factor and NIGHT_MARKER in code:
        result *= layout.night_factor
    return result


def scale_amount(amount: float, decimal_places: int) -> str:
    """Render an amount as an implied-decimal digit string."""

    if decimal_places > 0:
        scaled = _to_decimal(amount).scaleb(decimal_places).to_integral_value(rounding=ROUND_DOWN)
        return str(int(scaled))
    return str(math.floor(amount))


def split_amount(total: float) -> Tuple[str, str]:
    """Split a total into its integer part and its two-digit cents part."""

    rounded = _to_decimal(total).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    integer = math.floor(rounded)
    cents = int((rounded - integer) * 100)
    return str(integer), f"{cents:02d}"


def apply_zero_mask(value: str, pattern: str | None) -> str:
    """Left-pad ``value`` with zeros up to the mask length when the mask has a zero."""

    if not pattern or "0" not in pattern or not value:
        return value
    return value.rjust(len(pattern), "0")


def fit_width(
    raw: str,
    size: int,
    fill_type: FillType,
    alignment: Alignment = Alignment.RIGHT,
    *,
    honor_alignment: bool = False,
) -> Tuple[str, bool]:
    """Truncate or pad ``raw`` to exactly ``size`` characters.

    Returns the fitted text and whether content was cut. Without
    ``honor_alignment`` the fill always goes on the left.
    """

    truncated = len(raw) > size
    text = raw[:size]
    fill = FillType(fill_type).char
    if honor_alignment and Alignment(alignment) is Alignment.LEFT:
        return text.ljust(size, fill), truncated
    return text.rjust(size, fill), truncated
