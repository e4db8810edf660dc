"""Decoding of the legacy fixed-offset time-tracking text file."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from loguru import logger

from .models import Event, ParseResult

RECORD_LENGTH = 29

# name -> (start, end), 0-based and end-exclusive.
COLUMNS = {
    "company": (0, 4),
    "year": (4, 8),
    "month": (8, 10),
    "registration": (10, 16),
    "event_code": (16, 20),
    "value": (20, 29),
}

_LEADING_INT = re.compile(r"[+-]?\d+")


def _slice(line: str, name: str) -> str:
    start, end = COLUMNS[name]
    return line[start:end]


def _parse_int(text: str, name: str) -> Tuple[int, Optional[str]]:
    cleaned = text.strip()
    if not cleaned:
        return 0, f"Campo '{name}' ausente."
    match = _LEADING_INT.match(cleaned)
    if match is None:
        return 0, f"Campo '{name}' não numérico: '{text}'."
    value = int(match.group())
    if match.end() != len(cleaned):
        return value, f"Campo '{name}' com caracteres inválidos: '{text}'."
    return value, None


def parse_line(line: str) -> Event:
    """Decode one trimmed line; short or garbled lines yield placeholder values."""

    problems: List[str] = []
    if len(line) < RECORD_LENGTH:
        problems.append(f"Linha com {len(line)} caracteres; esperado ao menos {RECORD_LENGTH}.")

    numbers = {}
    for name in ("year", "month", "value"):
        value, problem = _parse_int(_slice(line, name), name)
        numbers[name] = value
        if problem:
            problems.append(problem)

    return Event(
        company=_slice(line, "company"),
        year=numbers["year"],
        month=numbers["month"],
        registration=_slice(line, "registration"),
        event_code=_slice(line, "event_code"),
        value=numbers["value"],
        problems=tuple(problems),
    )


def parse_txt(content: str) -> ParseResult:
    """Parse the whole file content, one event per non-blank line."""

    events: List[Event] = []
    blank = 0
    for number, raw_line in enumerate(re.split(r"\r?\n", content), start=1):
        line = raw_line.strip()
        if not line:
            blank += 1
            continue
        event = parse_line(line)
        if event.is_malformed:
            logger.warning(f"Linha {number} malformada: {'; '.join(event.problems)}")
        events.append(event)
    logger.debug(f"{len(events)} eventos lidos, {blank} linhas em branco ignoradas.")
    return ParseResult(events=tuple(events), skipped_blank_lines=blank)


def format_line(event: Event) -> str:
    """Write an event back in the legacy 29-column layout."""

    return (
        f"{event.company:<4.4}"
        f"{event.year:04d}"
        f"{event.month:02d}"
        f"{event.registration:<6.6}"
        f"{event.event_code:<4.4}"
        f"{event.value:09d}"
    )
