"""Extra-hours versus absence balance reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from loguru import logger

from .models import Event, ReconciliationResult

MINUTES_PER_HOUR = 60


class Bucket(str, Enum):
    OVERTIME_100 = "extras_100"
    OVERTIME_50 = "extras_50"
    UNJUSTIFIED_ABSENCE = "faltas_injustificadas"
    JUSTIFIED_ABSENCE = "faltas_justificadas"
    MEDICAL_CERTIFICATE = "atestados"


@dataclass(frozen=True)
class BucketTable:
    """Maps payroll event codes to balance buckets."""

    name: str
    codes: Mapping[Bucket, FrozenSet[str]]

    def bucket_for(self, event_code: str) -> Optional[Bucket]:
        for bucket, codes in self.codes.items():
            if event_code in codes:
                return bucket
        return None

    @classmethod
    def from_mapping(cls, name: str, mapping: Mapping[str, Iterable[str]]) -> "BucketTable":
        codes = {Bucket(key): frozenset(str(code) for code in values) for key, values in mapping.items()}
        return cls(name=name, codes=codes)


DEFAULT_TABLE = BucketTable.from_mapping(
    "padrao",
    {
        "extras_100": ["2805"],
        "extras_50": ["2806"],
        "faltas_injustificadas": ["2807"],
        "faltas_justificadas": ["2808"],
        "atestados": ["2809"],
    },
)

OVERTIME_29XX_TABLE = BucketTable.from_mapping(
    "extras_29xx",
    {
        "extras_100": ["2901"],
        "extras_50": ["2902"],
        "faltas_injustificadas": ["2807"],
        "faltas_justificadas": ["2808"],
        "atestados": ["2809"],
    },
)

BUCKET_TABLES: Dict[str, BucketTable] = {
    DEFAULT_TABLE.name: DEFAULT_TABLE,
    OVERTIME_29XX_TABLE.name: OVERTIME_29XX_TABLE,
}


@dataclass
class BucketTotals:
    """Minute totals of one registration, per bucket."""

    registration: str
    minutes: Dict[Bucket, int] = field(default_factory=lambda: {bucket: 0 for bucket in Bucket})
    event_count: int = 0

    def hours(self, bucket: Bucket) -> float:
        return self.minutes[bucket] / MINUTES_PER_HOUR


@dataclass(frozen=True)
class Offset:
    overtime_100: float
    overtime_50: float
    absence: float
    used_from_overtime_100: float
    used_from_overtime_50: float


def group_by_registration(events: Iterable[Event]) -> Dict[str, List[Event]]:
    groups: Dict[str, List[Event]] = {}
    for event in events:
        groups.setdefault(event.registration, []).append(event)
    return groups


def sum_buckets(registration: str, events: Sequence[Event], table: BucketTable = DEFAULT_TABLE) -> BucketTotals:
    totals = BucketTotals(registration=registration)
    for event in events:
        totals.event_count += 1
        bucket = table.bucket_for(event.event_code)
        if bucket is not None:
            totals.minutes[bucket] += event.value
    return totals


def offset_absences(overtime_100: float, overtime_50: float, absence: float) -> Offset:
    """Pay unjustified absence hours off the 100% pool first, then the 50% pool."""

    used_100 = min(absence, overtime_100) if absence > 0 else 0.0
    absence -= used_100
    overtime_100 -= used_100

    used_50 = min(absence, overtime_50) if absence > 0 else 0.0
    absence -= used_50
    overtime_50 -= used_50

    return Offset(
        overtime_100=overtime_100,
        overtime_50=overtime_50,
        absence=absence,
        used_from_overtime_100=used_100,
        used_from_overtime_50=used_50,
    )


def reconcile(events: Iterable[Event], table: BucketTable = DEFAULT_TABLE) -> List[ReconciliationResult]:
    """Compute one balance per registration, in order of first appearance."""

    results: List[ReconciliationResult] = []
    for registration, group in group_by_registration(events).items():
        totals = sum_buckets(registration, group, table)
        overtime_100 = totals.hours(Bucket.OVERTIME_100)
        overtime_50 = totals.hours(Bucket.OVERTIME_50)
        absence = totals.hours(Bucket.UNJUSTIFIED_ABSENCE)
        offset = offset_absences(overtime_100, overtime_50, absence)
        results.append(
            ReconciliationResult(
                registration=registration,
                overtime_remaining=offset.overtime_100 + offset.overtime_50,
                absence_remaining=offset.absence,
                justified_absence_hours=totals.hours(Bucket.JUSTIFIED_ABSENCE),
                medical_certificate_hours=totals.hours(Bucket.MEDICAL_CERTIFICATE),
                overtime_100_hours=overtime_100,
                overtime_50_hours=overtime_50,
                unjustified_absence_hours=absence,
                used_from_overtime_100=offset.used_from_overtime_100,
                used_from_overtime_50=offset.used_from_overtime_50,
                event_count=totals.event_count,
            )
        )
    logger.debug(f"Saldos calculados para {len(results)} matrículas com a tabela '{table.name}'.")
    return results
