from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TypedDict


@dataclass(frozen=True)
class Combination:
    numbers: tuple[int, ...]

    def __iter__(self):
        return iter(self.numbers)

    def __len__(self) -> int:
        return len(self.numbers)


@dataclass(frozen=True)
class CombinationMetadata:
    sum: int
    odd_count: int
    even_count: int
    low_count: int
    high_count: int
    range_01_05: int
    range_06_10: int
    range_11_15: int
    range_16_20: int
    range_21_25: int
    has_sequence: bool
    max_sequence_length: int


class GameRecord(TypedDict):
    numbers: list[int]
    numbers_str: str
    sum_numbers: int
    odd_count: int
    even_count: int
    low_count: int
    high_count: int
    range_01_05: int
    range_06_10: int
    range_11_15: int
    range_16_20: int
    range_21_25: int
    has_sequence: bool
    max_sequence_length: int


class ImportState(str, Enum):
    IDLE = "idle"
    VERIFY_DESTINATION = "verify_destination"
    CLEAR_DESTINATION = "clear_destination"
    STREAMING = "streaming"
    FINALIZE = "finalize"
    REPORTED = "reported"
    ABORTED = "aborted"


@dataclass(frozen=True)
class BatchFailure:
    batch_number: int
    size: int
    reason: str


@dataclass
class ImportSummary:
    lines_read: int = 0
    records_parsed: int = 0
    lines_rejected: int = 0
    records_inserted: int = 0
    batches: int = 0
    batches_failed: int = 0
    failures: list[BatchFailure] = field(default_factory=list)
    elapsed_s: float = 0.0
    expected_total: int = 0
    state: ImportState = ImportState.IDLE
    final_count: Optional[int] = None

    @property
    def rate_per_s(self) -> float:
        if self.elapsed_s <= 0:
            return 0.0
        return self.records_parsed / self.elapsed_s

    @property
    def progress_pct(self) -> float:
        if not self.expected_total:
            return 0.0
        return 100.0 * self.records_parsed / self.expected_total

    @property
    def is_complete(self) -> bool:
        return self.batches_failed == 0 and self.records_inserted == self.expected_total

    def as_dict(self) -> dict[str, Any]:
        return {
            "lines_read": self.lines_read,
            "records_parsed": self.records_parsed,
            "lines_rejected": self.lines_rejected,
            "records_inserted": self.records_inserted,
            "batches": self.batches,
            "batches_failed": self.batches_failed,
            "failures": [vars(f) for f in self.failures],
            "elapsed_s": round(self.elapsed_s, 2),
            "rate_per_s": round(self.rate_per_s, 1),
            "expected_total": self.expected_total,
            "final_count": self.final_count,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class DrawResult:
    contest_number: int
    draw_date: str
    numbers: list[int]
    draw_order: list[int]
    total_winners: int
    total_revenue: float
    accumulated: bool
    next_contest: Optional[int]
    next_contest_date: Optional[str]
    estimated_next_prize: float

    def as_row(self) -> dict[str, Any]:
        return {
            "contest_number": self.contest_number,
            "draw_date": self.draw_date,
            "numbers": self.numbers,
        }


@dataclass
class SyncSummary:
    success: bool
    inserted: int = 0
    errors: list[str] = field(default_factory=list)
    message: str = ""
    data: Optional[DrawResult] = None
