"""Service for recording submitted results and reporting on them."""

from __future__ import annotations

from dataclasses import dataclass

from exam_portal.core.models import TestResult


@dataclass(slots=True)
class ResultRow:
    """Reporting snapshot returned to admin consumers."""

    test_id: int
    principal: str
    marks: int
    max_marks: int
    correct_count: int
    total_questions: int
    marks_percentage: float


class ResultLedger:
    """Append-only store of scored submissions."""

    def __init__(self) -> None:
        self._results: list[TestResult] = []

    def record(self, result: TestResult) -> None:
        self._results.append(result)

    def get_all(self) -> list[TestResult]:
        """Return every result, newest first."""
        return list(reversed(self._results))

    def get_for_principal(self, principal: str) -> list[TestResult]:
        return [result for result in self.get_all() if result.principal == principal]

    def get_latest(self, principal: str, test_id: int) -> TestResult | None:
        return next(
            (r for r in self.get_for_principal(principal) if r.test_id == test_id),
            None,
        )
