"""Marking of submitted answers against a test's answer key."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging

from exam_portal.core.models import Answer, MarkingScheme, Question, normalize_option

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScoreOutcome:
    """Weighted marks plus the plain count of correct answers."""

    marks: int
    correct_count: int
    total_questions: int
    marks_per_correct: int

    @property
    def max_marks(self) -> int:
        return max_marks(self.total_questions, self.marks_per_correct)

    @property
    def marks_percentage(self) -> float:
        return marks_percentage(self.marks, self.max_marks)

    @property
    def correct_percentage(self) -> float:
        if self.total_questions <= 0:
            return 0.0
        return (self.correct_count / self.total_questions) * 100


def max_marks(total_questions: int, marks_per_correct: int) -> int:
    return total_questions * marks_per_correct


def marks_percentage(marks: int, maximum: int) -> float:
    """Percentage of the maximum, with negative totals clamped to zero."""
    if maximum <= 0:
        return 0.0
    return (max(0, marks) / maximum) * 100


def score_answers(
    questions: Sequence[Question],
    marking: MarkingScheme,
    answers: Iterable[Answer],
) -> ScoreOutcome:
    """Mark ``answers`` question by question in the test's order.

    A correct option earns ``marks_per_correct``; a wrong one costs
    ``negative_marks``; an unanswered question (missing, ``None`` or blank)
    earns nothing. Answers for question ids outside the test are ignored, and
    when a question is answered more than once the last answer counts.
    """
    known_ids = {question.id for question in questions}
    selected: dict[int, str | None] = {}
    for answer in answers:
        if answer.question_id not in known_ids:
            logger.warning("Ignoring answer for unknown question %s", answer.question_id)
            continue
        selected[answer.question_id] = normalize_option(answer.selected_option)

    marks = 0
    correct_count = 0
    for question in questions:
        option = selected.get(question.id)
        if option is None:
            continue
        if option == normalize_option(question.correct_option):
            marks += marking.marks_per_correct
            correct_count += 1
        else:
            marks -= marking.negative_marks

    return ScoreOutcome(
        marks=marks,
        correct_count=correct_count,
        total_questions=len(questions),
        marks_per_correct=marking.marks_per_correct,
    )
