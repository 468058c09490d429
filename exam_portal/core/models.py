"""Domain models for the exam portal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from exam_portal.constants.exam_constants import (
    DEFAULT_MARKS_PER_CORRECT,
    DEFAULT_NEGATIVE_MARKS,
    OPTION_LETTERS,
)


class Pending(Enum):
    """Marker for a fact whose fetch has not completed yet."""

    PENDING = "pending"


PENDING = Pending.PENDING


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


class UserClass(str, Enum):
    ELEVENTH = "eleventh"
    TWELFTH = "twelfth"
    DROPPER = "dropper"


class SubmissionStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


def normalize_option(option: str | None) -> str | None:
    """Return the upper-case option letter, or None when the option is blank."""
    if option is None:
        return None
    cleaned = option.strip().upper()
    return cleaned or None


def is_valid_option(option: str | None) -> bool:
    return option is not None and option in OPTION_LETTERS


@dataclass(frozen=True, slots=True)
class Question:
    """Image-based multiple-choice question with a single correct option."""

    id: int
    correct_option: str
    image_url: str


@dataclass(frozen=True, slots=True)
class MarkingScheme:
    """Weights used to convert answers into marks."""

    marks_per_correct: int = DEFAULT_MARKS_PER_CORRECT
    negative_marks: int = DEFAULT_NEGATIVE_MARKS


@dataclass(frozen=True, slots=True)
class Test:
    """A published or draft test; treated as immutable during an attempt."""

    __test__ = False  # not a pytest test class

    id: int
    name: str
    duration_minutes: int
    questions: tuple[Question, ...]
    is_published: bool = False
    marking: MarkingScheme = field(default_factory=MarkingScheme)

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(frozen=True, slots=True)
class Answer:
    """Selected option for a question; ``None`` means unanswered."""

    question_id: int
    selected_option: str | None = None


@dataclass(frozen=True, slots=True)
class TestResult:
    """Scored submission as stored by the portal backend."""

    __test__ = False

    test_id: int
    principal: str
    answers: tuple[Answer, ...]
    marks: int
    correct_count: int
    submitted_at: datetime


@dataclass(slots=True)
class UserProfile:
    """Student profile captured at first sign-in."""

    full_name: str
    user_class: UserClass
    contact_number: str
    has_visited_admin: bool = False
