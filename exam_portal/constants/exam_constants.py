"""Exam-related constants shared across core, server and UI layers."""

OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
CLOCK_TICK_SECONDS: float = 1.0
TIME_WARNING_PERCENTAGE: float = 25.0

DEFAULT_MARKS_PER_CORRECT: int = 1
DEFAULT_NEGATIVE_MARKS: int = 0

PROFILE_NAME_MIN_LENGTH: int = 3
CONTACT_NUMBER_DIGITS: int = 10
