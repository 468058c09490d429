"""Service for managing the pool of image-based questions."""

from __future__ import annotations

from exam_portal.core.models import Question, is_valid_option, normalize_option


class QuestionBank:
    """Manages the lifecycle and storage of questions."""

    def __init__(self) -> None:
        self._questions: dict[int, Question] = {}
        self._question_counter: int = 0

    def get_questions(self) -> list[Question]:
        """Return all questions ordered by id."""
        return [self._questions[key] for key in sorted(self._questions)]

    def get_question(self, question_id: int) -> Question:
        question = self._questions.get(question_id)
        if question is None:
            raise LookupError(f"Question {question_id} does not exist")
        return question

    def has_question(self, question_id: int) -> bool:
        return question_id in self._questions

    def add_question(self, image_url: str, correct_option: str) -> Question:
        question = Question(
            id=self._next_question_id(),
            correct_option=self._validate_option(correct_option),
            image_url=self._validate_image_url(image_url),
        )
        self._questions[question.id] = question
        return question

    def update_question(self, question_id: int, image_url: str, correct_option: str) -> Question:
        self.get_question(question_id)
        question = Question(
            id=question_id,
            correct_option=self._validate_option(correct_option),
            image_url=self._validate_image_url(image_url),
        )
        self._questions[question_id] = question
        return question

    def delete_question(self, question_id: int) -> None:
        self.get_question(question_id)
        del self._questions[question_id]

    def _next_question_id(self) -> int:
        self._question_counter += 1
        return self._question_counter

    @staticmethod
    def _validate_option(option: str) -> str:
        normalized = normalize_option(option)
        if not is_valid_option(normalized):
            raise ValueError("Correct option must be one of A, B, C or D.")
        return normalized

    @staticmethod
    def _validate_image_url(image_url: str) -> str:
        cleaned = image_url.strip()
        if not cleaned:
            raise ValueError("Question image URL must not be empty.")
        return cleaned
