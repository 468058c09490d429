"""Business logic for the portal backend shared between the API and local clients."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from threading import Lock

from exam_portal.core.models import (
    Answer,
    MarkingScheme,
    Question,
    Test,
    TestResult,
    UserProfile,
    UserRole,
    normalize_option,
)
from exam_portal.core.scoring import marks_percentage, max_marks, score_answers
from exam_portal.core.services.access_gates import TestAccess, evaluate_test_access
from exam_portal.core.services.question_bank import QuestionBank
from exam_portal.core.services.result_ledger import ResultLedger, ResultRow
from exam_portal.core.services.test_catalog import TestCatalog
from exam_portal.core.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class PortalManager:
    """Facade for portal services: QuestionBank, TestCatalog, ResultLedger and UserDirectory.

    Every operation takes the calling principal. Admin-only operations raise
    ``PermissionError`` for other callers; tests a caller may not see are
    reported exactly like tests that do not exist.
    """

    def __init__(self, admin_principals: set[str] | None = None) -> None:
        self._lock = Lock()

        # Services
        self._questions = QuestionBank()
        self._catalog = TestCatalog(self._questions)
        self._ledger = ResultLedger()
        self._users = UserDirectory(admin_principals)

    # --- Profiles & Roles ---

    def get_caller_profile(self, caller: str) -> UserProfile | None:
        with self._lock:
            return self._users.get_profile(caller)

    def save_caller_profile(self, caller: str, profile: UserProfile) -> UserProfile:
        with self._lock:
            saved = self._users.save_profile(caller, profile)
            logger.info("Saved profile for %s", caller)
            return saved

    def get_caller_role(self, caller: str) -> UserRole:
        with self._lock:
            return self._users.get_role(caller)

    def assign_role(self, caller: str, principal: str, role: UserRole) -> None:
        with self._lock:
            self._require_admin(caller)
            self._users.assign_role(principal, role)
            logger.info("%s assigned role %s to %s", caller, role.value, principal)

    def get_all_users(self, caller: str) -> list[tuple[str, UserProfile]]:
        with self._lock:
            self._require_admin(caller)
            return self._users.get_users()

    # --- Admin Visit ---

    def has_admin_been_visited(self, caller: str) -> bool:
        with self._lock:
            return self._users.has_visited_admin(caller)

    def mark_admin_visited(self, caller: str) -> None:
        with self._lock:
            self._require_admin(caller)
            if self._users.mark_admin_visited(caller):
                logger.info("Admin panel visited by %s", caller)

    # --- Questions ---

    def add_question(self, caller: str, image_url: str, correct_option: str) -> Question:
        with self._lock:
            self._require_admin(caller)
            return self._questions.add_question(image_url, correct_option)

    def update_question(
        self, caller: str, question_id: int, image_url: str, correct_option: str
    ) -> Question:
        with self._lock:
            self._require_admin(caller)
            return self._questions.update_question(question_id, image_url, correct_option)

    def delete_question(self, caller: str, question_id: int) -> None:
        with self._lock:
            self._require_admin(caller)
            if self._catalog.is_question_referenced(question_id):
                raise ValueError("Question is used by a test and cannot be deleted.")
            self._questions.delete_question(question_id)

    def get_all_questions(self, caller: str) -> list[Question]:
        with self._lock:
            self._require_admin(caller)
            return self._questions.get_questions()

    # --- Tests ---

    def create_test(
        self,
        caller: str,
        name: str,
        duration_minutes: int,
        question_ids: list[int],
        marking: MarkingScheme,
    ) -> Test:
        with self._lock:
            self._require_admin(caller)
            test = self._catalog.create_test(name, duration_minutes, question_ids, marking)
            logger.info("Created test %d (%s)", test.id, test.name)
            return test

    def update_test(
        self,
        caller: str,
        test_id: int,
        name: str,
        duration_minutes: int,
        question_ids: list[int],
        marking: MarkingScheme,
    ) -> Test:
        with self._lock:
            self._require_admin(caller)
            return self._catalog.update_test(test_id, name, duration_minutes, question_ids, marking)

    def toggle_publish_test(self, caller: str, test_id: int) -> Test:
        with self._lock:
            self._require_admin(caller)
            test = self._catalog.toggle_publish(test_id)
            logger.info("Test %d published=%s", test.id, test.is_published)
            return test

    def set_test_published(self, caller: str, test_id: int, published: bool) -> Test:
        with self._lock:
            self._require_admin(caller)
            return self._catalog.set_published(test_id, published)

    def get_all_tests(self, caller: str) -> list[Test]:
        with self._lock:
            self._require_admin(caller)
            return self._catalog.get_tests()

    def get_published_tests(self) -> list[Test]:
        with self._lock:
            return self._catalog.get_published_tests()

    def get_test(self, caller: str, test_id: int) -> Test | None:
        """Return the test when the caller may reach it, otherwise None."""
        with self._lock:
            return self._reachable_test(caller, test_id)

    # --- Results ---

    def submit_test_result(self, caller: str, test_id: int, answers: list[Answer]) -> TestResult:
        with self._lock:
            test = self._reachable_test(caller, test_id)
            if test is None:
                raise LookupError(f"Test {test_id} not found")
            known_ids = {question.id for question in test.questions}
            kept = tuple(
                Answer(answer.question_id, normalize_option(answer.selected_option))
                for answer in answers
                if answer.question_id in known_ids and normalize_option(answer.selected_option)
            )
            outcome = score_answers(test.questions, test.marking, kept)
            result = TestResult(
                test_id=test.id,
                principal=caller,
                answers=kept,
                marks=outcome.marks,
                correct_count=outcome.correct_count,
                submitted_at=datetime.now(timezone.utc),
            )
            self._ledger.record(result)
            logger.info(
                "Recorded result for %s on test %d: %d marks, %d/%d correct",
                caller,
                test.id,
                result.marks,
                result.correct_count,
                test.question_count,
            )
            return result

    def get_my_results(self, caller: str) -> list[TestResult]:
        with self._lock:
            return self._ledger.get_for_principal(caller)

    def get_latest_result(self, caller: str, test_id: int) -> TestResult | None:
        with self._lock:
            return self._ledger.get_latest(caller, test_id)

    def get_all_results(self, caller: str) -> list[TestResult]:
        with self._lock:
            self._require_admin(caller)
            return self._ledger.get_all()

    def get_result_rows(self, caller: str) -> list[ResultRow]:
        """Admin report: every result with its marks against the test's maximum."""
        with self._lock:
            self._require_admin(caller)
            rows: list[ResultRow] = []
            for result in self._ledger.get_all():
                test = self._catalog.find_test(result.test_id)
                total = test.question_count if test else 0
                maximum = max_marks(total, test.marking.marks_per_correct) if test else 0
                rows.append(
                    ResultRow(
                        test_id=result.test_id,
                        principal=result.principal,
                        marks=result.marks,
                        max_marks=maximum,
                        correct_count=result.correct_count,
                        total_questions=total,
                        marks_percentage=marks_percentage(result.marks, maximum),
                    )
                )
            return rows

    # --- Helpers ---

    def _require_admin(self, caller: str) -> None:
        if self._users.get_role(caller) is not UserRole.ADMIN:
            raise PermissionError("Admin privileges required.")

    def _reachable_test(self, caller: str, test_id: int) -> Test | None:
        role = self._users.get_role(caller)
        test = self._catalog.find_test(test_id)
        if evaluate_test_access(role, test) is TestAccess.GRANTED:
            return test
        return None
