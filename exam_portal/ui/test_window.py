"""Qt main window for taking one test."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QDialog,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from exam_portal.constants.ui_constants import (
    ATTEMPTS_TEMPLATE,
    LOAD_FAILED_MESSAGE,
    LOADING_MESSAGE,
    NO_PUBLISHED_TEST_MESSAGE,
    NOT_FOUND_MESSAGE,
    PROFILE_BUTTON,
    PROFILE_SAVE_FAILED_TITLE,
    PROFILE_SETUP_MESSAGE,
    RESULT_TEMPLATE,
    RETRY_BUTTON,
    SIGNED_OUT_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    TIME_EXPIRED_MESSAGE,
    WINDOW_TITLE,
)
from exam_portal.core.backend import BackendError, ExamBackend
from exam_portal.core.models import UserProfile
from exam_portal.core.services.access_gates import (
    AccessGate,
    ProfileGateState,
    Screen,
    fetch_access_facts,
)
from exam_portal.core.services.test_session import (
    OpenStatus,
    SubmissionOutcome,
    TestSession,
    open_test_session,
)
from exam_portal.ui.components.session_panel import SessionPanel
from exam_portal.ui.dialog_helpers import show_error, show_info
from exam_portal.ui.profile_dialog import ProfileDialog

logger = logging.getLogger(__name__)


class TestWindow(QMainWindow):
    """Window that gates, runs and reports a single test attempt.

    Without an explicit ``test_id`` the first published test is opened.
    """

    __test__ = False

    def __init__(self, backend: ExamBackend, test_id: int | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(960, 720)

        self.backend = backend
        self.test_id = test_id
        self.gate = AccessGate(backend)
        self.session: TestSession | None = None
        self.session_panel: SessionPanel | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._draft_profile: UserProfile | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self.page_stack = QStackedWidget(self)

        self.status_page = QWidget(self)
        status_layout = QVBoxLayout()
        self.status_page.setLayout(status_layout)
        self.status_label = QLabel(LOADING_MESSAGE, self.status_page)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setWordWrap(True)
        status_layout.addWidget(self.status_label)
        self.retry_button = QPushButton(RETRY_BUTTON, self.status_page)
        self.retry_button.clicked.connect(self._handle_retry)
        self.retry_button.hide()
        status_layout.addWidget(self.retry_button, alignment=Qt.AlignCenter)
        self.profile_button = QPushButton(PROFILE_BUTTON, self.status_page)
        self.profile_button.clicked.connect(self._handle_profile_setup)
        self.profile_button.hide()
        status_layout.addWidget(self.profile_button, alignment=Qt.AlignCenter)

        self.result_page = QWidget(self)
        result_layout = QVBoxLayout()
        self.result_page.setLayout(result_layout)
        self.result_title = QLabel("", self.result_page)
        self.result_title.setAlignment(Qt.AlignCenter)
        self.result_title.setStyleSheet("font-size: 20px; font-weight: bold;")
        result_layout.addWidget(self.result_title)
        self.result_label = QLabel("", self.result_page)
        self.result_label.setAlignment(Qt.AlignCenter)
        result_layout.addWidget(self.result_label)
        self.attempts_label = QLabel("", self.result_page)
        self.attempts_label.setAlignment(Qt.AlignCenter)
        result_layout.addWidget(self.attempts_label)

        self.page_stack.addWidget(self.status_page)
        self.page_stack.addWidget(self.result_page)
        root_layout.addWidget(self.page_stack)

    def _run(self, coro: Coroutine[object, object, None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # --- Loading ---

    async def load(self) -> None:
        """Resolve access and open the session; shows a status page otherwise."""
        self._show_status(LOADING_MESSAGE)
        try:
            facts = await fetch_access_facts(self.backend)
        except BackendError as exc:
            logger.warning("Could not resolve access: %s", exc)
            self._show_status(LOAD_FAILED_MESSAGE, allow_retry=True)
            return

        decision = self.gate.evaluate(facts)
        if decision.profile is ProfileGateState.SIGNED_OUT:
            self._show_status(SIGNED_OUT_MESSAGE)
            return
        if decision.profile is ProfileGateState.NEEDS_SETUP:
            self._show_status(PROFILE_SETUP_MESSAGE, allow_profile=True)
            return
        if not decision.can_reach(Screen.TEST):
            self._show_status(LOADING_MESSAGE)
            return

        if self.test_id is None:
            published = await self.backend.list_published_tests()
            if not published:
                self._show_status(NO_PUBLISHED_TEST_MESSAGE, allow_retry=True)
                return
            self.test_id = published[0].id

        opening = await open_test_session(self.backend, self.test_id, facts.role)
        if opening.status is OpenStatus.LOAD_FAILED:
            self._show_status(LOAD_FAILED_MESSAGE, allow_retry=True)
        elif opening.status is OpenStatus.NOT_FOUND:
            self._show_status(NOT_FOUND_MESSAGE)
        elif opening.status is OpenStatus.PENDING:
            self._show_status(LOADING_MESSAGE)
        else:
            self._show_session(opening.session)

    def _handle_retry(self) -> None:
        self._run(self.load())

    def _show_status(self, message: str, allow_retry: bool = False, allow_profile: bool = False) -> None:
        self.status_label.setText(message)
        self.retry_button.setVisible(allow_retry)
        self.profile_button.setVisible(allow_profile)
        self.page_stack.setCurrentWidget(self.status_page)

    def _show_session(self, session: TestSession) -> None:
        self.session = session
        self.setWindowTitle(f"{WINDOW_TITLE} - {session.test.name}")
        self.session_panel = SessionPanel(session, on_outcome=self._handle_outcome, parent=self)
        self.page_stack.addWidget(self.session_panel)
        self.page_stack.setCurrentWidget(self.session_panel)

    # --- Profile ---

    def _handle_profile_setup(self) -> None:
        dialog = ProfileDialog(self, profile=self._draft_profile)
        if dialog.exec() != QDialog.Accepted:
            return
        self._draft_profile = dialog.get_profile()
        self._run(self._save_profile(self._draft_profile))

    async def _save_profile(self, profile: UserProfile) -> None:
        try:
            await self.backend.save_caller_profile(profile)
        except BackendError as exc:
            show_error(self, PROFILE_SAVE_FAILED_TITLE, str(exc))
            return
        self._draft_profile = None
        self.gate.profile_saved()
        await self.load()

    # --- Submission ---

    def _handle_outcome(self, outcome: SubmissionOutcome) -> None:
        if not outcome.submitted:
            logger.warning("Submission failed: %s", outcome.error)
            if self.session_panel is not None:
                self.session_panel.set_status(SUBMIT_FAILED_MESSAGE)
            show_error(self, "Submission Failed", SUBMIT_FAILED_MESSAGE)
            return

        score = outcome.score
        self.result_title.setText(self.session.test.name if self.session else "")
        self.result_label.setText(
            RESULT_TEMPLATE.format(
                marks=score.marks,
                max_marks=score.max_marks,
                percentage=score.marks_percentage,
                correct=score.correct_count,
                total=score.total_questions,
            )
        )
        self.attempts_label.setText("")
        self.page_stack.setCurrentWidget(self.result_page)
        self._discard_session()
        self._run(self._show_attempt_count())
        if outcome.time_expired:
            show_info(self, "Time Up", TIME_EXPIRED_MESSAGE)

    async def _show_attempt_count(self) -> None:
        try:
            results = await self.backend.get_my_results()
        except BackendError as exc:
            logger.warning("Could not load previous results: %s", exc)
            return
        count = sum(1 for result in results if result.test_id == self.test_id)
        self.attempts_label.setText(ATTEMPTS_TEMPLATE.format(count=count))

    def _discard_session(self) -> None:
        if self.session_panel is not None:
            self.session_panel.shutdown()
            self.page_stack.removeWidget(self.session_panel)
            self.session_panel.deleteLater()
        elif self.session is not None:
            self.session.close()
        self.session_panel = None
        self.session = None

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        self._discard_session()
        super().closeEvent(event)
