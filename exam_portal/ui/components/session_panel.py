"""Component rendering a running test attempt."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_portal.constants.exam_constants import OPTION_LETTERS
from exam_portal.constants.ui_constants import (
    CLEAR_BUTTON,
    NEXT_BUTTON,
    PREV_BUTTON,
    SUBMIT_BUTTON,
    SUBMITTING_BUTTON,
    VIEW_REFRESH_INTERVAL_MS,
)
from exam_portal.core.models import SubmissionStatus
from exam_portal.core.services.test_session import SessionView, SubmissionOutcome, TestSession
from exam_portal.ui.dialog_helpers import confirm_submit
from exam_portal.ui.question_renderer import render_question_image


class SessionPanel(QWidget):
    """Timer bar, question image, A-D buttons and navigation for one session."""

    def __init__(
        self,
        session: TestSession,
        on_outcome: Callable[[SubmissionOutcome], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self.on_outcome = on_outcome
        self._seen_outcome: SubmissionOutcome | None = None
        self._submit_task: asyncio.Task[SubmissionOutcome | None] | None = None
        self._rendered_index: int | None = None

        self._build_ui()
        self._configure_refresh_timer()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Top bar: timer, progress and submit
        top_row = QHBoxLayout()
        self.timer_label = QLabel("", self)
        top_row.addWidget(self.timer_label)

        self.time_progress = QProgressBar(self)
        self.time_progress.setRange(0, 1000)
        self.time_progress.setTextVisible(False)
        top_row.addWidget(self.time_progress, stretch=1)

        self.answered_label = QLabel("", self)
        top_row.addWidget(self.answered_label)

        self.submit_button = QPushButton(SUBMIT_BUTTON, self)
        self.submit_button.clicked.connect(self._handle_submit)
        top_row.addWidget(self.submit_button)
        layout.addLayout(top_row)

        self.question_label = QLabel("", self)
        layout.addWidget(self.question_label)

        self.image_view = QWebEngineView(self)
        layout.addWidget(self.image_view, stretch=1)

        option_row = QHBoxLayout()
        self.option_buttons: list[QPushButton] = []
        for letter in OPTION_LETTERS:
            button = QPushButton(letter, self)
            button.setCheckable(True)
            button.clicked.connect(lambda _checked=False, value=letter: self._handle_select(value))
            option_row.addWidget(button)
            self.option_buttons.append(button)
        self.clear_button = QPushButton(CLEAR_BUTTON, self)
        self.clear_button.clicked.connect(self._handle_clear)
        option_row.addWidget(self.clear_button)
        layout.addLayout(option_row)

        nav_row = QHBoxLayout()
        self.prev_button = QPushButton(PREV_BUTTON, self)
        self.prev_button.clicked.connect(self._handle_previous)
        nav_row.addWidget(self.prev_button)

        self.dot_buttons: list[QPushButton] = []
        for index in range(self.session.total_questions):
            dot = QPushButton(str(index + 1), self)
            dot.setFixedWidth(32)
            dot.setCheckable(True)
            dot.clicked.connect(lambda _checked=False, target=index: self._handle_navigate(target))
            nav_row.addWidget(dot)
            self.dot_buttons.append(dot)

        self.next_button = QPushButton(NEXT_BUTTON, self)
        self.next_button.clicked.connect(self._handle_next)
        nav_row.addWidget(self.next_button)
        layout.addLayout(nav_row)

        self.status_label = QLabel("", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.status_label)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(VIEW_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self.refresh)
        self.refresh_timer.start()

    def refresh(self) -> None:
        view = self.session.view()
        self._render(view)
        outcome = view.last_outcome
        if outcome is not None and outcome is not self._seen_outcome:
            self._seen_outcome = outcome
            if outcome.submitted:
                self.refresh_timer.stop()
            self.on_outcome(outcome)

    def _render(self, view: SessionView) -> None:
        self.timer_label.setText(view.remaining_time)
        self.timer_label.setStyleSheet("color: #dc2626; font-weight: bold;" if view.time_warning else "")
        self.time_progress.setValue(int(view.time_percentage * 10))
        self.answered_label.setText(f"{view.answered_count}/{view.total_questions}")
        self.question_label.setText(f"Question {view.current_index + 1} of {view.total_questions}")

        if self._rendered_index != view.current_index:
            self._rendered_index = view.current_index
            self.image_view.setHtml(render_question_image(view.current_image_url, view.current_index + 1))

        editable = view.can_submit and not view.is_expired
        for button, letter in zip(self.option_buttons, OPTION_LETTERS):
            button.setChecked(view.current_selection == letter)
            button.setEnabled(editable)
        self.clear_button.setEnabled(editable and view.current_selection is not None)

        for index, dot in enumerate(self.dot_buttons):
            dot.setChecked(index == view.current_index)
            dot.setStyleSheet("font-weight: bold;" if view.answered[index] else "")

        self.prev_button.setEnabled(view.current_index > 0)
        self.next_button.setEnabled(view.current_index < view.total_questions - 1)

        submitting = view.status is SubmissionStatus.SUBMITTING
        self.submit_button.setText(SUBMITTING_BUTTON if submitting else SUBMIT_BUTTON)
        self.submit_button.setEnabled(view.can_submit)

    def _handle_select(self, letter: str) -> None:
        self.session.select_answer(self.session.current_index, letter)
        self.refresh()

    def _handle_clear(self) -> None:
        self.session.clear_answer(self.session.current_index)
        self.refresh()

    def _handle_previous(self) -> None:
        self.session.previous_question()
        self.refresh()

    def _handle_next(self) -> None:
        self.session.next_question()
        self.refresh()

    def _handle_navigate(self, index: int) -> None:
        self.session.navigate(index)
        self.refresh()

    def _handle_submit(self) -> None:
        view = self.session.view()
        if not view.can_submit:
            return
        if not confirm_submit(self, view.answered_count, view.total_questions):
            return
        self._submit_task = asyncio.ensure_future(self.session.request_submit(is_automatic=False))
        self.refresh()

    def set_status(self, message: str) -> None:
        self.status_label.setText(message)

    def shutdown(self) -> None:
        self.refresh_timer.stop()
        self.session.close()
