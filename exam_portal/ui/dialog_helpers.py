"""Helper functions for common dialog patterns in the student console."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from exam_portal.constants.ui_constants import SUBMIT_CONFIRM_TEMPLATE, SUBMIT_CONFIRM_TITLE


def confirm_submit(parent: QWidget, answered: int, total: int) -> bool:
    """Ask the student to confirm a manual submission.

    Args:
        parent: Parent widget for the dialog
        answered: Number of answered questions
        total: Number of questions in the test

    Returns:
        True if the student confirmed, False otherwise
    """
    message = SUBMIT_CONFIRM_TEMPLATE.format(answered=answered, total=total)
    unanswered = total - answered
    if unanswered > 0:
        noun = "questions are" if unanswered > 1 else "question is"
        message += f"\n{unanswered} {noun} unanswered."
    reply = QMessageBox.question(
        parent,
        SUBMIT_CONFIRM_TITLE,
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)
