"""Qt UI components for the student console."""

from .dialog_helpers import confirm_submit, show_error, show_info
from .profile_dialog import ProfileDialog
from .question_renderer import render_question_image
from .test_window import TestWindow

__all__ = [
    "ProfileDialog",
    "TestWindow",
    "confirm_submit",
    "show_error",
    "show_info",
    "render_question_image",
]
