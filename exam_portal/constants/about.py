"""Static metadata describing the exam portal."""

APP_NAME = "Exam Portal"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Exam Portal delivers timed, image-based multiple-choice tests. "
    "Students answer A-D against a countdown; administrators curate questions, "
    "publish tests, and review marks."
)
