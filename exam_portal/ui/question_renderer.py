"""Question rendering utilities for displaying image-based questions."""

from __future__ import annotations

from html import escape


def render_question_image(image_url: str | None, question_number: int) -> str:
    """Render a question image as a standalone HTML document.

    Args:
        image_url: Externally hosted image for the question, if any
        question_number: The question number to display (1-indexed)

    Returns:
        HTML string ready for display in QWebEngineView
    """
    if not image_url:
        body = "<p class='empty'>(No question image)</p>"
    else:
        body = (
            f"<img src=\"{escape(image_url, quote=True)}\" "
            f"alt=\"Question {question_number}\" />"
        )
    return (
        "<!doctype html><html><head><meta charset='utf-8' />"
        "<style>"
        "body { margin: 0; display: flex; justify-content: center; background: #f9fafb; }"
        "img { max-width: 100%; max-height: 95vh; object-fit: contain; display: block; }"
        ".empty { color: #6b7280; font-family: sans-serif; }"
        "</style></head>"
        f"<body>{body}</body></html>"
    )
