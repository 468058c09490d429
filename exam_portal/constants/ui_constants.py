"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "Exam Portal Student Console"
VIEW_REFRESH_INTERVAL_MS: int = 250

LOADING_MESSAGE: str = "Loading test…"
LOAD_FAILED_MESSAGE: str = "Could not load the test. Check your connection and try again."
NOT_FOUND_MESSAGE: str = "Test Not Found. This test is not available."
SIGNED_OUT_MESSAGE: str = "Please sign in to take a test."
PROFILE_SETUP_MESSAGE: str = "Complete your profile before starting a test."

PREV_BUTTON: str = "Previous"
NEXT_BUTTON: str = "Next"
CLEAR_BUTTON: str = "Clear Answer"
SUBMIT_BUTTON: str = "Submit Test"
SUBMITTING_BUTTON: str = "Submitting…"
RETRY_BUTTON: str = "Retry"

SUBMIT_CONFIRM_TITLE: str = "Submit Test?"
SUBMIT_CONFIRM_TEMPLATE: str = "You have answered {answered} out of {total} questions. This action cannot be undone."
SUBMIT_FAILED_MESSAGE: str = "Failed to submit test. Please try again."
TIME_EXPIRED_MESSAGE: str = "Time is up! Test submitted automatically."
RESULT_TEMPLATE: str = "Marks: {marks} / {max_marks} ({percentage:.0f}%)\nCorrect: {correct}/{total}"

PROFILE_BUTTON: str = "Set Up Profile"
PROFILE_DIALOG_TITLE: str = "Complete Your Profile"
PROFILE_SAVE_FAILED_TITLE: str = "Profile Not Saved"
USER_CLASS_LABELS: dict[str, str] = {
    "eleventh": "11th",
    "twelfth": "12th",
    "dropper": "Dropper",
}

NO_PUBLISHED_TEST_MESSAGE: str = "No test is available right now."
ATTEMPTS_TEMPLATE: str = "Attempts on this test: {count}"
