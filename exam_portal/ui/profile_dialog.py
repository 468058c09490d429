"""Dialog collecting the student's profile before a first test."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from exam_portal.constants.exam_constants import CONTACT_NUMBER_DIGITS
from exam_portal.constants.ui_constants import PROFILE_DIALOG_TITLE, USER_CLASS_LABELS
from exam_portal.core.models import UserClass, UserProfile


class ProfileDialog(QDialog):
    """Name, class and contact number form.

    Validation happens in the backend; a rejected profile is reported by the
    caller and the dialog can be reopened with the previous values.
    """

    def __init__(self, parent=None, profile: UserProfile | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(PROFILE_DIALOG_TITLE)
        self.setModal(True)
        self.setMinimumWidth(360)

        self._build_ui()
        if profile is not None:
            self.name_edit.setText(profile.full_name)
            self.class_combo.setCurrentIndex(self.class_combo.findData(profile.user_class.value))
            self.contact_edit.setText(profile.contact_number)

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.name_edit = QLineEdit(self)
        self.name_edit.setPlaceholderText("Full name")
        form.addRow("Name:", self.name_edit)

        self.class_combo = QComboBox(self)
        for user_class in UserClass:
            self.class_combo.addItem(USER_CLASS_LABELS[user_class.value], user_class.value)
        form.addRow("Class:", self.class_combo)

        self.contact_edit = QLineEdit(self)
        self.contact_edit.setMaxLength(CONTACT_NUMBER_DIGITS)
        self.contact_edit.setPlaceholderText(f"{CONTACT_NUMBER_DIGITS}-digit mobile number")
        form.addRow("Contact:", self.contact_edit)
        layout.addLayout(form)

        # Buttons
        button_row = QHBoxLayout()
        button_row.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)  # type: ignore[arg-type]
        button_row.addWidget(self.cancel_button)

        self.save_button = QPushButton("Save")
        self.save_button.setDefault(True)
        self.save_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        button_row.addWidget(self.save_button)

        layout.addLayout(button_row)

    def get_profile(self) -> UserProfile:
        return UserProfile(
            full_name=self.name_edit.text(),
            user_class=UserClass(self.class_combo.currentData()),
            contact_number=self.contact_edit.text(),
        )
