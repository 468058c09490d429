"""Service for user profiles, roles and the one-shot admin visit flag."""

from __future__ import annotations

from dataclasses import replace
import re

from exam_portal.constants.exam_constants import CONTACT_NUMBER_DIGITS, PROFILE_NAME_MIN_LENGTH
from exam_portal.core.models import UserClass, UserProfile, UserRole

_CONTACT_PATTERN = re.compile(rf"^\d{{{CONTACT_NUMBER_DIGITS}}}$")


class UserDirectory:
    """Tracks registered principals, their role and whether an admin has visited."""

    def __init__(self, admin_principals: set[str] | None = None) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._roles: dict[str, UserRole] = {}
        self._admin_visited: set[str] = set()
        for principal in admin_principals or set():
            self._roles[principal] = UserRole.ADMIN

    def get_profile(self, principal: str) -> UserProfile | None:
        profile = self._profiles.get(principal)
        if profile is None:
            return None
        return replace(profile, has_visited_admin=principal in self._admin_visited)

    def save_profile(self, principal: str, profile: UserProfile) -> UserProfile:
        """Validate and store a profile; the admin visit flag is never taken from input."""
        stored = UserProfile(
            full_name=self._validate_name(profile.full_name),
            user_class=self._validate_class(profile.user_class),
            contact_number=self._validate_contact(profile.contact_number),
            has_visited_admin=principal in self._admin_visited,
        )
        self._profiles[principal] = stored
        if principal not in self._roles:
            self._roles[principal] = UserRole.USER
        return stored

    def get_role(self, principal: str) -> UserRole:
        return self._roles.get(principal, UserRole.GUEST)

    def assign_role(self, principal: str, role: UserRole) -> None:
        self._roles[principal] = role

    def has_visited_admin(self, principal: str) -> bool:
        return principal in self._admin_visited

    def mark_admin_visited(self, principal: str) -> bool:
        """Set the visit flag. Returns True only on the first call for a principal."""
        if principal in self._admin_visited:
            return False
        self._admin_visited.add(principal)
        return True

    def get_users(self) -> list[tuple[str, UserProfile]]:
        return [(principal, self.get_profile(principal)) for principal in sorted(self._profiles)]

    @staticmethod
    def _validate_name(full_name: str) -> str:
        cleaned = full_name.strip()
        if len(cleaned) < PROFILE_NAME_MIN_LENGTH:
            raise ValueError(f"Name must be at least {PROFILE_NAME_MIN_LENGTH} characters.")
        return cleaned

    @staticmethod
    def _validate_class(user_class: UserClass | str) -> UserClass:
        try:
            return UserClass(user_class)
        except ValueError as exc:
            raise ValueError("Please select a valid class.") from exc

    @staticmethod
    def _validate_contact(contact_number: str) -> str:
        cleaned = contact_number.strip()
        if not _CONTACT_PATTERN.match(cleaned):
            raise ValueError(f"Enter a valid {CONTACT_NUMBER_DIGITS}-digit mobile number.")
        return cleaned
