"""Async data-access interface consumed by the session and gate logic."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TYPE_CHECKING, Protocol, TypeVar

from exam_portal.core.models import Answer, Test, TestResult, UserProfile, UserRole

if TYPE_CHECKING:
    from exam_portal.core.portal_manager import PortalManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackendError(Exception):
    """Raised when a backend call fails; callers may retry."""


class ExamBackend(Protocol):
    """Operations the core needs from the portal backend, for one principal."""

    @property
    def principal(self) -> str | None: ...

    async def get_caller_profile(self) -> UserProfile | None: ...

    async def save_caller_profile(self, profile: UserProfile) -> UserProfile: ...

    async def get_caller_role(self) -> UserRole: ...

    async def get_test(self, test_id: int) -> Test | None: ...

    async def list_published_tests(self) -> list[Test]: ...

    async def submit_test_result(self, test_id: int, answers: list[Answer]) -> TestResult: ...

    async def get_my_results(self) -> list[TestResult]: ...

    async def has_admin_been_visited(self) -> bool: ...

    async def mark_admin_visited(self) -> None: ...


class LocalExamBackend:
    """In-process :class:`ExamBackend` over a :class:`PortalManager`.

    Validation, permission and lookup failures from the manager surface as
    :class:`BackendError`, the same as a failed network call would.
    """

    def __init__(self, manager: PortalManager, principal: str | None) -> None:
        self._manager = manager
        self._principal = principal

    @property
    def principal(self) -> str | None:
        return self._principal

    async def get_caller_profile(self) -> UserProfile | None:
        return self._call(self._manager.get_caller_profile)

    async def save_caller_profile(self, profile: UserProfile) -> UserProfile:
        return self._call(self._manager.save_caller_profile, profile)

    async def get_caller_role(self) -> UserRole:
        if self._principal is None:
            return UserRole.GUEST
        return self._call(self._manager.get_caller_role)

    async def get_test(self, test_id: int) -> Test | None:
        return self._call(self._manager.get_test, test_id)

    async def list_published_tests(self) -> list[Test]:
        return self._manager.get_published_tests()

    async def submit_test_result(self, test_id: int, answers: list[Answer]) -> TestResult:
        return self._call(self._manager.submit_test_result, test_id, answers)

    async def get_my_results(self) -> list[TestResult]:
        return self._call(self._manager.get_my_results)

    async def has_admin_been_visited(self) -> bool:
        return self._call(self._manager.has_admin_been_visited)

    async def mark_admin_visited(self) -> None:
        self._call(self._manager.mark_admin_visited)

    def _call(self, operation: Callable[..., T], *args: object) -> T:
        if self._principal is None:
            raise BackendError("Not signed in.")
        try:
            return operation(self._principal, *args)
        except (LookupError, PermissionError, ValueError) as exc:
            logger.warning("%s failed: %s", operation.__name__, exc)
            raise BackendError(str(exc)) from exc
