from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from exam_portal.core.backend import BackendError
from exam_portal.core.models import (
    Answer,
    MarkingScheme,
    Question,
    Test,
    TestResult,
    UserClass,
    UserProfile,
    UserRole,
)
from exam_portal.core.portal_manager import PortalManager

ADMIN = "admin-principal"
STUDENT = "student-principal"


def make_test(
    question_count: int = 5,
    duration_minutes: int = 30,
    marking: MarkingScheme | None = None,
    is_published: bool = True,
    correct_option: str = "B",
) -> Test:
    questions = tuple(
        Question(id=index + 1, correct_option=correct_option, image_url=f"https://img.example/q{index + 1}.png")
        for index in range(question_count)
    )
    return Test(
        id=7,
        name="Physics Mock",
        duration_minutes=duration_minutes,
        questions=questions,
        is_published=is_published,
        marking=marking or MarkingScheme(),
    )


def make_profile(name: str = "Asha Verma") -> UserProfile:
    return UserProfile(full_name=name, user_class=UserClass.TWELFTH, contact_number="9876543210")


class FakeBackend:
    """Scriptable async backend that records every call."""

    def __init__(
        self,
        principal: str | None = STUDENT,
        profile: UserProfile | None = None,
        role: UserRole = UserRole.USER,
        test: Test | None = None,
        admin_visited: bool = False,
    ) -> None:
        self._principal = principal
        self.profile = profile
        self.role = role
        self.test = test
        self.admin_visited = admin_visited
        self.submissions: list[tuple[int, list[Answer]]] = []
        self.mark_visited_calls = 0
        self.fail_submit = False
        self.fail_get_test = False
        self.fail_mark_visited = False
        self.submit_gate: asyncio.Event | None = None

    @property
    def principal(self) -> str | None:
        return self._principal

    async def get_caller_profile(self) -> UserProfile | None:
        return self.profile

    async def save_caller_profile(self, profile: UserProfile) -> UserProfile:
        self.profile = profile
        return profile

    async def get_caller_role(self) -> UserRole:
        return self.role

    async def get_test(self, test_id: int) -> Test | None:
        if self.fail_get_test:
            raise BackendError("network down")
        if self.test is not None and self.test.id == test_id:
            return self.test
        return None

    async def list_published_tests(self) -> list[Test]:
        return [self.test] if self.test is not None and self.test.is_published else []

    async def submit_test_result(self, test_id: int, answers: list[Answer]) -> TestResult:
        self.submissions.append((test_id, list(answers)))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.fail_submit:
            raise BackendError("submission rejected")
        return TestResult(
            test_id=test_id,
            principal=self._principal or "",
            answers=tuple(answers),
            marks=0,
            correct_count=0,
            submitted_at=datetime.now(timezone.utc),
        )

    async def get_my_results(self) -> list[TestResult]:
        return []

    async def has_admin_been_visited(self) -> bool:
        return self.admin_visited

    async def mark_admin_visited(self) -> None:
        self.mark_visited_calls += 1
        if self.fail_mark_visited:
            raise BackendError("could not mark")
        self.admin_visited = True


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(profile=make_profile(), test=make_test())


@pytest.fixture
def manager() -> PortalManager:
    return PortalManager(admin_principals={ADMIN})


@pytest.fixture
def seeded_manager(manager: PortalManager) -> PortalManager:
    """Manager holding one published and one draft test, and a registered student."""
    ids = [manager.add_question(ADMIN, f"https://img.example/{n}.png", "B").id for n in range(5)]
    published = manager.create_test(ADMIN, "Physics Mock", 30, ids, MarkingScheme(4, 1))
    manager.set_test_published(ADMIN, published.id, True)
    manager.create_test(ADMIN, "Chemistry Draft", 20, ids[:2], MarkingScheme())
    manager.save_caller_profile(STUDENT, make_profile())
    return manager
