"""Access gating: which screens a principal may reach given fetched facts.

The evaluators here are pure functions of an :class:`AccessFacts` snapshot.
Every fact may still be ``PENDING``; a gate that depends on a pending fact
reports ``UNKNOWN`` rather than guessing, so a screen never flickers between
a provisional and a final decision.

:class:`AccessGate` wraps the evaluators for one client session and adds the
parts that need memory: profile completion and the admin visit flag only
ever move forward, and the "mark admin visited" call fires at most once.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import logging

from exam_portal.core.backend import BackendError, ExamBackend
from exam_portal.core.models import PENDING, Pending, Test, UserProfile, UserRole

logger = logging.getLogger(__name__)


class ProfileGateState(str, Enum):
    UNKNOWN = "unknown"
    SIGNED_OUT = "signed-out"
    NEEDS_SETUP = "needs-setup"
    COMPLETE = "complete"


class TestAccess(str, Enum):
    __test__ = False

    UNKNOWN = "unknown"
    GRANTED = "granted"
    NOT_FOUND = "not-found"


class AdminGateState(str, Enum):
    UNKNOWN = "unknown"
    ELIGIBLE = "eligible"
    BLOCKED = "blocked"
    DENIED = "denied"


class Screen(str, Enum):
    PROFILE_SETUP = "profile-setup"
    DASHBOARD = "dashboard"
    TEST = "test"
    ADMIN = "admin"


class AdminEntry(str, Enum):
    """What the admin screen should do when it is entered."""

    PENDING = "pending"
    RENDER = "render"
    REDIRECT_DASHBOARD = "redirect-dashboard"
    REDIRECT_HOME = "redirect-home"


@dataclass(frozen=True, slots=True)
class AccessFacts:
    """Snapshot of identity facts as read from the backend."""

    principal: str | None | Pending = PENDING
    profile: UserProfile | None | Pending = PENDING
    role: UserRole | Pending = PENDING
    admin_visited: bool | Pending = PENDING


@dataclass(frozen=True, slots=True)
class AccessDecision:
    profile: ProfileGateState
    admin: AdminGateState
    screens: frozenset[Screen] = field(default_factory=frozenset)

    @property
    def is_resolved(self) -> bool:
        return (
            self.profile is not ProfileGateState.UNKNOWN
            and self.admin is not AdminGateState.UNKNOWN
        )

    def can_reach(self, screen: Screen) -> bool:
        return screen in self.screens


def evaluate_profile_gate(facts: AccessFacts) -> ProfileGateState:
    if facts.principal is PENDING:
        return ProfileGateState.UNKNOWN
    if facts.principal is None:
        return ProfileGateState.SIGNED_OUT
    if facts.profile is PENDING:
        return ProfileGateState.UNKNOWN
    if facts.profile is None:
        return ProfileGateState.NEEDS_SETUP
    return ProfileGateState.COMPLETE


def evaluate_test_access(role: UserRole | Pending, test: Test | None | Pending) -> TestAccess:
    """Admins reach every test; everyone else only published ones.

    A hidden test is reported as NOT_FOUND, the same as a missing one.
    """
    if role is PENDING or test is PENDING:
        return TestAccess.UNKNOWN
    if test is None:
        return TestAccess.NOT_FOUND
    if role is UserRole.ADMIN or test.is_published:
        return TestAccess.GRANTED
    return TestAccess.NOT_FOUND


def evaluate_admin_gate(facts: AccessFacts) -> AdminGateState:
    if facts.principal is PENDING:
        return AdminGateState.UNKNOWN
    if facts.principal is None:
        return AdminGateState.DENIED
    if facts.role is PENDING:
        return AdminGateState.UNKNOWN
    if facts.role is not UserRole.ADMIN:
        return AdminGateState.DENIED
    if facts.admin_visited is PENDING:
        return AdminGateState.UNKNOWN
    return AdminGateState.BLOCKED if facts.admin_visited else AdminGateState.ELIGIBLE


def evaluate_access(facts: AccessFacts) -> AccessDecision:
    return build_decision(evaluate_profile_gate(facts), evaluate_admin_gate(facts))


def build_decision(profile: ProfileGateState, admin: AdminGateState) -> AccessDecision:
    screens: set[Screen] = set()
    if profile is ProfileGateState.NEEDS_SETUP:
        screens.add(Screen.PROFILE_SETUP)
    elif profile is ProfileGateState.COMPLETE:
        screens.update((Screen.DASHBOARD, Screen.TEST))
    if admin is AdminGateState.ELIGIBLE:
        screens.add(Screen.ADMIN)
    return AccessDecision(profile=profile, admin=admin, screens=frozenset(screens))


async def fetch_access_facts(backend: ExamBackend) -> AccessFacts:
    """Read a fresh snapshot of the caller's facts.

    Facts that do not apply to the caller (profile of a signed-out visitor,
    visit flag of a non-admin) are filled with their absent value so the
    snapshot is fully resolved.
    """
    principal = backend.principal
    if principal is None:
        return AccessFacts(principal=None, profile=None, role=UserRole.GUEST, admin_visited=False)
    profile = await backend.get_caller_profile()
    role = await backend.get_caller_role()
    admin_visited = await backend.has_admin_been_visited() if role is UserRole.ADMIN else False
    return AccessFacts(principal=principal, profile=profile, role=role, admin_visited=admin_visited)


class AccessGate:
    """Per-session gate state layered over the pure evaluators."""

    def __init__(self, backend: ExamBackend) -> None:
        self._backend = backend
        self._profile_completed: bool = False
        self._admin_visited_seen: bool = False
        self._visit_marked: bool = False

    def profile_saved(self) -> None:
        """Record that the profile was saved; the setup prompt never returns."""
        self._profile_completed = True

    def evaluate(self, facts: AccessFacts) -> AccessDecision:
        return build_decision(self._profile_state(facts), self._admin_state(facts))

    async def enter_admin_screen(self, facts: AccessFacts) -> AdminEntry:
        """Decide what the admin screen does on entry, marking the first visit.

        The visit is marked once per gate; later entries in the same session
        keep rendering even though the backend now reports the flag as set.
        """
        state = self._admin_state(facts)
        if state is AdminGateState.UNKNOWN:
            return AdminEntry.PENDING
        if state is AdminGateState.DENIED:
            return AdminEntry.REDIRECT_HOME if facts.principal is None else AdminEntry.REDIRECT_DASHBOARD
        if state is AdminGateState.BLOCKED:
            logger.info("Admin panel already visited; redirecting to dashboard")
            return AdminEntry.REDIRECT_DASHBOARD
        if self._visit_marked:
            return AdminEntry.RENDER

        self._visit_marked = True
        try:
            await self._backend.mark_admin_visited()
        except BackendError:
            logger.warning("Failed to mark admin panel as visited", exc_info=True)
        return AdminEntry.RENDER

    @property
    def visit_marked(self) -> bool:
        return self._visit_marked

    def _profile_state(self, facts: AccessFacts) -> ProfileGateState:
        state = evaluate_profile_gate(facts)
        if state is ProfileGateState.COMPLETE:
            self._profile_completed = True
        elif self._profile_completed and facts.principal not in (None, PENDING):
            # A fetch racing the save may still report no profile.
            return ProfileGateState.COMPLETE
        return state

    def _admin_state(self, facts: AccessFacts) -> AdminGateState:
        if facts.admin_visited is True:
            self._admin_visited_seen = True
        if self._admin_visited_seen and facts.admin_visited is False:
            facts = replace(facts, admin_visited=True)
        state = evaluate_admin_gate(facts)
        if state is AdminGateState.BLOCKED and self._visit_marked:
            # This session made the visit; it stays open until the session ends.
            return AdminGateState.ELIGIBLE
        return state
