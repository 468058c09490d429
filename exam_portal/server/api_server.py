"""FastAPI server that exposes the portal backend."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Thread

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field
import uvicorn

from exam_portal.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from exam_portal.constants.exam_constants import DEFAULT_MARKS_PER_CORRECT, DEFAULT_NEGATIVE_MARKS
from exam_portal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT, PRINCIPAL_HEADER
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


class ProfilePayload(BaseModel):
    """Payload schema for saving the caller's profile."""

    full_name: str
    user_class: UserClass
    contact_number: str


class AnswerPayload(BaseModel):
    question_id: int
    selected_option: str | None = None


class SubmissionPayload(BaseModel):
    """Payload schema for a test submission; unanswered questions may be omitted."""

    answers: list[AnswerPayload] = Field(default_factory=list)


class QuestionPayload(BaseModel):
    image_url: str
    correct_option: str


class TestPayload(BaseModel):
    """Payload schema for creating or updating a test."""

    name: str
    duration_minutes: int
    question_ids: list[int]
    marks_per_correct: int = DEFAULT_MARKS_PER_CORRECT
    negative_marks: int = DEFAULT_NEGATIVE_MARKS

    def marking(self) -> MarkingScheme:
        return MarkingScheme(
            marks_per_correct=self.marks_per_correct,
            negative_marks=self.negative_marks,
        )


class RolePayload(BaseModel):
    role: UserRole


def _get_portal_manager_dependency(portal_manager: PortalManager):
    def dependency() -> PortalManager:
        return portal_manager

    return dependency


def _require_principal(
    principal: str | None = Header(default=None, alias=PRINCIPAL_HEADER),
) -> str:
    if principal is None or not principal.strip():
        raise HTTPException(status_code=401, detail="Sign in required.")
    return principal.strip()


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _question_dict(question: Question) -> dict[str, object]:
    return {
        "id": question.id,
        "correct_option": question.correct_option,
        "image_url": question.image_url,
    }


def _test_dict(test: Test) -> dict[str, object]:
    return {
        "id": test.id,
        "name": test.name,
        "duration_minutes": test.duration_minutes,
        "is_published": test.is_published,
        "marks_per_correct": test.marking.marks_per_correct,
        "negative_marks": test.marking.negative_marks,
        "questions": [_question_dict(question) for question in test.questions],
    }


def _result_dict(result: TestResult) -> dict[str, object]:
    return {
        "test_id": result.test_id,
        "principal": result.principal,
        "answers": [
            {"question_id": a.question_id, "selected_option": a.selected_option}
            for a in result.answers
        ],
        "marks": result.marks,
        "score": result.correct_count,
        "submitted_at": result.submitted_at.isoformat(),
    }


def _profile_dict(profile: UserProfile) -> dict[str, object]:
    return {
        "full_name": profile.full_name,
        "user_class": profile.user_class.value,
        "contact_number": profile.contact_number,
        "has_visited_admin": profile.has_visited_admin,
    }


def create_api_app(portal_manager: PortalManager) -> FastAPI:
    """Create a FastAPI application wired to the provided portal manager."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    manager_dep = _get_portal_manager_dependency(portal_manager)

    # --- Profile & Role ---

    @app.get("/profile")
    def get_profile(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        profile = manager.get_caller_profile(principal)
        return {"profile": _profile_dict(profile) if profile else None}

    @app.put("/profile")
    def save_profile(
        payload: ProfilePayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            saved = manager.save_caller_profile(
                principal,
                UserProfile(
                    full_name=payload.full_name,
                    user_class=payload.user_class,
                    contact_number=payload.contact_number,
                ),
            )
        return {"profile": _profile_dict(saved)}

    @app.get("/role")
    def get_role(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return {"role": manager.get_caller_role(principal).value}

    # --- Student Tests & Results ---

    @app.get("/tests")
    def list_published_tests(
        _: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        return [_test_dict(test) for test in manager.get_published_tests()]

    @app.get("/tests/{test_id}")
    def get_test(
        test_id: int,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        test = manager.get_test(principal, test_id)
        if test is None:
            raise HTTPException(status_code=404, detail="Test not found.")
        return _test_dict(test)

    @app.post("/tests/{test_id}/results", status_code=201)
    def submit_result(
        test_id: int,
        payload: SubmissionPayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        answers = [Answer(a.question_id, a.selected_option) for a in payload.answers]
        with _translate_errors():
            result = manager.submit_test_result(principal, test_id, answers)
        return _result_dict(result)

    @app.get("/results/mine")
    def get_my_results(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        return [_result_dict(result) for result in manager.get_my_results(principal)]

    @app.get("/results/mine/{test_id}")
    def get_my_latest_result(
        test_id: int,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        result = manager.get_latest_result(principal, test_id)
        if result is None:
            raise HTTPException(status_code=404, detail="No result for this test.")
        return _result_dict(result)

    # --- Admin Visit ---

    @app.get("/admin/visited")
    def has_admin_been_visited(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return {"visited": manager.has_admin_been_visited(principal)}

    @app.post("/admin/visited", status_code=204)
    def mark_admin_visited(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> None:
        with _translate_errors():
            manager.mark_admin_visited(principal)

    # --- Admin: Questions ---

    @app.get("/admin/questions")
    def list_questions(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            return [_question_dict(q) for q in manager.get_all_questions(principal)]

    @app.post("/admin/questions", status_code=201)
    def add_question(
        payload: QuestionPayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            question = manager.add_question(principal, payload.image_url, payload.correct_option)
        return _question_dict(question)

    @app.put("/admin/questions/{question_id}")
    def update_question(
        question_id: int,
        payload: QuestionPayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            question = manager.update_question(
                principal, question_id, payload.image_url, payload.correct_option
            )
        return _question_dict(question)

    @app.delete("/admin/questions/{question_id}", status_code=204)
    def delete_question(
        question_id: int,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> None:
        with _translate_errors():
            manager.delete_question(principal, question_id)

    # --- Admin: Tests ---

    @app.get("/admin/tests")
    def list_all_tests(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            return [_test_dict(test) for test in manager.get_all_tests(principal)]

    @app.post("/admin/tests", status_code=201)
    def create_test(
        payload: TestPayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            test = manager.create_test(
                principal,
                payload.name,
                payload.duration_minutes,
                payload.question_ids,
                payload.marking(),
            )
        return _test_dict(test)

    @app.put("/admin/tests/{test_id}")
    def update_test(
        test_id: int,
        payload: TestPayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            test = manager.update_test(
                principal,
                test_id,
                payload.name,
                payload.duration_minutes,
                payload.question_ids,
                payload.marking(),
            )
        return _test_dict(test)

    @app.post("/admin/tests/{test_id}/publish")
    def toggle_publish(
        test_id: int,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            test = manager.toggle_publish_test(principal, test_id)
        return _test_dict(test)

    # --- Admin: Users & Results ---

    @app.get("/admin/results")
    def list_results(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            rows = manager.get_result_rows(principal)
        return [
            {
                "test_id": row.test_id,
                "principal": row.principal,
                "marks": row.marks,
                "max_marks": row.max_marks,
                "score": row.correct_count,
                "total_questions": row.total_questions,
                "marks_percentage": round(row.marks_percentage),
            }
            for row in rows
        ]

    @app.get("/admin/users")
    def list_users(
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            users = manager.get_all_users(principal)
        return [{"principal": user, "profile": _profile_dict(profile)} for user, profile in users]

    @app.put("/admin/users/{user_principal}/role", status_code=204)
    def assign_role(
        user_principal: str,
        payload: RolePayload,
        principal: str = Depends(_require_principal),
        manager: PortalManager = Depends(manager_dep),
    ) -> None:
        with _translate_errors():
            manager.assign_role(principal, user_principal, payload.role)

    return app


def start_api_server(
    portal_manager: PortalManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(portal_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="PortalApiServer", daemon=True)
    thread.start()
    return thread
