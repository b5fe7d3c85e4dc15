"""FastAPI server exposing the invitation, the guest icebreaker and admin endpoints."""

from __future__ import annotations

import logging
import secrets
from urllib.parse import quote

from fastapi import Depends, FastAPI, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel
import uvicorn

from birthday_app.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from birthday_app.constants.auth_constants import (
    AUTH_COOKIE_KEY,
    DEFAULT_GUEST_REDIRECT,
    DEFAULT_LOGIN_REDIRECT,
    GUEST_COOKIE_KEY,
)
from birthday_app.core.errors import (
    ConcurrentUpdate,
    NoActiveAssignment,
    NoPeersAvailable,
    NoQuestionsAvailable,
    Unauthenticated,
)
from birthday_app.core.icebreaker_manager import IcebreakerManager
from birthday_app.core.markdown_renderer import load_invitation_markdown, renderer
from birthday_app.core.models import AssignmentResult, Question
from birthday_app.core.question_exporter import serialize_questions
from birthday_app.core.question_importer import QuestionImportError, parse_questions_text
from birthday_app.core.security import create_guest_token, decode_guest_token, shared_cookie_value
from birthday_app.server.pages import ICEBREAKER_PAGE_HTML, guest_login_page, login_page
from birthday_app.utils.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class AnswerPayload(BaseModel):
    """Payload schema for a submitted icebreaker answer."""

    answer: str


class GuestPayload(BaseModel):
    name: str
    password: str


class GuestCreatePayload(BaseModel):
    """Either a single guest (name + password) or a bulk ``guests`` list."""

    name: str | None = None
    password: str | None = None
    guests: list[GuestPayload] | None = None


class PasswordPayload(BaseModel):
    password: str


class QuestionPayload(BaseModel):
    id: str
    text: str


class QuestionTextPayload(BaseModel):
    text: str


class QuestionImportPayload(BaseModel):
    """Question bank in the plain-text import format."""

    text: str


def _get_manager_dependency(manager: IcebreakerManager):
    def dependency() -> IcebreakerManager:
        return manager

    return dependency


def _safe_redirect(path: str | None, default: str) -> str:
    # Only same-site absolute paths; anything else could bounce guests off-site.
    if not path or not path.startswith("/") or path.startswith("//"):
        return default
    return path


def create_api_app(manager: IcebreakerManager, settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application wired to the provided icebreaker manager."""
    settings = settings or get_settings()
    app = FastAPI(title=f"{APP_NAME} API", description=APP_ABOUT_TEXT, version=APP_VERSION)
    manager_dep = _get_manager_dependency(manager)
    basic_auth = HTTPBasic()

    guests_password = settings.guests_password.get_secret_value()
    session_secret = settings.session_secret.get_secret_value()
    invitation_html = renderer.render_invitation(load_invitation_markdown(settings.invitation_path))

    def set_cookie(response: Response, key: str, value: str) -> None:
        response.set_cookie(
            key=key,
            value=value,
            max_age=settings.session_max_age_seconds,
            path="/",
            samesite="strict",
            httponly=True,
            secure=settings.secure_cookies,
        )

    def has_shared_access(request: Request) -> bool:
        if not guests_password:
            return True
        cookie = request.cookies.get(AUTH_COOKIE_KEY)
        return cookie is not None and secrets.compare_digest(cookie, shared_cookie_value(guests_password))

    def require_guest(
        request: Request,
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> str:
        try:
            guest = decode_guest_token(request.cookies.get(GUEST_COOKIE_KEY), session_secret)
            if not manager.has_guest(guest):
                raise Unauthenticated(f"Guest '{guest}' is no longer registered.")
        except Unauthenticated as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return guest

    def require_admin(credentials: HTTPBasicCredentials = Depends(basic_auth)) -> str:
        admin_password = settings.admin_password.get_secret_value()
        username_ok = secrets.compare_digest(
            credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
        )
        password_ok = bool(admin_password) and secrets.compare_digest(
            credentials.password.encode("utf-8"), admin_password.encode("utf-8")
        )
        if not (username_ok and password_ok):
            logger.warning("Rejected admin credentials for user %r", credentials.username)
            raise HTTPException(
                status_code=401,
                detail="Invalid admin credentials.",
                headers={"WWW-Authenticate": "Basic"},
            )
        return credentials.username

    # --- Invitation ---

    @app.get("/", response_class=HTMLResponse)
    def serve_invitation(request: Request, error: str | None = None) -> HTMLResponse:
        if not has_shared_access(request):
            return HTMLResponse(
                login_page(request.url.path, with_error=error == "1"),
                status_code=401,
                headers={"Cache-Control": "no-cache"},
            )
        return HTMLResponse(invitation_html)

    @app.get("/login", response_class=HTMLResponse)
    def show_login(redirect: str | None = None, error: str | None = None) -> HTMLResponse:
        target = _safe_redirect(redirect, DEFAULT_LOGIN_REDIRECT)
        return HTMLResponse(login_page(target, with_error=error == "1"), headers={"Cache-Control": "no-cache"})

    @app.post("/login")
    def submit_login(
        password: str = Form(""),
        redirect: str = Form(DEFAULT_LOGIN_REDIRECT),
    ) -> RedirectResponse:
        target = _safe_redirect(redirect, DEFAULT_LOGIN_REDIRECT)
        if not secrets.compare_digest(shared_cookie_value(password), shared_cookie_value(guests_password)):
            logger.info("Rejected shared password login")
            return RedirectResponse(f"{target}?error=1", status_code=302, headers={"Cache-Control": "no-cache"})
        response = RedirectResponse(target, status_code=302, headers={"Cache-Control": "no-cache"})
        set_cookie(response, AUTH_COOKIE_KEY, shared_cookie_value(guests_password))
        return response

    # --- Guest sessions ---

    @app.get("/guest-login", response_class=HTMLResponse)
    def show_guest_login(redirect: str | None = None, error: str | None = None) -> HTMLResponse:
        target = _safe_redirect(redirect, DEFAULT_GUEST_REDIRECT)
        return HTMLResponse(
            guest_login_page(target, with_error=error == "1"),
            headers={"Cache-Control": "no-cache"},
        )

    @app.post("/guest-login")
    def submit_guest_login(
        name: str = Form(""),
        password: str = Form(""),
        redirect: str = Form(DEFAULT_GUEST_REDIRECT),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> RedirectResponse:
        target = _safe_redirect(redirect, DEFAULT_GUEST_REDIRECT)
        guest = name.strip()
        if not guest or not password or not manager.verify_guest(guest, password):
            logger.info("Rejected guest login for %r", guest)
            return RedirectResponse(
                f"/guest-login?redirect={quote(target, safe='')}&error=1",
                status_code=302,
                headers={"Cache-Control": "no-cache"},
            )
        response = RedirectResponse(target, status_code=302, headers={"Cache-Control": "no-cache"})
        token = create_guest_token(guest, session_secret, ttl_seconds=settings.session_max_age_seconds)
        set_cookie(response, GUEST_COOKIE_KEY, token)
        logger.info("Guest %s logged in", guest)
        return response

    @app.post("/guest-logout", status_code=204)
    def guest_logout() -> Response:
        response = Response(status_code=204)
        response.delete_cookie(GUEST_COOKIE_KEY, path="/")
        return response

    @app.get("/icebreaker", response_class=HTMLResponse)
    def serve_icebreaker(request: Request) -> Response:
        try:
            guest = decode_guest_token(request.cookies.get(GUEST_COOKIE_KEY), session_secret)
        except Unauthenticated:
            return RedirectResponse(f"/guest-login?redirect={quote('/icebreaker', safe='')}", status_code=302)
        logger.debug("Serving icebreaker page to %s", guest)
        return HTMLResponse(ICEBREAKER_PAGE_HTML)

    # --- Icebreaker API ---

    @app.get("/api/icebreaker/identity")
    def get_identity(guest: str = Depends(require_guest)) -> dict[str, object]:
        return {"name": guest}

    @app.get("/api/icebreaker/assignment")
    def get_assignment(
        guest: str = Depends(require_guest),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            result = manager.get_assignment(guest)
        except (NoPeersAvailable, NoQuestionsAvailable) as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ConcurrentUpdate as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _assignment_payload(result)

    @app.post("/api/icebreaker/answer")
    def submit_answer(
        payload: AnswerPayload,
        guest: str = Depends(require_guest),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            result = manager.submit_answer(guest, payload.answer)
        except NoActiveAssignment as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ConcurrentUpdate as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _assignment_payload(result)

    @app.get("/api/icebreaker/leaderboard")
    def get_leaderboard(
        guest: str = Depends(require_guest),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        return [row.to_payload() for row in manager.get_leaderboard()]

    @app.get("/api/icebreaker/answers/{target}")
    def get_answers_about(
        target: str,
        guest: str = Depends(require_guest),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        grouped = manager.get_answers_about(target)
        return {
            "guest": target,
            "answers": {
                question_id: [answer.to_payload() for answer in answers]
                for question_id, answers in grouped.items()
            },
        }

    # --- Guest Directory (admin) ---

    @app.get("/api/guests")
    def list_guests(
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return {"guests": manager.list_guests()}

    @app.post("/api/guests", status_code=201)
    def add_guests(
        payload: GuestCreatePayload,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            if payload.guests is not None:
                manager.add_guests([(entry.name, entry.password) for entry in payload.guests])
            elif payload.name is not None and payload.password is not None:
                manager.add_guest(payload.name, payload.password)
            else:
                raise ValueError('Provide either "name" and "password" or "guests".')
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"guests": manager.list_guests()}

    @app.put("/api/guests/{name}")
    def update_guest(
        name: str,
        payload: PasswordPayload,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            guest = manager.update_guest_password(name, payload.password)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Guest '{name}' not found.") from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"name": guest.name}

    @app.delete("/api/guests/{name}", status_code=204)
    def remove_guest(
        name: str,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> Response:
        try:
            manager.remove_guest(name)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Guest '{name}' not found.") from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return Response(status_code=204)

    # --- Question Bank (admin) ---

    @app.get("/api/questions")
    def list_questions(
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return {"questions": [{"id": q.id, "text": q.text} for q in manager.list_questions()]}

    @app.post("/api/questions", status_code=201)
    def add_question(
        payload: QuestionPayload,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            question = manager.add_question(Question(id=payload.id, text=payload.text))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"id": question.id, "text": question.text}

    @app.get("/api/questions/export", response_class=PlainTextResponse)
    def export_questions(
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> str:
        questions = manager.list_questions()
        return serialize_questions(questions) if questions else ""

    @app.post("/api/questions/import", status_code=201)
    def import_questions(
        payload: QuestionImportPayload,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            added = manager.seed_questions(parse_questions_text(payload.text))
        except (QuestionImportError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"added": [question.id for question in added]}

    @app.put("/api/questions/{question_id}")
    def update_question(
        question_id: str,
        payload: QuestionTextPayload,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            question = manager.update_question(Question(id=question_id, text=payload.text))
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Question '{question_id}' not found.") from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"id": question.id, "text": question.text}

    @app.delete("/api/questions/{question_id}", status_code=204)
    def delete_question(
        question_id: str,
        admin: str = Depends(require_admin),
        manager: IcebreakerManager = Depends(manager_dep),
    ) -> Response:
        try:
            manager.delete_question(question_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Question '{question_id}' not found.") from exc
        return Response(status_code=204)

    return app


def _assignment_payload(result: AssignmentResult) -> dict[str, object]:
    payload = result.to_payload()
    if result.current_question_text is not None:
        payload["currentQuestionHtml"] = renderer.render_question(result.current_question_text)
    return payload


def run_api_server(manager: IcebreakerManager, settings: Settings | None = None) -> None:
    """Serve the FastAPI application with uvicorn until interrupted."""
    settings = settings or get_settings()
    app = create_api_app(manager, settings)
    config = uvicorn.Config(app=app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    server.run()
