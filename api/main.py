"""FastAPI app: problem log, stats, heatmap, review queue, problem import and notes for CodeTrac."""
from contextlib import asynccontextmanager

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from analytics.heatmap import generate_heatmap
from analytics.review import build_review_queue
from analytics.stats import compute_stats
from api.auth import AuthClient
from api.deps import get_auth_client, get_note_store, get_problem_store, get_user_id
from config import settings
from db.client import Storage
from db.dal import ProblemStore
from db.notes import NoteStore
from integrations.importer import fetch_problem_details
from utils.dates import now_iso
from utils.errors import CodeTracError, UnsupportedPlatform, UpstreamError, ValidationError
from utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


def ok(data) -> dict:
    return {"success": True, "data": data}


router = APIRouter()


# --- Health and auth (no token needed). ---
@router.get("/health")
def api_health(request: Request):
    storage: Storage | None = getattr(request.app.state, "storage", None)
    return ok({
        "status": "ok",
        "timestamp": now_iso(),
        "storage": "ready" if storage is not None and storage.ready else "not-ready",
    })


@router.post("/auth/signup")
def api_signup(payload: dict = Body(default=None), auth: AuthClient = Depends(get_auth_client)):
    payload = payload or {}
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = auth.create_user(email, password, (payload.get("name") or "").strip() or None)
    logger.info("User %s signed up", user.get("id"))
    return ok({"user": user, "message": "User created successfully"})


# --- Problems ---
@router.get("/problems")
def api_list_problems(user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    return ok(store.list(user_id))


@router.post("/problems")
def api_create_problem(
    payload: dict = Body(default=None),
    user_id: str = Depends(get_user_id),
    store: ProblemStore = Depends(get_problem_store),
):
    return ok(store.create(user_id, payload))


@router.get("/problems/{problem_id}")
def api_get_problem(problem_id: str, user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    return ok(store.get(user_id, problem_id))


@router.put("/problems/{problem_id}")
def api_update_problem(
    problem_id: str,
    payload: dict = Body(default=None),
    user_id: str = Depends(get_user_id),
    store: ProblemStore = Depends(get_problem_store),
):
    return ok(store.update(user_id, problem_id, payload if payload is not None else {}))


@router.delete("/problems/{problem_id}")
def api_delete_problem(problem_id: str, user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    store.delete(user_id, problem_id)
    return ok({"message": "Problem deleted successfully"})


@router.post("/fetch-problem")
def api_fetch_problem(payload: dict = Body(default=None), user_id: str = Depends(get_user_id)):
    url = (payload or {}).get("url")
    try:
        return ok(fetch_problem_details(url))
    except (ValidationError, UnsupportedPlatform):
        raise
    except CodeTracError as e:
        raise UpstreamError(f"Failed to fetch problem details: {e.message}") from e


# --- Dashboard ---
@router.get("/stats")
def api_stats(user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    return ok(compute_stats(store.list(user_id)))


@router.get("/heatmap")
def api_heatmap(user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    return ok(generate_heatmap(store.list(user_id)))


# --- Review queue ---
@router.get("/review")
def api_review_queue(
    filter_by: str = Query(default="all", alias="filter"),
    sort: str = "priority",
    user_id: str = Depends(get_user_id),
    store: ProblemStore = Depends(get_problem_store),
):
    return ok(build_review_queue(store.list(user_id), filter_by=filter_by, sort_by=sort))


@router.post("/problems/{problem_id}/review")
def api_mark_reviewed(problem_id: str, user_id: str = Depends(get_user_id), store: ProblemStore = Depends(get_problem_store)):
    return ok(store.mark_reviewed(user_id, problem_id))


# --- Notes (knowledge base) ---
@router.get("/notes")
def api_list_notes(
    search: str | None = None,
    note_type: str | None = Query(default=None, alias="type"),
    category: str | None = None,
    status: str | None = None,
    sort: str = "updated",
    user_id: str = Depends(get_user_id),
    store: NoteStore = Depends(get_note_store),
):
    return ok(store.list(user_id, search=search, note_type=note_type, category=category, status=status, sort_by=sort))


@router.post("/notes")
def api_create_note(
    payload: dict = Body(default=None),
    user_id: str = Depends(get_user_id),
    store: NoteStore = Depends(get_note_store),
):
    return ok(store.create(user_id, payload or {}))


@router.get("/notes/stats")
def api_note_stats(user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    return ok(store.stats(user_id))


@router.get("/notes/categories")
def api_note_categories(user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    return ok(store.categories(user_id))


@router.get("/notes/{note_id}")
def api_get_note(note_id: str, user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    return ok(store.get(user_id, note_id))


@router.put("/notes/{note_id}")
def api_update_note(
    note_id: str,
    payload: dict = Body(default=None),
    user_id: str = Depends(get_user_id),
    store: NoteStore = Depends(get_note_store),
):
    return ok(store.update(user_id, note_id, payload if payload is not None else {}))


@router.post("/notes/{note_id}/view")
def api_view_note(note_id: str, user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    return ok(store.view(user_id, note_id))


@router.post("/notes/{note_id}/toggle/{flag}")
def api_toggle_note(note_id: str, flag: str, user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    return ok(store.toggle(user_id, note_id, flag))


@router.delete("/notes/{note_id}")
def api_delete_note(note_id: str, user_id: str = Depends(get_user_id), store: NoteStore = Depends(get_note_store)):
    store.delete(user_id, note_id)
    return ok({"message": "Note deleted successfully"})


# --- Error envelope ---
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def handle_app_error(request: Request, exc: CodeTracError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "Invalid request body")


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, "Internal server error")


def create_app(storage: Storage | None = None, auth: AuthClient | None = None) -> FastAPI:
    """Build the app. The storage service is connected in the lifespan unless already connected."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not app.state.storage.ready:
            try:
                app.state.storage.connect()
            except Exception as e:
                logger.warning("Storage connect failed (MongoDB may be down): %s", e)
        yield
        app.state.storage.close()

    app = FastAPI(title="CodeTrac", lifespan=lifespan)
    app.state.storage = storage or Storage()
    app.state.auth = auth or AuthClient()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_headers=["Content-Type", "Authorization"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        expose_headers=["Content-Length"],
        max_age=600,
    )
    app.add_exception_handler(CodeTracError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected)
    app.include_router(router, prefix=settings.API_PREFIX)
    return app


app = create_app()
