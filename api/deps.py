"""FastAPI dependencies for the shared services attached to app.state."""
from fastapi import Depends, Header, Request

from api.auth import AuthClient
from db.client import NOTES, PROBLEMS, Storage
from db.dal import ProblemStore
from db.notes import NoteStore
from utils.errors import AuthError, UpstreamError


def get_storage(request: Request) -> Storage:
    storage: Storage | None = getattr(request.app.state, "storage", None)
    if storage is None or not storage.ready:
        raise UpstreamError("Storage is not ready")
    return storage


def get_problem_store(storage: Storage = Depends(get_storage)) -> ProblemStore:
    return ProblemStore(storage.collection(PROBLEMS))


def get_note_store(storage: Storage = Depends(get_storage)) -> NoteStore:
    return NoteStore(storage.collection(NOTES))


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.auth


def bearer_token(authorization: str | None) -> str:
    parts = (authorization or "").split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthError("No access token provided")
    return parts[1]


def get_current_user(
    authorization: str | None = Header(default=None),
    auth: AuthClient = Depends(get_auth_client),
) -> dict:
    return auth.get_user(bearer_token(authorization))


def get_user_id(user: dict = Depends(get_current_user)) -> str:
    return str(user["id"])
