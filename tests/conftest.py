import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from api.auth import AuthClient
from api.deps import get_current_user
from api.main import create_app
from db.client import NOTES, PROBLEMS, Storage
from db.dal import ProblemStore
from db.notes import NoteStore

USER_ID = "user-1"
VALID_TOKEN = "good-token"


def _auth_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth/v1/user":
        if request.headers.get("Authorization") == f"Bearer {VALID_TOKEN}":
            return httpx.Response(200, json={"id": USER_ID, "email": "a@example.com"})
        return httpx.Response(401, json={"msg": "invalid JWT"})
    if request.url.path == "/auth/v1/admin/users":
        if b"taken@example.com" in request.content:
            return httpx.Response(422, json={"msg": "A user with this email address has already been registered"})
        return httpx.Response(200, json={"id": "new-user", "email": "new@example.com"})
    return httpx.Response(404)


@pytest.fixture
def storage():
    s = Storage(db_name="codetrac_test", client=mongomock.MongoClient())
    return s.connect()


@pytest.fixture
def problem_store(storage):
    return ProblemStore(storage.collection(PROBLEMS))


@pytest.fixture
def note_store(storage):
    return NoteStore(storage.collection(NOTES))


@pytest.fixture
def auth_client():
    return AuthClient(
        base_url="http://auth.test",
        anon_key="anon",
        service_role_key="service",
        transport=httpx.MockTransport(_auth_handler),
    )


@pytest.fixture
def app(storage, auth_client):
    return create_app(storage=storage, auth=auth_client)


@pytest.fixture
def client(app):
    """Client whose requests are already authenticated as USER_ID."""
    app.dependency_overrides[get_current_user] = lambda: {"id": USER_ID}
    return TestClient(app)


@pytest.fixture
def anon_client(app):
    return TestClient(app)
