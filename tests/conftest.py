import base64
import json
import httpx
import pytest
from scim_bridge.client import ScimClient
from scim_bridge.config import ProviderConfig
from scim_bridge.transport import ScimSession


BASE_URL = "https://scim.example.com/v2"
USERS_PATH = "/v2/Users"
ERROR_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:Error"


def scim_error(status: int, detail: str) -> httpx.Response:
    return httpx.Response(status, json={"schemas": [ERROR_SCHEMA], "detail": detail, "status": str(status)})


class FakeScimServer:
    """In-memory SCIM /Users endpoint, served through ``httpx.MockTransport``."""

    def __init__(self, username: str = "admin", password: str = "secret"):
        self.users = {}
        self.requests = []
        self.overrides = {}
        self._next_id = 1
        creds = base64.b64encode(f"{username}:{password}".encode()).decode()
        self.expected_auth = f"Basic {creds}"

    def seed(self, resource: dict) -> dict:
        self.users[resource["id"]] = resource
        return resource

    def override(self, method: str, path: str, status: int, body=None) -> None:
        """Answer ``method path`` with a fixed status and JSON body."""
        self.overrides[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        canned = self.overrides.get((request.method, request.url.path))
        if canned is not None:
            status, body = canned
            return httpx.Response(status, json=body) if body is not None else httpx.Response(status)

        if request.headers.get("Authorization") != self.expected_auth:
            return scim_error(401, "Invalid credentials")

        path = request.url.path
        if path == USERS_PATH and request.method == "POST":
            return self._create(json.loads(request.content))
        if path.startswith(USERS_PATH + "/"):
            user_id = path[len(USERS_PATH) + 1:]
            if request.method == "GET":
                return self._get(user_id)
            if request.method == "PUT":
                return self._replace(user_id, json.loads(request.content))
            if request.method == "DELETE":
                return self._delete(user_id)
        return scim_error(404, f"No route for {request.method} {path}")

    def _create(self, body: dict) -> httpx.Response:
        if any(u["userName"] == body["userName"] for u in self.users.values()):
            return scim_error(409, "User already exists")
        resource = dict(body, id=str(self._next_id))
        self._next_id += 1
        self.users[resource["id"]] = resource
        return httpx.Response(201, json=resource)

    def _get(self, user_id: str) -> httpx.Response:
        if user_id not in self.users:
            return scim_error(404, f"User {user_id} not found")
        return httpx.Response(200, json=self.users[user_id])

    def _replace(self, user_id: str, body: dict) -> httpx.Response:
        if user_id not in self.users:
            return scim_error(404, f"User {user_id} not found")
        self.users[user_id] = dict(body, id=user_id)
        return httpx.Response(200, json=self.users[user_id])

    def _delete(self, user_id: str) -> httpx.Response:
        if self.users.pop(user_id, None) is None:
            return scim_error(404, f"User {user_id} not found")
        return httpx.Response(204)


@pytest.fixture(autouse=True)
def clean_scim_env(monkeypatch):
    for name in ("SCIM_BRIDGE_SCIMURL", "SCIM_BRIDGE_LOGINUSERNAME", "SCIM_BRIDGE_LOGINPASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def component_config():
    return {"scimurl": BASE_URL, "loginusername": "admin", "loginpassword": "secret"}


@pytest.fixture
def provider_config(component_config):
    return ProviderConfig.from_component_config(component_config)


@pytest.fixture
def scim_server():
    return FakeScimServer()


@pytest.fixture
def session(provider_config, scim_server):
    session = ScimSession(provider_config, transport=httpx.MockTransport(scim_server.handler))
    yield session
    session.close()


@pytest.fixture
def client(session):
    return ScimClient(session)
