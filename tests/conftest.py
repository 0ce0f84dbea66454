import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from trainingdesk.auth import create_access_token
from trainingdesk.main import create_app
from trainingdesk.services.identity import IdentityGateway
from trainingdesk.services.notify import DiscordNotifier

UPSTREAM_URL = "https://airline.test/api"
WEBHOOK_URL = "https://discord.test/api/webhooks/1/abc"
ADMIN_KEY = "svc-admin-key"
PILOT_KEY = "pilot-key-123"


class FakeAirline:
    """In-process stand-in for the airline API, served through httpx.MockTransport."""

    def __init__(self):
        self.reachable = True
        self.failing = set()          # keys answered with a 500
        self.profiles = {
            PILOT_KEY: {
                "id": 42,
                "pilot_id": "JAL042",
                "name": "Test Pilot",
                "email": "pilot@example.com",
                "rank": {"name": "Captain"},
                "home_airport": "RJTT",
                "curr_airport": "RJAA",
                "airline": {"country": "JP"},
            }
        }
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if not self.reachable:
            raise httpx.ConnectError("connection refused", request=request)

        key = request.headers.get("x-api-key")
        if key is None:
            key = request.headers.get("authorization", "").removeprefix("Bearer ")
        if key in self.failing:
            return httpx.Response(500, json={"message": "boom"})
        if key in self.profiles:
            return httpx.Response(200, json={"data": self.profiles[key]})
        return httpx.Response(401, json={"message": "Unauthenticated."})


class FakeWebhook:
    def __init__(self):
        self.status_code = 204
        self.posts = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.posts.append(request)
        return httpx.Response(self.status_code)


@pytest.fixture
def mock_db():
    # in-memory MongoDB replacement
    return mongomock.MongoClient()["test_db"]


@pytest.fixture
def airline():
    return FakeAirline()


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def client(mock_db, airline, webhook):
    identity = IdentityGateway(
        base_url=UPSTREAM_URL,
        admin_key=ADMIN_KEY,
        client=httpx.Client(transport=httpx.MockTransport(airline)),
    )
    notifier = DiscordNotifier(WEBHOOK_URL, client=httpx.Client(transport=httpx.MockTransport(webhook)))
    return TestClient(create_app(db=mock_db, identity=identity, notifier=notifier))


@pytest.fixture
def admin_headers():
    token = create_access_token({"id": "admin", "name": "Administrator", "role": "Admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def trainer_headers():
    token = create_access_token({"id": "42", "name": "Test Pilot", "role": "Trainer"})
    return {"Authorization": f"Bearer {token}"}
