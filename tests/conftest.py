import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Callable
import pytest
from fastapi.testclient import TestClient

# Ensure project root on sys.path so 'civicsense' resolves without installation
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Must be set before civicsense.config is imported
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///./test_civicsense.db"
os.environ["CIVICSENSE_BACKEND_URL"] = ""

from civicsense.main import app  # type: ignore  # noqa: E402
from civicsense.models.db.enums import ReportCategory, ReportStatus, UserRole  # noqa: E402
from civicsense.models.schemas.auth import Session  # noqa: E402
from civicsense.models.schemas.reports import Report  # noqa: E402
from civicsense.services.authority import AuthorityOutcome  # noqa: E402
from civicsense.services.classifier import classify_verdict  # noqa: E402
from civicsense.services.engine import build_engine  # noqa: E402
from civicsense.services.session_store import InMemorySessionStore  # noqa: E402
from civicsense.utils.circuit_breaker import GLOBAL_CIRCUIT_BREAKER  # noqa: E402

FIXED_NOW_MS = 1_760_000_000_000

CITIZEN = Session(role=UserRole.USER, email="jane@example.com", name="Jane", token="tok-citizen")
MUNICIPAL = Session(role=UserRole.MUNICIPAL, email="ops@city.gov", name="Ops", token="tok-municipal")


@pytest.fixture(autouse=True)
def _isolate_breaker():
    """Reset the process-local circuit breaker so failures never spill across tests."""
    GLOBAL_CIRCUIT_BREAKER.reset()
    yield
    GLOBAL_CIRCUIT_BREAKER.reset()


@pytest.fixture(scope="session", autouse=True)
def _cleanup_test_db():
    yield
    try:
        os.remove("test_civicsense.db")
    except OSError:
        pass


def run(coro):
    return asyncio.run(coro)


def make_report(**overrides: Any) -> Report:
    data: dict[str, Any] = {
        "id": "r-1",
        "name": "Jane",
        "description": "Deep pothole on the main road",
        "category": ReportCategory.POTHOLE,
        "status": ReportStatus.IN_REVIEW,
        "points_awarded": 10,
        "timestamp": FIXED_NOW_MS,
    }
    data.update(overrides)
    return Report(**data)


class FakeAuthority:
    """Stands in for RemoteAuthority; outcomes are plain values or callables of the request."""

    def __init__(self):
        self.base_url = "http://authority.test"
        self.calls: list[tuple[str, Any]] = []
        self.create_outcome: AuthorityOutcome | Callable[..., AuthorityOutcome] = AuthorityOutcome(
            success=False, error_code="unreachable", error_message="connection refused"
        )
        self.create_delay: Callable[[dict], float] = lambda payload: 0.0
        self.list_outcome = AuthorityOutcome(success=True, data=[], status_code=200)
        self.update_outcome = AuthorityOutcome(success=True, data={"ok": True}, status_code=200)
        self.delete_outcome = AuthorityOutcome(success=True, data={"ok": True}, status_code=200)
        self.login_outcome = AuthorityOutcome(
            success=False, data={"detail": "Invalid credentials"}, status_code=401, error_code="http_401"
        )
        self.register_outcome = AuthorityOutcome(
            success=False, data={"detail": "Email already registered"}, status_code=400, error_code="http_400"
        )

    @staticmethod
    def _resolve(outcome, *args):
        return outcome(*args) if callable(outcome) else outcome

    async def create_report(self, payload, token):
        self.calls.append(("create", payload))
        await asyncio.sleep(self.create_delay(payload))
        return self._resolve(self.create_outcome, payload)

    async def list_reports(self):
        self.calls.append(("list", None))
        return self.list_outcome

    async def update_status(self, report_id, status, token):
        self.calls.append(("update", (report_id, status, token)))
        return self.update_outcome

    async def delete_report(self, report_id, token):
        self.calls.append(("delete", (report_id, token)))
        return self.delete_outcome

    async def login(self, email, password):
        self.calls.append(("login", email))
        return self.login_outcome

    async def register(self, name, email, password, role):
        self.calls.append(("register", (name, email, role)))
        return self.register_outcome


def echoing_create(report_id: str = "srv-1"):
    """Authority create that scores the way the real service does and echoes the record."""
    def _create(payload: dict) -> AuthorityOutcome:
        verdict = classify_verdict(payload["description"])
        body = dict(payload, id=report_id, status=verdict.status.value, pointsAwarded=verdict.points)
        return AuthorityOutcome(success=True, data=body, status_code=200)
    return _create


@pytest.fixture()
def fake_authority():
    return FakeAuthority()


@pytest.fixture()
def engine_factory():
    def _create(authority=None, store=None, clock=lambda: FIXED_NOW_MS):
        return build_engine(store or InMemorySessionStore(), authority, clock=clock)
    return _create


@pytest.fixture()
def engine(engine_factory):
    """Offline engine installed on the app (the lifespan is bypassed under TestClient)."""
    eng = engine_factory()
    app.state.engine = eng
    return eng


@pytest.fixture()
def client(engine):
    return TestClient(app)
