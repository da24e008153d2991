import asyncio
from aiohttp import web
from aiohttp import test_utils
from civicsense.models.db.enums import ReportSource, ReportStatus
from civicsense.models.schemas.reports import ReportDraft
from civicsense.services.authority import RemoteAuthority, build_authority
from civicsense.services.classifier import classify_verdict
from civicsense.services.submission import SubmissionCoordinator
from civicsense.services.workspace import ReportWorkspace
from civicsense.utils.circuit_breaker import CircuitBreaker
from conftest import CITIZEN, run


def _authority_app() -> web.Application:
    """Minimal stand-in for the reports/auth service."""
    store: list[dict] = []

    async def create_report(request: web.Request):
        if request.headers.get("Authorization") != f"Bearer {CITIZEN.token}":
            return web.json_response({"detail": "Missing token"}, status=401)
        body = await request.json()
        verdict = classify_verdict(body.get("description"))
        record = dict(body, id=f"srv-{len(store) + 1}", status=verdict.status.value, pointsAwarded=verdict.points)
        store.append(record)
        return web.json_response(record)

    async def list_reports(request: web.Request):
        return web.json_response(list(reversed(store)))

    async def patch_report(request: web.Request):
        return web.json_response({"ok": True})

    async def login(request: web.Request):
        body = await request.json()
        if body.get("password") != "secret":
            return web.json_response({"detail": "Invalid credentials"}, status=401)
        return web.json_response({"token": "t-1", "user": {"name": "Jane", "email": body["email"], "role": "user"}})

    async def broken(request: web.Request):
        return web.Response(status=503, text="maintenance")

    async def garbled(request: web.Request):
        return web.Response(body=b"\xff\xfe\xfa", content_type="application/json", charset="utf-8")

    async def slow(request: web.Request):
        await asyncio.sleep(0.5)
        return web.json_response([])

    app = web.Application()
    app.router.add_post("/reports", create_report)
    app.router.add_get("/reports", list_reports)
    app.router.add_patch("/reports/{report_id}", patch_report)
    app.router.add_post("/auth/login", login)
    app.router.add_get("/broken/reports", broken)
    app.router.add_get("/slow/reports", slow)
    app.router.add_post("/garbled/reports", garbled)
    return app


def _base_url(server: test_utils.TestServer) -> str:
    return f"http://{server.host}:{server.port}"


def test_create_and_list_round_trip():
    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server) + "/", breaker=CircuitBreaker())
            created = await authority.create_report({"description": "Major flooding", "timestamp": 1}, CITIZEN.token)
            listed = await authority.list_reports()
            return created, listed

    created, listed = run(scenario())
    assert created.success and created.status_code == 200
    assert created.data["id"] == "srv-1"
    assert created.data["status"] == "Validated"
    assert listed.success and [r["id"] for r in listed.data] == ["srv-1"]


def test_negative_acknowledgment_carries_detail():
    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server), breaker=CircuitBreaker())
            return (
                await authority.create_report({"description": "x"}, "wrong-token"),
                await authority.login("jane@example.com", "nope"),
                await authority.login("jane@example.com", "secret"),
            )

    rejected, bad_login, good_login = run(scenario())
    assert not rejected.success
    assert rejected.error_code == "http_401"
    assert rejected.detail == "Missing token"
    assert bad_login.error_message == "Invalid credentials"
    assert good_login.success and good_login.data["token"] == "t-1"


def test_server_errors_count_against_breaker():
    breaker = CircuitBreaker()

    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server) + "/broken", breaker=breaker)
            return [await authority.list_reports() for _ in range(6)]

    outcomes = run(scenario())
    assert [o.error_code for o in outcomes[:5]] == ["http_503"] * 5
    assert outcomes[0].error_message == "maintenance"
    # Breaker is open: the sixth call never leaves the process
    assert outcomes[5].error_code == "circuit_open"
    assert outcomes[5].status_code is None


def test_timeout_is_reported():
    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server) + "/slow", timeout_seconds=0.1, breaker=CircuitBreaker())
            return await authority.list_reports()

    outcome = run(scenario())
    assert not outcome.success
    assert outcome.error_code == "timeout"


def test_unreachable_authority_submission_falls_back_locally():
    authority = RemoteAuthority("http://127.0.0.1:1", timeout_seconds=2, breaker=CircuitBreaker())
    workspace = ReportWorkspace(authority)
    coordinator = SubmissionCoordinator(workspace, authority)
    outcome = run(coordinator.submit(ReportDraft(description="Major flooding on Main St"), CITIZEN))
    assert outcome.source == ReportSource.LOCAL
    assert outcome.fallback_reason == "unreachable"
    assert outcome.report.status == ReportStatus.VALIDATED
    assert workspace.snapshot() == [outcome.report]


def test_end_to_end_remote_submission_then_refresh():
    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server), breaker=CircuitBreaker())
            workspace = ReportWorkspace(authority)
            coordinator = SubmissionCoordinator(workspace, authority)
            outcome = await coordinator.submit(ReportDraft(description="There is litter near the park"), CITIZEN)
            await workspace.refresh()
            return outcome, workspace.snapshot()

    outcome, reports = run(scenario())
    assert outcome.source == ReportSource.REMOTE
    assert outcome.report.id == "srv-1"
    assert outcome.report.status == ReportStatus.IN_REVIEW
    assert reports == [outcome.report]


def test_build_authority_requires_url():
    assert build_authority("") is None
    assert build_authority("   ") is None
    authority = build_authority("http://authority.test/")
    assert authority is not None and authority.base_url == "http://authority.test"


def test_open_circuit_skips_remote_call_and_submission_still_succeeds():
    breaker = CircuitBreaker()
    authority = RemoteAuthority("http://127.0.0.1:1", breaker=breaker)
    for _ in range(5):
        breaker.record_failure(authority.base_url)
    workspace = ReportWorkspace(authority)
    outcome = run(SubmissionCoordinator(workspace, authority).submit(
        ReportDraft(description="Streetlight flickering"), CITIZEN
    ))
    assert outcome.source == ReportSource.LOCAL
    assert outcome.fallback_reason == "circuit_open"
    assert len(workspace) == 1


def test_undecodable_acknowledgment_falls_back_locally():
    async def scenario():
        async with test_utils.TestServer(_authority_app()) as server:
            authority = RemoteAuthority(_base_url(server) + "/garbled", breaker=CircuitBreaker())
            workspace = ReportWorkspace(authority)
            coordinator = SubmissionCoordinator(workspace, authority)
            outcome = await coordinator.submit(ReportDraft(description="pothole on road"), CITIZEN)
            return outcome, workspace.snapshot()

    outcome, reports = run(scenario())
    assert outcome.source == ReportSource.LOCAL
    assert outcome.fallback_reason == "invalid_payload"
    assert reports == [outcome.report]
