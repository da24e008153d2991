from civicsense.models.db.enums import Destination, UserRole
from civicsense.services.access_gate import AccessDeniedError, AccessGate, Anonymous, Authenticated
from civicsense.services.session_store import InMemorySessionStore
from conftest import CITIZEN, MUNICIPAL
import pytest


def test_anonymous_navigation_to_report_opens_user_prompt():
    gate = AccessGate(InMemorySessionStore())
    assert isinstance(gate.state, Anonymous)
    result = gate.navigate(Destination.REPORT)
    assert result.destination == Destination.REPORT
    assert result.prompt_opened is True
    assert result.prompt_mode == UserRole.USER
    assert gate.active_destination == Destination.REPORT
    assert gate.prompt.open and gate.prompt.mode == UserRole.USER


def test_admin_destination_prompts_in_municipal_mode_even_for_citizens():
    gate = AccessGate(InMemorySessionStore())
    gate.sign_in(CITIZEN)
    result = gate.navigate(Destination.ADMIN)
    assert result.prompt_opened and result.prompt_mode == UserRole.MUNICIPAL
    # The destination still switches
    assert gate.active_destination == Destination.ADMIN


@pytest.mark.parametrize("destination", [Destination.FEED, Destination.LEADERBOARD])
def test_unguarded_destinations_never_prompt(destination):
    gate = AccessGate(InMemorySessionStore())
    assert gate.navigate(destination).prompt_opened is False
    assert gate.prompt.open is False


def test_sign_in_closes_prompt_and_persists():
    store = InMemorySessionStore()
    gate = AccessGate(store)
    gate.navigate(Destination.REPORT)
    gate.sign_in(CITIZEN)
    assert isinstance(gate.state, Authenticated)
    assert gate.prompt.open is False
    assert store.load() == CITIZEN
    assert gate.navigate(Destination.REPORT).prompt_opened is False
    assert gate.require(UserRole.USER) == CITIZEN
    with pytest.raises(AccessDeniedError) as exc:
        gate.require(UserRole.MUNICIPAL)
    assert exc.value.required == UserRole.MUNICIPAL


def test_session_restored_on_construction():
    store = InMemorySessionStore()
    store.save(MUNICIPAL)
    gate = AccessGate(store)
    assert gate.session == MUNICIPAL
    assert gate.allows(Destination.ADMIN)
    assert not gate.allows(Destination.REPORT)


def test_corrupt_persisted_session_starts_anonymous():
    gate = AccessGate(InMemorySessionStore(raw='{"role": "overlord", "email": 5'))
    assert isinstance(gate.state, Anonymous)
    snap = gate.snapshot()
    assert snap.authenticated is False and snap.role is None


def test_sign_out_clears_store():
    store = InMemorySessionStore()
    gate = AccessGate(store)
    gate.sign_in(MUNICIPAL)
    gate.sign_out()
    assert gate.session is None
    assert store.load() is None
    assert gate.navigate(Destination.ADMIN).prompt_opened is True
