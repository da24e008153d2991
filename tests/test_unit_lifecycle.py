import pytest
from civicsense.models.db.enums import ReportStatus
from civicsense.services.lifecycle import (
    Actor, InvalidTransitionError, allowed_transitions, is_terminal, validate_transition,
)


@pytest.mark.parametrize("target", [ReportStatus.IN_REVIEW, ReportStatus.VALIDATED, ReportStatus.REJECTED])
def test_system_triage_leaves_submitted(target):
    validate_transition(ReportStatus.SUBMITTED, target, Actor.SYSTEM)


@pytest.mark.parametrize("current", [ReportStatus.IN_REVIEW, ReportStatus.VALIDATED])
@pytest.mark.parametrize("target", [ReportStatus.RESOLVED, ReportStatus.REJECTED])
def test_management_closes_open_reports(current, target):
    validate_transition(current, target, Actor.MANAGEMENT)


@pytest.mark.parametrize("current", [ReportStatus.RESOLVED, ReportStatus.REJECTED])
def test_terminal_statuses_have_no_exits(current):
    assert is_terminal(current)
    for actor in Actor:
        assert allowed_transitions(current, actor) == frozenset()
    with pytest.raises(InvalidTransitionError):
        validate_transition(current, ReportStatus.IN_REVIEW)


def test_management_cannot_act_on_submitted_or_promote_to_validated():
    with pytest.raises(InvalidTransitionError):
        validate_transition(ReportStatus.SUBMITTED, ReportStatus.RESOLVED)
    with pytest.raises(InvalidTransitionError):
        validate_transition(ReportStatus.IN_REVIEW, ReportStatus.VALIDATED)


def test_system_cannot_resolve():
    with pytest.raises(InvalidTransitionError):
        validate_transition(ReportStatus.IN_REVIEW, ReportStatus.RESOLVED, Actor.SYSTEM)


def test_same_status_is_not_a_transition():
    with pytest.raises(InvalidTransitionError) as exc:
        validate_transition(ReportStatus.IN_REVIEW, ReportStatus.IN_REVIEW)
    assert exc.value.current == ReportStatus.IN_REVIEW
    assert exc.value.target == ReportStatus.IN_REVIEW
    assert exc.value.actor == Actor.MANAGEMENT
    assert "In Review" in str(exc.value)
