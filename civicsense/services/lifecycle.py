"""Report status lifecycle.

    Submitted -> In Review | Validated | Rejected    (automatic, at creation)
    In Review -> Resolved | Rejected                 (management only)
    Validated -> Resolved | Rejected                 (management only)
    Resolved, Rejected                               (terminal)

Transitions never touch ``pointsAwarded``; the points ledger is append-only.
"""
from __future__ import annotations

import enum

from civicsense.models.db.enums import ReportStatus


class Actor(str, enum.Enum):
    SYSTEM = "system"          # creation-time triage, not gated
    MANAGEMENT = "management"  # authenticated municipal action


class InvalidTransitionError(ValueError):
    def __init__(self, current: ReportStatus, target: ReportStatus, actor: Actor):
        self.current = current
        self.target = target
        self.actor = actor
        super().__init__(
            f"Transition {current.value!r} -> {target.value!r} is not allowed for {actor.value} actor"
        )


TERMINAL_STATUSES = frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED})

_TRANSITIONS: dict[Actor, dict[ReportStatus, frozenset[ReportStatus]]] = {
    Actor.SYSTEM: {
        ReportStatus.SUBMITTED: frozenset({
            ReportStatus.IN_REVIEW,
            ReportStatus.VALIDATED,
            ReportStatus.REJECTED,
        }),
    },
    Actor.MANAGEMENT: {
        ReportStatus.IN_REVIEW: frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED}),
        ReportStatus.VALIDATED: frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED}),
    },
}


def is_terminal(status: ReportStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_transitions(current: ReportStatus, actor: Actor = Actor.MANAGEMENT) -> frozenset[ReportStatus]:
    return _TRANSITIONS.get(actor, {}).get(current, frozenset())


def validate_transition(current: ReportStatus, target: ReportStatus, actor: Actor = Actor.MANAGEMENT) -> None:
    """Raise InvalidTransitionError unless ``actor`` may move ``current`` to ``target``."""
    if target not in allowed_transitions(current, actor):
        raise InvalidTransitionError(current, target, actor)


__all__ = [
    "Actor",
    "InvalidTransitionError",
    "TERMINAL_STATUSES",
    "is_terminal",
    "allowed_transitions",
    "validate_transition",
]
