"""Wiring of the engine components that share one working collection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from civicsense.services.access_gate import AccessGate
from civicsense.services.auth import Authenticator
from civicsense.services.authority import RemoteAuthority
from civicsense.services.session_store import SessionStore
from civicsense.services.submission import SubmissionCoordinator
from civicsense.services.workspace import ReportWorkspace
from civicsense.utils import now_ms


@dataclass
class CivicEngine:
    workspace: ReportWorkspace
    gate: AccessGate
    coordinator: SubmissionCoordinator
    authenticator: Authenticator
    authority: Optional[RemoteAuthority] = None


def build_engine(
    session_store: SessionStore,
    authority: Optional[RemoteAuthority] = None,
    *,
    clock: Callable[[], int] = now_ms,
) -> CivicEngine:
    workspace = ReportWorkspace(authority, clock=clock)
    return CivicEngine(
        workspace=workspace,
        gate=AccessGate(session_store),
        coordinator=SubmissionCoordinator(workspace, authority, clock=clock),
        authenticator=Authenticator(authority),
        authority=authority,
    )


__all__ = ["CivicEngine", "build_engine"]
