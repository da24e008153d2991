"""Access gate: which destinations are reachable for the current session.

The gate state is a tagged variant, ``Anonymous`` or ``Authenticated``.
Navigating to a guarded destination without the right role still switches
to it, but also opens the sign-in prompt in the role mode that destination
needs. Unguarded destinations (feed, leaderboard) never prompt.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from civicsense.models.db.enums import Destination, UserRole
from civicsense.models.schemas.auth import GateRead, Session, SignInPrompt
from civicsense.services.session_store import SessionStore
from civicsense.utils import get_logger, log_business_event

logger = get_logger(__name__)


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    session: Session

    @property
    def role(self) -> UserRole:
        return self.session.role


GateState = Union[Anonymous, Authenticated]

GUARDS: dict[Destination, UserRole] = {
    Destination.REPORT: UserRole.USER,
    Destination.ADMIN: UserRole.MUNICIPAL,
}


class AccessDeniedError(PermissionError):
    def __init__(self, required: UserRole):
        self.required = required
        super().__init__(f"{required.value} access required")


@dataclass(frozen=True)
class NavigationResult:
    destination: Destination
    prompt_opened: bool
    prompt_mode: Optional[UserRole] = None


class AccessGate:
    def __init__(self, store: SessionStore, initial_destination: Destination = Destination.REPORT):
        self.store = store
        self.state: GateState = self._restore()
        self.active_destination = initial_destination
        self.prompt = SignInPrompt()

    def _restore(self) -> GateState:
        session = self.store.load()
        if session is None:
            return Anonymous()
        logger.info("Restored persisted session", role=session.role.value, email=session.email)
        return Authenticated(session)

    # ------------------------------ queries ------------------------------ #

    @property
    def session(self) -> Optional[Session]:
        if isinstance(self.state, Authenticated):
            return self.state.session
        return None

    def has_role(self, role: UserRole) -> bool:
        return isinstance(self.state, Authenticated) and self.state.role == role

    def allows(self, destination: Destination) -> bool:
        required = GUARDS.get(destination)
        return required is None or self.has_role(required)

    def require(self, role: UserRole) -> Session:
        """Session of the signed-in actor, or AccessDeniedError when the role does not match."""
        if isinstance(self.state, Authenticated) and self.state.role == role:
            return self.state.session
        raise AccessDeniedError(role)

    # ---------------------------- transitions ---------------------------- #

    def navigate(self, destination: Destination) -> NavigationResult:
        self.active_destination = destination
        if self.allows(destination):
            return NavigationResult(destination=destination, prompt_opened=False)
        mode = GUARDS[destination]
        self.open_prompt(mode)
        return NavigationResult(destination=destination, prompt_opened=True, prompt_mode=mode)

    def open_prompt(self, mode: UserRole = UserRole.USER) -> None:
        self.prompt = SignInPrompt(open=True, mode=mode)

    def close_prompt(self) -> None:
        self.prompt = SignInPrompt(open=False, mode=self.prompt.mode)

    def sign_in(self, session: Session) -> None:
        self.state = Authenticated(session)
        self.store.save(session)
        self.close_prompt()
        log_business_event(
            "session_signed_in",
            {"role": session.role.value, "has_token": session.token is not None},
            actor_email=session.email,
        )

    def sign_out(self) -> None:
        email = self.session.email if self.session else None
        self.state = Anonymous()
        self.store.clear()
        log_business_event("session_signed_out", {}, actor_email=email)

    def snapshot(self) -> GateRead:
        session = self.session
        return GateRead(
            authenticated=session is not None,
            role=session.role if session else None,
            email=session.email if session else None,
            name=session.name if session else None,
            active_destination=self.active_destination,
            prompt=self.prompt,
        )


__all__ = [
    "Anonymous",
    "Authenticated",
    "GateState",
    "GUARDS",
    "AccessDeniedError",
    "NavigationResult",
    "AccessGate",
]
