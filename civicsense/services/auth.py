"""Credential handling: turns sign-in / registration input into a Session.

With a remote authority configured the authority decides; its ``detail``
text is surfaced on rejection. Without one, a local stub accepts any
non-empty credentials in the requested role mode and issues no token.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from civicsense.models.schemas.auth import RegisterRequest, Session, SignInRequest
from civicsense.services.authority import AuthorityOutcome, RemoteAuthority
from civicsense.utils import get_logger

logger = get_logger(__name__)

GENERIC_AUTH_FAILURE = "Authentication failed"


class AuthenticationError(Exception):
    def __init__(self, message: str = GENERIC_AUTH_FAILURE):
        self.message = message
        super().__init__(message)


def _session_from_payload(data: Any) -> Session:
    """Build a Session from ``{"token": ..., "user": {"role", "email", "name"}}``."""
    if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
        raise AuthenticationError("Authority returned an unexpected session payload")
    user = data["user"]
    try:
        return Session(
            role=user.get("role"),
            email=user.get("email"),
            name=user.get("name"),
            token=data.get("token"),
        )
    except ValidationError as e:
        logger.warning("Rejecting malformed session payload", error=str(e))
        raise AuthenticationError("Authority returned an unexpected session payload") from e


def _raise_for(outcome: AuthorityOutcome) -> None:
    if not outcome.success:
        raise AuthenticationError(outcome.detail or GENERIC_AUTH_FAILURE)


class Authenticator:
    def __init__(self, authority: Optional[RemoteAuthority] = None):
        self.authority = authority

    async def sign_in(self, credentials: SignInRequest) -> Session:
        if self.authority is None:
            return Session(role=credentials.role, email=credentials.email)
        outcome = await self.authority.login(credentials.email, credentials.password)
        _raise_for(outcome)
        return _session_from_payload(outcome.data)

    async def register(self, registration: RegisterRequest) -> Session:
        if self.authority is None:
            return Session(role=registration.role, email=registration.email, name=registration.name)
        outcome = await self.authority.register(
            registration.name,
            registration.email,
            registration.password,
            registration.role.value,
        )
        _raise_for(outcome)
        return _session_from_payload(outcome.data)


__all__ = ["AuthenticationError", "Authenticator", "GENERIC_AUTH_FAILURE"]
