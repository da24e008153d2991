"""Client for the remote reports/auth authority.

Every call resolves to an ``AuthorityOutcome`` instead of raising: transport
errors, timeouts, an open circuit and negative HTTP acknowledgments are all
reported the same way so callers can branch on ``success`` alone.

Endpoints consumed:
    POST   /reports              (Bearer)  -> Report JSON incl. server id
    GET    /reports                        -> list of Report JSON
    PATCH  /reports/{id}         (Bearer)  -> {"ok": true}
    DELETE /reports/{id}         (Bearer)  -> {"ok": true}
    POST   /auth/login                     -> {"token", "user": {...}}
    POST   /auth/register                  -> {"token", "user": {...}}

No retries are attempted here: report creation is not idempotent and a
retried create could award points twice.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from civicsense.config import REMOTE_AUTHORITY_URL, REMOTE_TIMEOUT_SECONDS
from civicsense.utils.circuit_breaker import CircuitBreaker, GLOBAL_CIRCUIT_BREAKER
from civicsense.utils import get_logger

logger = get_logger(__name__)


@dataclass
class AuthorityOutcome:
    success: bool
    data: Any = None
    status_code: int | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def detail(self) -> str | None:
        """Human-readable rejection text supplied by the authority, if any."""
        if isinstance(self.data, dict):
            detail = self.data.get("detail")
            if isinstance(detail, str) and detail:
                return detail
        return None


class RemoteAuthority:
    """Thin aiohttp wrapper around the authority's REST surface."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float | None = None,
        breaker: CircuitBreaker | None = None,
    ):
        self.base_url = base_url.strip().rstrip("/")
        self.timeout_seconds = float(timeout_seconds if timeout_seconds is not None else REMOTE_TIMEOUT_SECONDS)
        self.breaker = breaker or GLOBAL_CIRCUIT_BREAKER

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        payload: Optional[dict] = None,
    ) -> AuthorityOutcome:
        allow, reason = self.breaker.allow_call(self.base_url)
        if not allow:
            logger.warning("Authority call skipped due to circuit breaker", method=method, path=path, reason=reason)
            return AuthorityOutcome(
                success=False,
                error_code=reason,
                error_message=f"Circuit breaker denies call: {reason}",
            )

        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers, json=payload) as resp:
                    text = await resp.text(errors="replace")
                    try:
                        data = json.loads(text) if text else {}
                    except json.JSONDecodeError:
                        data = {"raw": text}
                    if 200 <= resp.status < 300:
                        self.breaker.record_success(self.base_url)
                        return AuthorityOutcome(success=True, data=data, status_code=resp.status)
                    # A 4xx still proves the authority is up; only 5xx counts against it
                    if resp.status >= 500:
                        self.breaker.record_failure(self.base_url)
                    else:
                        self.breaker.record_success(self.base_url)
                    outcome = AuthorityOutcome(
                        success=False,
                        data=data,
                        status_code=resp.status,
                        error_code=f"http_{resp.status}",
                    )
                    outcome.error_message = outcome.detail or text or f"HTTP {resp.status}"
                    logger.warning(
                        "Authority returned negative acknowledgment",
                        method=method,
                        path=path,
                        status_code=resp.status,
                        detail=outcome.detail,
                    )
                    return outcome
        except asyncio.TimeoutError:
            self.breaker.record_failure(self.base_url)
            logger.warning("Authority call timed out", method=method, path=path, timeout_seconds=self.timeout_seconds)
            return AuthorityOutcome(success=False, error_code="timeout", error_message="Authority call timed out")
        except aiohttp.ClientError as e:
            self.breaker.record_failure(self.base_url)
            logger.warning("Authority unreachable", method=method, path=path, error=str(e))
            return AuthorityOutcome(success=False, error_code="unreachable", error_message=str(e))
        except Exception as e:
            self.breaker.record_failure(self.base_url)
            logger.error("Authority request failed", method=method, path=path, error=str(e), exc_info=True)
            return AuthorityOutcome(success=False, error_code="unreachable", error_message=str(e))

    # ------------------------------ Reports ------------------------------ #

    async def create_report(self, payload: dict[str, Any], token: str) -> AuthorityOutcome:
        return await self._request("POST", "/reports", token=token, payload=payload)

    async def list_reports(self) -> AuthorityOutcome:
        return await self._request("GET", "/reports")

    async def update_status(self, report_id: str, status: str, token: str) -> AuthorityOutcome:
        return await self._request("PATCH", f"/reports/{report_id}", token=token, payload={"status": status})

    async def delete_report(self, report_id: str, token: str) -> AuthorityOutcome:
        return await self._request("DELETE", f"/reports/{report_id}", token=token)

    # -------------------------------- Auth ------------------------------- #

    async def login(self, email: str, password: str) -> AuthorityOutcome:
        return await self._request("POST", "/auth/login", payload={"email": email, "password": password})

    async def register(self, name: str, email: str, password: str, role: str) -> AuthorityOutcome:
        return await self._request(
            "POST",
            "/auth/register",
            payload={"name": name, "email": email, "password": password, "role": role},
        )


def build_authority(base_url: str | None = None) -> RemoteAuthority | None:
    """Authority for the configured URL, or None for an offline deployment."""
    url = (base_url if base_url is not None else REMOTE_AUTHORITY_URL).strip()
    if not url:
        return None
    return RemoteAuthority(url)


__all__ = ["AuthorityOutcome", "RemoteAuthority", "build_authority"]
