"""Submission coordinator: remote authority first, local triage as fallback.

Single public coroutine ``SubmissionCoordinator.submit(draft, session)`` that:
1. Tries the remote branch when an authority is configured and the session
   carries a token. A 2xx acknowledgment whose body validates as a Report is
   accepted verbatim (id, category, status, points); the local classifier is
   not re-run on it.
2. Otherwise synthesizes the report locally: fresh UUID, classifier verdict
   as the status (no "Submitted" placeholder), classifier points, timestamp
   taken at synthesis.
3. Prepends the report to the workspace (flagging local ones so a later
   refresh keeps them) and tells the caller to show the feed. An id the
   workspace already holds is reported back as ``stored=False``.

Exactly one branch yields the report, and both yield the same Report shape,
so nothing downstream can tell which one ran.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from pydantic import ValidationError

from civicsense.models.db.enums import Destination, ReportSource, ReportStatus
from civicsense.models.schemas.auth import Session
from civicsense.models.schemas.reports import Report, ReportDraft
from civicsense.services.authority import RemoteAuthority
from civicsense.services.classifier import classify, classify_category
from civicsense.services.workspace import ReportWorkspace
from civicsense.utils import get_logger, log_business_event, now_ms

logger = get_logger(__name__)


@dataclass(frozen=True)
class RemoteAttempt:
    report: Optional[Report] = None
    unavailable_reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.report is not None


@dataclass(frozen=True)
class SubmissionOutcome:
    report: Report
    source: ReportSource
    next_destination: Destination = Destination.FEED
    fallback_reason: Optional[str] = None
    # False when the workspace already held a report with this id
    stored: bool = True


def _new_id() -> str:
    return str(uuid.uuid4())


class SubmissionCoordinator:
    def __init__(
        self,
        workspace: ReportWorkspace,
        authority: Optional[RemoteAuthority] = None,
        *,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.workspace = workspace
        self.authority = authority
        self.clock = clock
        self.id_factory = id_factory

    def build_remote_payload(self, draft: ReportDraft, session: Session) -> dict[str, Any]:
        payload = draft.model_dump(by_alias=True, mode="json")
        payload.update(
            user_email=session.email,
            category=(draft.category or classify_category(draft.description)).value,
            status=ReportStatus.SUBMITTED.value,
            timestamp=self.clock(),
        )
        return payload

    async def try_remote(self, draft: ReportDraft, session: Optional[Session]) -> RemoteAttempt:
        if self.authority is None:
            return RemoteAttempt(unavailable_reason="no_authority")
        if session is None or not session.token:
            return RemoteAttempt(unavailable_reason="no_credential")

        outcome = await self.authority.create_report(self.build_remote_payload(draft, session), session.token)
        if not outcome.success:
            return RemoteAttempt(unavailable_reason=outcome.error_code or "rejected")
        try:
            return RemoteAttempt(report=Report.model_validate(outcome.data))
        except ValidationError as e:
            logger.warning("Authority acknowledged create with malformed report", error=str(e))
            return RemoteAttempt(unavailable_reason="invalid_payload")

    def synthesize_local(self, draft: ReportDraft) -> Report:
        triage = classify(draft.description)
        return Report(
            id=self.id_factory(),
            name=draft.name,
            description=draft.description,
            category=draft.category or triage.category,
            location=draft.location,
            image_url=draft.image_url,
            status=triage.verdict,
            points_awarded=triage.points,
            timestamp=self.clock(),
        )

    async def submit(self, draft: ReportDraft, session: Optional[Session] = None) -> SubmissionOutcome:
        attempt = await self.try_remote(draft, session)
        if attempt.accepted:
            outcome = SubmissionOutcome(report=attempt.report, source=ReportSource.REMOTE)
        else:
            outcome = SubmissionOutcome(
                report=self.synthesize_local(draft),
                source=ReportSource.LOCAL,
                fallback_reason=attempt.unavailable_reason,
            )

        stored = self.workspace.prepend(outcome.report, local=outcome.source == ReportSource.LOCAL)
        if not stored:
            logger.error(
                "Accepted report not stored: id already in workspace",
                report_id=outcome.report.id,
                source=outcome.source.value,
            )
            outcome = replace(outcome, stored=False)
        log_business_event(
            "report_submitted",
            {
                "report_id": outcome.report.id,
                "source": outcome.source.value,
                "status": outcome.report.status.value,
                "category": outcome.report.category.value,
                "points_awarded": outcome.report.points_awarded,
                "fallback_reason": outcome.fallback_reason,
                "stored": outcome.stored,
            },
            actor_email=session.email if session else None,
        )
        return outcome


__all__ = ["RemoteAttempt", "SubmissionOutcome", "SubmissionCoordinator"]
