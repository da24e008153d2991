"""Working collection of reports plus the municipal management actions.

The collection is most-recent-first and lives in memory only. Management
actions against a configured authority commit locally *after* the
authority confirms; a failed call leaves the collection untouched (there is
no optimistic update to roll back). Offline deployments apply the same
actions directly.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from civicsense.models.db.enums import ReportStatus, UserRole
from civicsense.models.schemas.auth import Session
from civicsense.models.schemas.reports import Report
from civicsense.services.access_gate import AccessDeniedError
from civicsense.services.authority import RemoteAuthority
from civicsense.services.lifecycle import Actor, validate_transition
from civicsense.services.retention import sweep
from civicsense.utils import get_logger, log_business_event, now_ms

logger = get_logger(__name__)


class ReportNotFoundError(LookupError):
    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report {report_id} not found")


class ManagementActionError(Exception):
    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def _require_municipal(session: Optional[Session]) -> Session:
    if session is None or session.role != UserRole.MUNICIPAL:
        raise AccessDeniedError(UserRole.MUNICIPAL)
    return session


class ReportWorkspace:
    def __init__(
        self,
        authority: Optional[RemoteAuthority] = None,
        reports: Iterable[Report] = (),
        *,
        clock: Callable[[], int] = now_ms,
    ):
        self.authority = authority
        self.clock = clock
        self._reports: list[Report] = list(reports)
        # Ids synthesized by the local fallback; the authority has never seen them
        self._local_ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._reports)

    def snapshot(self) -> list[Report]:
        return list(self._reports)

    def get(self, report_id: str) -> Optional[Report]:
        return next((r for r in self._reports if r.id == report_id), None)

    def prepend(self, report: Report, *, local: bool = False) -> bool:
        """Add ``report`` at the front. Returns False when its id is already present."""
        if self.get(report.id) is not None:
            # Never let one completion overwrite another report
            logger.warning("Duplicate report id ignored", report_id=report.id)
            return False
        self._reports.insert(0, report)
        if local:
            self._local_ids.add(report.id)
        return True

    def is_local(self, report_id: str) -> bool:
        return report_id in self._local_ids

    def _replace(self, updated: Report) -> None:
        self._reports = [updated if r.id == updated.id else r for r in self._reports]

    def _credential(self, session: Session) -> str:
        if not session.token:
            raise ManagementActionError("A signed-in authority credential is required", "missing_token")
        return session.token

    async def change_status(self, report_id: str, target: ReportStatus, session: Optional[Session]) -> Report:
        actor = _require_municipal(session)
        current = self.get(report_id)
        if current is None:
            raise ReportNotFoundError(report_id)
        validate_transition(current.status, target, Actor.MANAGEMENT)

        if self.authority is not None:
            outcome = await self.authority.update_status(report_id, target.value, self._credential(actor))
            if not outcome.success:
                raise ManagementActionError(
                    outcome.error_message or "Status update rejected", outcome.error_code
                )

        updated = current.model_copy(update={"status": target})
        self._replace(updated)
        log_business_event(
            "report_status_changed",
            {"report_id": report_id, "from_status": current.status.value, "to_status": target.value},
            actor_email=actor.email,
        )
        return updated

    async def remove(self, report_id: str, session: Optional[Session]) -> bool:
        """Delete a report. Unknown ids are a no-op and return False."""
        actor = _require_municipal(session)
        if self.get(report_id) is None:
            logger.info("Remove requested for unknown report; nothing to do", report_id=report_id)
            return False

        if self.authority is not None:
            outcome = await self.authority.delete_report(report_id, self._credential(actor))
            if not outcome.success:
                raise ManagementActionError(outcome.error_message or "Delete rejected", outcome.error_code)

        self._reports = [r for r in self._reports if r.id != report_id]
        self._local_ids.discard(report_id)
        log_business_event("report_removed", {"report_id": report_id}, actor_email=actor.email)
        return True

    def cleanup(self, session: Optional[Session], max_age_days: float | None = None) -> int:
        """Apply the retention sweep to the collection; returns how many reports were dropped."""
        actor = _require_municipal(session)
        before = len(self._reports)
        self._reports = sweep(self._reports, max_age_days, now=self.clock())
        removed = before - len(self._reports)
        log_business_event(
            "retention_sweep",
            {"removed": removed, "remaining": len(self._reports), "max_age_days": max_age_days},
            actor_email=actor.email,
        )
        return removed

    async def refresh(self) -> bool:
        """Replace the collection with the authority's list, keeping local-only reports.

        Keeps the current collection untouched on failure.
        """
        if self.authority is None:
            return False
        outcome = await self.authority.list_reports()
        if not outcome.success or not isinstance(outcome.data, list):
            logger.warning(
                "Report refresh skipped",
                error_code=outcome.error_code or "invalid_payload",
                error=outcome.error_message,
            )
            return False

        fresh: list[Report] = []
        seen: set[str] = set()
        for raw in outcome.data:
            try:
                report = Report.model_validate(raw)
            except ValidationError as e:
                logger.warning("Dropping malformed report from authority", error=str(e))
                continue
            if report.id in seen:
                continue
            seen.add(report.id)
            fresh.append(report)

        # Locally triaged reports stay ahead of the authority's list until it knows them
        kept_local = [r for r in self._reports if r.id in self._local_ids and r.id not in seen]
        self._local_ids = {r.id for r in kept_local}
        self._reports = kept_local + fresh
        logger.info("Reports refreshed from authority", count=len(fresh), kept_local=len(kept_local))
        return True


__all__ = ["ReportNotFoundError", "ManagementActionError", "ReportWorkspace"]
