"""Retention sweeper: drops Resolved reports older than the retention window."""
from __future__ import annotations

from typing import Iterable, Optional

from civicsense.config import RETENTION_SETTINGS
from civicsense.models.db.enums import ReportStatus
from civicsense.models.schemas.reports import Report
from civicsense.utils.time import days_to_ms, now_ms


def cutoff_ms(max_age_days: float, now: int) -> int:
    return now - days_to_ms(max_age_days)


def is_expired(report: Report, cutoff: int) -> bool:
    # Strictly older than the cutoff; a report stamped exactly at it is kept
    return report.status == ReportStatus.RESOLVED and report.timestamp < cutoff


def sweep(
    reports: Iterable[Report],
    max_age_days: Optional[float] = None,
    now: Optional[int] = None,
) -> list[Report]:
    """Return ``reports`` without aged-out Resolved entries, preserving order."""
    days = max_age_days if max_age_days is not None else RETENTION_SETTINGS["max_age_days"]
    cutoff = cutoff_ms(days, now if now is not None else now_ms())
    return [r for r in reports if not is_expired(r, cutoff)]


__all__ = ["cutoff_ms", "is_expired", "sweep"]
