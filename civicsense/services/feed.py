"""Read-side projections of the report collection for the feed and map views."""
from __future__ import annotations

from typing import Iterable, Optional

from civicsense.models.db.enums import ReportCategory, ReportStatus
from civicsense.models.schemas.reports import MapMarker, Report

MARKER_LABEL_LENGTH = 60


def filter_reports(
    reports: Iterable[Report],
    query: Optional[str] = None,
    status: Optional[ReportStatus] = None,
    category: Optional[ReportCategory] = None,
) -> list[Report]:
    """Free-text match on description or address, plus exact status / category filters."""
    needle = (query or "").strip().lower()
    out: list[Report] = []
    for r in reports:
        if needle and needle not in r.description.lower() and needle not in r.location.address.lower():
            continue
        if status is not None and r.status != status:
            continue
        if category is not None and r.category != category:
            continue
        out.append(r)
    return out


def categories_present(reports: Iterable[Report]) -> list[ReportCategory]:
    seen: dict[ReportCategory, None] = {}
    for r in reports:
        seen.setdefault(r.category, None)
    return list(seen)


def map_markers(reports: Iterable[Report]) -> list[MapMarker]:
    return [
        MapMarker(
            id=r.id,
            lat=r.location.lat,
            lng=r.location.lng,
            label=r.description[:MARKER_LABEL_LENGTH],
        )
        for r in reports
        if r.location.lat is not None and r.location.lng is not None
    ]


__all__ = ["filter_reports", "categories_present", "map_markers"]
