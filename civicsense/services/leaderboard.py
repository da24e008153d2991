"""Points ledger / leaderboard aggregation.

There is no stored ledger: totals are derived from the current report
collection on every read, so removals (deletion, retention sweep) can never
leave a stale balance behind.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from civicsense.config import DEFAULT_CONTRIBUTOR_NAME, LEADERBOARD_SETTINGS
from civicsense.models.schemas.reports import Report


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    points: int
    report_count: int


def contributor_key(name: Optional[str]) -> str:
    """Grouping key. Blank names coalesce to the placeholder; nothing else is normalized."""
    if name is None or not name.strip():
        return DEFAULT_CONTRIBUTOR_NAME
    return name


def aggregate(reports: Iterable[Report]) -> list[LeaderboardEntry]:
    """One entry per distinct contributor, in first-appearance order."""
    totals: dict[str, tuple[int, int]] = {}
    for report in reports:
        key = contributor_key(report.name)
        points, count = totals.get(key, (0, 0))
        totals[key] = (points + (report.points_awarded or 0), count + 1)
    return [
        LeaderboardEntry(name=name, points=points, report_count=count)
        for name, (points, count) in totals.items()
    ]


def rank(entries: Iterable[LeaderboardEntry], limit: int | None = None) -> list[LeaderboardEntry]:
    """Display ordering: points descending (ties by name), truncated to top-N."""
    top_n = int(limit if limit is not None else LEADERBOARD_SETTINGS["top_n"])
    ordered = sorted(entries, key=lambda e: (-e.points, e.name))
    return ordered[:max(top_n, 0)]


__all__ = ["LeaderboardEntry", "contributor_key", "aggregate", "rank"]
