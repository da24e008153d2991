"""Central Enum definitions for core domain states.

These replace scattered string literals so the classifier, lifecycle,
schemas and the remote authority wire format agree on one vocabulary.
Values are the exact strings the remote authority exchanges.
"""
from __future__ import annotations
import enum


class ReportStatus(str, enum.Enum):
    SUBMITTED = "Submitted"
    IN_REVIEW = "In Review"
    VALIDATED = "Validated"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class ReportCategory(str, enum.Enum):
    POTHOLE = "Pothole"
    FLOODING = "Flooding"
    WASTE_ACCUMULATION = "Waste Accumulation"
    STREETLIGHT_OUTAGE = "Streetlight Outage"
    ILLEGAL_DUMPING = "Illegal Dumping"
    BLOCKED_DRAIN = "Blocked Drain"
    OTHER = "Other"


class RiskTier(str, enum.Enum):
    HIGH = "HIGH"
    STANDARD = "STANDARD"


class UserRole(str, enum.Enum):
    USER = "user"
    MUNICIPAL = "municipal"


class Destination(str, enum.Enum):
    REPORT = "report"
    FEED = "feed"
    LEADERBOARD = "leaderboard"
    ADMIN = "admin"


class ReportSource(str, enum.Enum):
    REMOTE = "remote"
    LOCAL = "local"


__all__ = [
    "ReportStatus",
    "ReportCategory",
    "RiskTier",
    "UserRole",
    "Destination",
    "ReportSource",
]
