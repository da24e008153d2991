from .base import ResponseBase
from .reports import (
    Location, ReportDraft, Report, StatusUpdate, SubmissionRead,
    MapMarker, CleanupResult, LeaderboardEntryRead, LeaderboardRead,
)
from .auth import Session, SignInRequest, RegisterRequest, SignInPrompt, GateRead

__all__ = [
    # Base
    "ResponseBase",

    # Reports
    "Location",
    "ReportDraft",
    "Report",
    "StatusUpdate",
    "SubmissionRead",
    "MapMarker",
    "CleanupResult",
    "LeaderboardEntryRead",
    "LeaderboardRead",

    # Auth / gate
    "Session",
    "SignInRequest",
    "RegisterRequest",
    "SignInPrompt",
    "GateRead",
]
