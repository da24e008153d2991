from .persisted_sessions import PersistedSession
from .enums import ReportStatus, ReportCategory, RiskTier, UserRole, Destination, ReportSource

__all__ = [
    "PersistedSession",
    "ReportStatus",
    "ReportCategory",
    "RiskTier",
    "UserRole",
    "Destination",
    "ReportSource",
]
