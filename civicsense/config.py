"""Core engine configuration & tunable triage rules.

Everything that may evolve (fraud / high-risk vocabularies, point awards,
category keyword groups, retention window, leaderboard size, remote authority
endpoint and breaker thresholds) is centralized here so it can be adjusted
without touching service logic. Values are plain module constants; tests
monkeypatch the dicts where needed.
"""
from __future__ import annotations

import os
from typing import Final

# ---------------------------- Remote authority ---------------------------- #
# Base URL of the external reports/auth service. Empty => offline deployment,
# every report is triaged locally and management actions use the in-memory
# reducer.
REMOTE_AUTHORITY_URL: str = os.getenv("CIVICSENSE_BACKEND_URL", "").strip().rstrip("/")

# Transport-level timeout for a single authority call (seconds).
REMOTE_TIMEOUT_SECONDS: float = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "10"))

# ------------------------------ Persistence ------------------------------- #
SQLALCHEMY_DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./civicsense.db")

# Fixed application identifier under which the signed-in session is stored.
SESSION_STORE_KEY: Final[str] = os.getenv("SESSION_STORE_KEY", "civicsense_auth")

# ------------------------------- Reports ---------------------------------- #
DEFAULT_CONTRIBUTOR_NAME: Final[str] = "Citizen"

# ------------------------------ Classifier -------------------------------- #
# Terms are matched as lower-cased substrings of the description, the same
# way the remote authority scores, so both paths reach the same verdict.
CLASSIFIER_RULES: dict[str, list[str] | dict[str, int]] = {
    "fraud_terms": ["prank", "lol", "fake", "just testing"],
    "high_risk_terms": ["flood", "bridge", "collapse", "electri", "fire", "gas", "sinkhole"],
    "points": {
        "fraud_penalty": -25,
        "high_risk": 20,
        "standard": 10,
    },
}

# Ordered keyword groups; first matching group wins.
CATEGORY_KEYWORDS: list[tuple[str, list[str]]] = [
    ("Pothole", ["pothole", "road", "asphalt", "hole"]),
    ("Flooding", ["flood", "waterlogging", "inundat"]),
    ("Waste Accumulation", ["waste", "garbage", "trash", "litter", "dump"]),
    ("Streetlight Outage", ["light", "streetlight", "lamp", "bulb"]),
    ("Blocked Drain", ["drain", "sewer", "blocked"]),
]

# ------------------------------- Retention -------------------------------- #
RETENTION_SETTINGS: dict[str, int] = {
    "max_age_days": 7,
}

# ------------------------------ Leaderboard ------------------------------- #
LEADERBOARD_SETTINGS: dict[str, int] = {
    "top_n": 10,
}

# ----------------------------- Circuit Breaker ---------------------------- #
CIRCUIT_BREAKER: dict[str, int | float] = {
    "failure_threshold": 5,          # Consecutive failures before OPEN
    "open_cooldown_seconds": 60,     # Stay OPEN for 1 minute
    "half_open_probe_count": 1,      # Probes allowed in HALF_OPEN
}

# --------------------------------- Service -------------------------------- #
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str | None = os.getenv("LOG_FILE") or None
CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

__all__ = [
    "REMOTE_AUTHORITY_URL",
    "REMOTE_TIMEOUT_SECONDS",
    "SQLALCHEMY_DATABASE_URL",
    "SESSION_STORE_KEY",
    "DEFAULT_CONTRIBUTOR_NAME",
    # Rule groups
    "CLASSIFIER_RULES",
    "CATEGORY_KEYWORDS",
    "RETENTION_SETTINGS",
    "LEADERBOARD_SETTINGS",
    "CIRCUIT_BREAKER",
    # Service
    "LOG_LEVEL",
    "LOG_FILE",
    "CORS_ORIGINS",
]
