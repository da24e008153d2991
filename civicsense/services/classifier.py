"""Report triage classification logic.

Inputs are the free-text description only; we apply configurable keyword
rules to derive a category, a risk tier, a validity verdict (which becomes
the report's initial status) and a points award.

Category and verdict are separate pure functions: the category is previewed
live while the description is typed, the verdict only when a report is
finalized. ``classify`` combines them for the local submission path.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from civicsense.config import CLASSIFIER_RULES, CATEGORY_KEYWORDS
from civicsense.models.db.enums import ReportCategory, ReportStatus, RiskTier


@dataclass(frozen=True)
class Verdict:
    status: ReportStatus
    points: int


@dataclass(frozen=True)
class ClassificationResult:
    category: ReportCategory
    risk_tier: RiskTier
    verdict: ReportStatus
    points: int


def _normalize(description: str | None) -> str:
    return (description or "").lower()


def _matches_any(text: str, terms: Iterable[str]) -> bool:
    return any(term in text for term in terms)


def _terms(key: str) -> list[str]:
    raw = CLASSIFIER_RULES.get(key, [])
    return list(raw) if isinstance(raw, (list, tuple)) else []


def _points(key: str, default: int) -> int:
    points_cfg = CLASSIFIER_RULES.get("points", {})
    if isinstance(points_cfg, dict):
        return int(points_cfg.get(key, default))
    return default


def is_fraudulent(description: str | None) -> bool:
    return _matches_any(_normalize(description), _terms("fraud_terms"))


def classify_risk_tier(description: str | None) -> RiskTier:
    if _matches_any(_normalize(description), _terms("high_risk_terms")):
        return RiskTier.HIGH
    return RiskTier.STANDARD


def classify_verdict(description: str | None) -> Verdict:
    """Validity verdict + points.

    Fraud signals win over everything, including high-risk terms in the same
    description.
    """
    if is_fraudulent(description):
        return Verdict(ReportStatus.REJECTED, _points("fraud_penalty", -25))
    if classify_risk_tier(description) == RiskTier.HIGH:
        return Verdict(ReportStatus.VALIDATED, _points("high_risk", 20))
    return Verdict(ReportStatus.IN_REVIEW, _points("standard", 10))


def classify_category(description: str | None) -> ReportCategory:
    text = _normalize(description)
    for category, keywords in CATEGORY_KEYWORDS:
        if _matches_any(text, keywords):
            return ReportCategory(category)
    return ReportCategory.OTHER


def classify(description: str | None) -> ClassificationResult:
    """Full triage of a description. Total: unmatched text falls through to defaults."""
    verdict = classify_verdict(description)
    return ClassificationResult(
        category=classify_category(description),
        risk_tier=classify_risk_tier(description),
        verdict=verdict.status,
        points=verdict.points,
    )


__all__ = [
    "Verdict",
    "ClassificationResult",
    "is_fraudulent",
    "classify_risk_tier",
    "classify_verdict",
    "classify_category",
    "classify",
]
