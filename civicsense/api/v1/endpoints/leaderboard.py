"""
Community leaderboard, derived from the current report collection on every request.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from civicsense.api.deps import get_engine
from civicsense.models.schemas.reports import LeaderboardEntryRead, LeaderboardRead
from civicsense.services.engine import CivicEngine
from civicsense.services.leaderboard import aggregate, rank

router = APIRouter()

@router.get("/", response_model=LeaderboardRead, summary="Top contributors by points")
async def read_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=100),
    engine: CivicEngine = Depends(get_engine),
) -> LeaderboardRead:
    entries = aggregate(engine.workspace.snapshot())
    return LeaderboardRead(
        entries=[
            LeaderboardEntryRead(name=e.name, points=e.points, report_count=e.report_count)
            for e in rank(entries, limit)
        ],
        total_contributors=len(entries),
    )
