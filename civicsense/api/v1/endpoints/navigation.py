"""
Guarded navigation between the report, feed, leaderboard and admin surfaces.
"""
from fastapi import APIRouter, Depends
from civicsense.api.deps import get_engine
from civicsense.models.db.enums import Destination
from civicsense.models.schemas.auth import GateRead
from civicsense.services.engine import CivicEngine

router = APIRouter()

@router.post("/{destination}", response_model=GateRead, summary="Navigate to a destination")
async def navigate(destination: Destination, engine: CivicEngine = Depends(get_engine)) -> GateRead:
    """Always switches the active destination; opens the sign-in prompt when the role does not match."""
    engine.gate.navigate(destination)
    return engine.gate.snapshot()

@router.delete("/prompt", response_model=GateRead, summary="Dismiss the sign-in prompt")
async def close_prompt(engine: CivicEngine = Depends(get_engine)) -> GateRead:
    engine.gate.close_prompt()
    return engine.gate.snapshot()
