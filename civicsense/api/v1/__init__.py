"""
API v1 router initialization and setup.
"""
from fastapi import APIRouter
from .endpoints import reports, session, navigation, leaderboard

api_router = APIRouter()

api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)

api_router.include_router(
    session.router,
    prefix="/session",
    tags=["session"]
)

api_router.include_router(
    navigation.router,
    prefix="/navigation",
    tags=["navigation"]
)

api_router.include_router(
    leaderboard.router,
    prefix="/leaderboard",
    tags=["leaderboard"]
)
