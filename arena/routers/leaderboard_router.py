from fastapi import APIRouter, Depends, Query

from arena.dependencies import get_leaderboard_service
from arena.models import ChallengeLeaderboardResponse, LeaderboardResponse
from arena.services.leaderboard_service import LeaderboardService

router = APIRouter(tags=["Leaderboards"])

# ==================== ENDPOINTS ====================

@router.get("/overall", response_model=LeaderboardResponse)
async def overall_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """All-time leaderboard by total points"""
    entries = await service.get_overall_leaderboard(limit)
    return LeaderboardResponse(scope="overall", entries=entries, limit=limit)

@router.get("/weekly", response_model=LeaderboardResponse)
async def weekly_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """Points approved since Sunday 00:00 UTC"""
    entries = await service.get_weekly_leaderboard(limit)
    return LeaderboardResponse(scope="weekly", entries=entries, limit=limit)

@router.get("/monthly", response_model=LeaderboardResponse)
async def monthly_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """Points approved since the 1st of the month, 00:00 UTC"""
    entries = await service.get_monthly_leaderboard(limit)
    return LeaderboardResponse(scope="monthly", entries=entries, limit=limit)

@router.get("/challenge/{challenge_id}", response_model=ChallengeLeaderboardResponse)
async def challenge_leaderboard(
    challenge_id: str,
    limit: int = Query(10, ge=1, le=100),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """Earliest approved submissions for one challenge"""
    entries = await service.get_challenge_leaderboard(challenge_id, limit)
    return ChallengeLeaderboardResponse(challenge_id=challenge_id, entries=entries, limit=limit)
