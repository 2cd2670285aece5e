from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from arena.dependencies import get_challenge_service
from arena.firebase_auth import require_reviewer
from arena.models import (
    Challenge, ChallengeCreate, ChallengeDifficulty, ChallengeExtend,
    ChallengeFilters, ChallengeToggle, ChallengeUpdate, TimeRemaining, User
)
from arena.services.challenge_service import ChallengeService

router = APIRouter(tags=["Challenges"])

# ==================== STATIC PATHS ====================

@router.get("/active", response_model=List[Challenge])
async def active_challenges(
    limit: int = Query(50, ge=1, le=200),
    service: ChallengeService = Depends(get_challenge_service)
):
    """Active flag set and currently inside the submission window"""
    return await service.get_active_challenges(limit)

@router.get("/upcoming", response_model=List[Challenge])
async def upcoming_challenges(
    limit: int = Query(50, ge=1, le=200),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.get_upcoming_challenges(limit)

@router.get("/categories", response_model=List[str])
async def challenge_categories(service: ChallengeService = Depends(get_challenge_service)):
    return await service.get_categories()

@router.get("/recent", response_model=List[Challenge])
async def recent_challenges(service: ChallengeService = Depends(get_challenge_service)):
    return await service.get_challenges(ChallengeFilters(), 10)

@router.get("/top", response_model=List[Challenge])
async def top_challenges(service: ChallengeService = Depends(get_challenge_service)):
    """Same ordering as /recent until challenges carry a popularity signal"""
    return await service.get_challenges(ChallengeFilters(), 10)

@router.get("/search", response_model=List[Challenge])
async def search_challenges(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.search_challenges(q, limit)

# ==================== COLLECTION ====================

@router.get("/", response_model=List[Challenge])
async def list_challenges(
    category: Optional[str] = None,
    difficulty: Optional[ChallengeDifficulty] = None,
    active_only: bool = False,
    upcoming: bool = False,
    limit: int = Query(50, ge=1, le=200),
    service: ChallengeService = Depends(get_challenge_service)
):
    filters = ChallengeFilters(
        category=category,
        difficulty=difficulty,
        active_only=active_only,
        upcoming=upcoming,
    )
    return await service.get_challenges(filters, limit)

@router.post("/", response_model=Challenge, status_code=201)
async def create_challenge(
    data: ChallengeCreate,
    user: User = Depends(require_reviewer),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.create_challenge(data, user.id)

# ==================== SINGLE CHALLENGE ====================

@router.get("/{challenge_id}", response_model=Challenge)
async def get_challenge(
    challenge_id: str,
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.require_challenge(challenge_id)

@router.get("/{challenge_id}/time-remaining", response_model=Optional[TimeRemaining])
async def challenge_time_remaining(
    challenge_id: str,
    service: ChallengeService = Depends(get_challenge_service)
):
    """null once the challenge has ended"""
    challenge = await service.require_challenge(challenge_id)
    return service.get_time_remaining(challenge)

@router.put("/{challenge_id}", response_model=Challenge)
async def update_challenge(
    challenge_id: str,
    data: ChallengeUpdate,
    user: User = Depends(require_reviewer),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.update_challenge(challenge_id, data)

@router.post("/{challenge_id}/toggle", response_model=Challenge)
async def toggle_challenge(
    challenge_id: str,
    data: ChallengeToggle,
    user: User = Depends(require_reviewer),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.toggle_challenge_active(challenge_id, data.active)

@router.post("/{challenge_id}/extend", response_model=Challenge)
async def extend_challenge(
    challenge_id: str,
    data: ChallengeExtend,
    user: User = Depends(require_reviewer),
    service: ChallengeService = Depends(get_challenge_service)
):
    return await service.extend_challenge_deadline(challenge_id, data.days)

@router.delete("/{challenge_id}")
async def delete_challenge(
    challenge_id: str,
    user: User = Depends(require_reviewer),
    service: ChallengeService = Depends(get_challenge_service)
):
    await service.delete_challenge(challenge_id)
    return {"message": "Challenge deleted successfully", "challenge_id": challenge_id}
