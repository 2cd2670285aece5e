from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from arena.dependencies import get_user_service
from arena.exceptions import ForbiddenError, UserNotFound, ValidationError
from arena.firebase_auth import get_current_uid, get_current_user, require_admin
from arena.models import (
    PreferencesUpdate, RoleUpdate, User, UserCreate, UserFilters, UserRole,
    UserStats, UserUpdate, to_naive_utc
)
from arena.services.user_service import UserService

router = APIRouter(tags=["Users"])


def _ensure_self_or_admin(caller: User, user_id: str):
    if caller.id != user_id and caller.role != UserRole.ADMIN.value:
        raise ForbiddenError("You can only modify your own profile")

# ==================== STATIC PATHS ====================

@router.get("/leaderboard/top", response_model=List[User])
async def top_users(
    limit: int = Query(10, ge=1, le=100),
    service: UserService = Depends(get_user_service)
):
    return await service.get_top_users(limit)

@router.get("/search", response_model=List[User])
async def search_users(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return await service.search_users(q, limit)

@router.get("/stats", response_model=UserStats)
async def user_stats(
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return await service.get_user_stats()

@router.get("/recent", response_model=List[User])
async def recent_users(
    limit: int = Query(10, ge=1, le=100),
    service: UserService = Depends(get_user_service)
):
    return await service.get_recent_users(limit)

@router.get("/active", response_model=List[User])
async def active_users(
    start_date: datetime,
    end_date: datetime,
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Users with at least one submission between start_date and end_date"""
    start, end = to_naive_utc(start_date), to_naive_utc(end_date)
    if end < start:
        raise ValidationError("end_date must not be before start_date")
    return await service.get_active_users(start, end, limit)

@router.get("/email/{email}", response_model=User)
async def get_user_by_email(
    email: str,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    found = await service.get_user_by_email(email)
    if not found:
        raise UserNotFound(f"No user with email {email}")
    return found

# ==================== COLLECTION ====================

@router.get("/", response_model=List[User])
async def list_users(
    role: Optional[UserRole] = None,
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return await service.get_users(UserFilters(role=role), limit)

@router.post("/", response_model=User, status_code=201)
async def register_user(
    data: UserCreate,
    uid: str = Depends(get_current_uid),
    service: UserService = Depends(get_user_service)
):
    """Create the profile for the authenticated Firebase user"""
    return await service.create_user(uid, data)

# ==================== SINGLE USER ====================

@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    return await service.require_user(user_id)

@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    data: UserUpdate,
    caller: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    _ensure_self_or_admin(caller, user_id)
    return await service.update_user(user_id, data)

@router.put("/{user_id}/role", response_model=User)
async def update_user_role(
    user_id: str,
    data: RoleUpdate,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return await service.update_user_role(user_id, data.role)

@router.put("/{user_id}/preferences", response_model=User)
async def update_preferences(
    user_id: str,
    data: PreferencesUpdate,
    caller: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    _ensure_self_or_admin(caller, user_id)
    return await service.update_user_preferences(user_id, data)
