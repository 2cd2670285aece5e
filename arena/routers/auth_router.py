from fastapi import APIRouter, Depends, Request

from arena.firebase_auth import get_current_user
from arena.models import TokenVerifyRequest, User

router = APIRouter(tags=["Authentication"])


@router.post("/verify-token")
async def verify_token(body: TokenVerifyRequest, request: Request):
    """
    Exchange a Firebase ID token for the caller's uid.
    `registered` is False until POST /users has created the profile.
    """
    uid = await request.app.state.identity_verifier.verify(body.id_token)
    user = await request.app.state.user_repository.find_by_id(uid)
    return {
        "uid": uid,
        "registered": user is not None,
        "user": user.model_dump() if user else None,
    }


@router.get("/profile", response_model=User)
async def get_profile(user: User = Depends(get_current_user)):
    return user
