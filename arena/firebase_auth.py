"""
Firebase Authentication
Verifies Firebase ID tokens and resolves the caller's user record and role
"""

from typing import Optional

import firebase_admin
from fastapi import Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth, credentials

from arena.config import Config
from arena.exceptions import ForbiddenError, UnauthorizedError
from arena.logger import get_logger
from arena.models import User, UserRole

logger = get_logger(__name__)


def init_firebase(config: Config) -> firebase_admin.App:
    """
    Initialize Firebase Admin SDK once per process.
    Uses the service account from the environment when all three fields are
    set, otherwise application default credentials.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    try:
        if config.has_service_account:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": config.FIREBASE_PROJECT_ID,
                "private_key": config.FIREBASE_PRIVATE_KEY,
                "client_email": config.FIREBASE_CLIENT_EMAIL,
                "token_uri": "https://oauth2.googleapis.com/token",
            })
        else:
            cred = credentials.ApplicationDefault()

        options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
        app = firebase_admin.initialize_app(cred, options)
    except Exception as e:
        raise RuntimeError(f"Firebase initialization failed: {e}") from e

    logger.info("Firebase Admin SDK initialized")
    return app


class FirebaseIdentityVerifier:
    """Bearer ID token -> stable subject uid"""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self.app = app

    async def verify(self, token: str) -> str:
        try:
            # verify_id_token may fetch signing certs over the network
            decoded = await run_in_threadpool(auth.verify_id_token, token, self.app)
        except (auth.InvalidIdTokenError, ValueError):
            raise UnauthorizedError("Invalid authentication token")

        uid = decoded.get("uid")
        if not uid:
            raise UnauthorizedError("Invalid authentication token")
        return uid


# ==================== DEPENDENCY FUNCTIONS ====================

def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Authentication required")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise UnauthorizedError("Authentication required")
    return token


async def get_current_uid(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """Verified subject id; the user may not have registered a profile yet"""
    token = _bearer_token(authorization)
    return await request.app.state.identity_verifier.verify(token)


async def get_current_user(request: Request, uid: str = Depends(get_current_uid)) -> User:
    user = await request.app.state.user_repository.find_by_id(uid)
    if not user:
        raise ForbiddenError("Profile not found. Please complete registration first.")
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory for role-gated routes

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {UserRole(role).value for role in roles}

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise ForbiddenError("Forbidden - Insufficient permissions")
        return user

    return dependency


require_reviewer = require_roles(UserRole.MAINTAINER, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)


def is_reviewer(user: User) -> bool:
    return user.role in (UserRole.MAINTAINER.value, UserRole.ADMIN.value)
