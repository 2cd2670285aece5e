"""
Challenge Arena API
FastAPI app factory: wires the store, repositories, services and identity
verifier once and parks them on app.state for the router dependencies
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from arena.config import Config, load_config
from arena.database import create_indexes, create_mongo_client, get_database
from arena.date_helpers import utcnow
from arena.exceptions import ArenaError
from arena.firebase_auth import FirebaseIdentityVerifier, init_firebase
from arena.logger import get_logger, setup_logging
from arena.repositories.challenge_repository import ChallengeRepository
from arena.repositories.submission_repository import SubmissionRepository
from arena.repositories.user_repository import UserRepository
from arena.routers.auth_router import router as auth_router
from arena.routers.challenge_router import router as challenge_router
from arena.routers.leaderboard_router import router as leaderboard_router
from arena.routers.submission_router import router as submission_router
from arena.routers.user_router import router as user_router
from arena.services.challenge_service import ChallengeService
from arena.services.leaderboard_service import LeaderboardService
from arena.services.submission_service import SubmissionService
from arena.services.user_service import UserService

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    db: Optional[AsyncIOMotorDatabase] = None,
    identity_verifier=None,
    clock=utcnow
) -> FastAPI:
    """
    Build the API.

    `db` and `identity_verifier` default to a Motor database from MONGO_URL
    and a Firebase-backed verifier; tests pass in-memory stand-ins.
    """
    config = config or load_config()
    setup_logging(config.LOG_LEVEL)

    if db is None:
        db = get_database(create_mongo_client(config), config)
    if identity_verifier is None:
        identity_verifier = FirebaseIdentityVerifier(init_firebase(config))

    app = FastAPI(title="Challenge Arena API")

    # ==================== WIRING ====================

    users = UserRepository(db, overfetch_factor=config.SEARCH_OVERFETCH_FACTOR)
    challenges = ChallengeRepository(db, overfetch_factor=config.SEARCH_OVERFETCH_FACTOR)
    submissions = SubmissionRepository(db)

    app.state.config = config
    app.state.db = db
    app.state.identity_verifier = identity_verifier
    app.state.user_repository = users
    app.state.user_service = UserService(users, config.LEADERBOARD_BATCH_SIZE, clock)
    app.state.challenge_service = ChallengeService(challenges, clock)
    app.state.submission_service = SubmissionService(submissions, users, challenges, clock)
    app.state.leaderboard_service = LeaderboardService(
        submissions, users, config.LEADERBOARD_BATCH_SIZE, clock
    )

    @app.on_event("startup")
    async def startup_event():
        await create_indexes(app.state.db)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== ERROR HANDLING ====================

    @app.exception_handler(ArenaError)
    async def arena_error_handler(request: Request, exc: ArenaError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.code},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": "internal_error"},
        )

    # ==================== ROUTER REGISTRATION ====================

    app.include_router(auth_router, prefix="/auth")
    app.include_router(user_router, prefix="/users")
    app.include_router(challenge_router, prefix="/challenges")
    app.include_router(submission_router, prefix="/submissions")
    app.include_router(leaderboard_router, prefix="/leaderboard")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "challenge-arena"}

    return app
