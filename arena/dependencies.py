from fastapi import Request

from arena.services.challenge_service import ChallengeService
from arena.services.leaderboard_service import LeaderboardService
from arena.services.submission_service import SubmissionService
from arena.services.user_service import UserService

# Everything below is built once by create_app and parked on app.state


async def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


async def get_challenge_service(request: Request) -> ChallengeService:
    return request.app.state.challenge_service


async def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


async def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.state.leaderboard_service
