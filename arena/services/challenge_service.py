from datetime import datetime, timedelta
from typing import Callable, List, Optional

from arena import date_helpers
from arena.date_helpers import utcnow
from arena.exceptions import (
    ChallengeExpired, ChallengeInactive, ChallengeNotFound, ChallengeNotStarted,
    ValidationError
)
from arena.logger import get_logger
from arena.models import (
    Challenge, ChallengeCreate, ChallengeDifficulty, ChallengeFilters,
    ChallengeUpdate, TimeRemaining
)
from arena.repositories.challenge_repository import ChallengeRepository

logger = get_logger(__name__)

DIFFICULTY_LABELS = {
    ChallengeDifficulty.EASY.value: "Easy",
    ChallengeDifficulty.MEDIUM.value: "Medium",
    ChallengeDifficulty.HARD.value: "Hard",
    ChallengeDifficulty.EXPERT.value: "Expert",
}


class ChallengeService:
    """Challenge lifecycle plus the submission acceptance window"""

    def __init__(self, challenges: ChallengeRepository, clock: Callable[[], datetime] = utcnow):
        self.challenges = challenges
        self.clock = clock

    # ==================== CRUD ====================

    async def create_challenge(self, data: ChallengeCreate, creator_id: str) -> Challenge:
        challenge = await self.challenges.create({
            **data.model_dump(),
            "created_by": creator_id,
            "created_at": self.clock(),
        })
        logger.info("Challenge %s created by %s (%d points)", challenge.id, creator_id, challenge.points)
        return challenge

    async def get_challenge_by_id(self, challenge_id: str) -> Optional[Challenge]:
        return await self.challenges.find_by_id(challenge_id)

    async def require_challenge(self, challenge_id: str) -> Challenge:
        challenge = await self.challenges.find_by_id(challenge_id)
        if not challenge:
            raise ChallengeNotFound(f"Challenge {challenge_id} not found")
        return challenge

    async def update_challenge(self, challenge_id: str, data: ChallengeUpdate) -> Challenge:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        current = await self.require_challenge(challenge_id)
        start_date = updates.get("start_date", current.start_date)
        end_date = updates.get("end_date", current.end_date)
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        updates["updated_at"] = self.clock()

        if not await self.challenges.update(challenge_id, updates):
            raise ChallengeNotFound(f"Challenge {challenge_id} not found")
        return await self.require_challenge(challenge_id)

    async def toggle_challenge_active(self, challenge_id: str, active: bool) -> Challenge:
        if not await self.challenges.update(challenge_id, {"active": active, "updated_at": self.clock()}):
            raise ChallengeNotFound(f"Challenge {challenge_id} not found")
        logger.info("Challenge %s active=%s", challenge_id, active)
        return await self.require_challenge(challenge_id)

    async def delete_challenge(self, challenge_id: str) -> None:
        if not await self.challenges.delete(challenge_id):
            raise ChallengeNotFound(f"Challenge {challenge_id} not found")
        logger.info("Challenge %s deleted", challenge_id)

    async def extend_challenge_deadline(self, challenge_id: str, days: int) -> Challenge:
        challenge = await self.require_challenge(challenge_id)
        new_end_date = challenge.end_date + timedelta(days=days)

        await self.challenges.update(challenge_id, {
            "end_date": new_end_date,
            "updated_at": self.clock(),
        })
        logger.info("Challenge %s extended by %d day(s)", challenge_id, days)
        return await self.require_challenge(challenge_id)

    # ==================== QUERIES ====================

    async def get_challenges(self, filters: Optional[ChallengeFilters] = None, limit: int = 50) -> List[Challenge]:
        return await self.challenges.find_challenges(filters, limit, self.clock())

    async def get_active_challenges(self, limit: int = 50) -> List[Challenge]:
        return await self.challenges.find_active_challenges(limit, self.clock())

    async def get_upcoming_challenges(self, limit: int = 50) -> List[Challenge]:
        return await self.challenges.find_upcoming_challenges(limit, self.clock())

    async def search_challenges(self, term: str, limit: int = 50) -> List[Challenge]:
        return await self.challenges.search_challenges(term, limit)

    async def get_categories(self) -> List[str]:
        return await self.challenges.get_categories()

    async def get_challenges_by_creator(self, user_id: str, limit: int = 50) -> List[Challenge]:
        return await self.challenges.find_challenges_by_creator(user_id, limit)

    async def get_challenges_by_difficulty(self, difficulty: ChallengeDifficulty, limit: int = 50) -> List[Challenge]:
        return await self.challenges.find_challenges_by_difficulty(difficulty, True, limit)

    # ==================== WINDOW ====================

    def is_active_challenge(self, challenge: Challenge) -> bool:
        """Active flag set and now inside the inclusive window"""
        return challenge.active and date_helpers.is_between(
            self.clock(), challenge.start_date, challenge.end_date
        )

    def get_time_remaining(self, challenge: Challenge) -> Optional[TimeRemaining]:
        """None once the challenge has ended"""
        now = self.clock()
        if challenge.end_date < now:
            return None
        return TimeRemaining(**date_helpers.time_remaining(challenge.end_date, now))

    @staticmethod
    def ensure_accepting_submissions(challenge: Challenge, now: datetime) -> None:
        """
        Gate for new submissions. Both window boundaries are inclusive.

        Raises:
            ChallengeInactive: active flag is off
            ChallengeNotStarted: now < start_date
            ChallengeExpired: now > end_date
        """
        if not challenge.active:
            raise ChallengeInactive(f"Challenge {challenge.id} is not active")
        if now < challenge.start_date:
            raise ChallengeNotStarted(f"Challenge {challenge.id} has not started yet")
        if now > challenge.end_date:
            raise ChallengeExpired(f"Challenge {challenge.id} has ended")

    @staticmethod
    def format_difficulty_for_display(difficulty: ChallengeDifficulty) -> str:
        return DIFFICULTY_LABELS.get(getattr(difficulty, "value", difficulty), "Unknown")
