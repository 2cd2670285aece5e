import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from arena.date_helpers import utcnow
from arena.exceptions import (
    AlreadyReviewed, ChallengeNotFound, DuplicateSubmission,
    InvalidReviewStatus, SubmissionNotFound, UserNotFound
)
from arena.logger import get_logger
from arena.models import (
    EnrichedSubmission, Submission, SubmissionCreate, SubmissionFilters,
    SubmissionStats, SubmissionStatus
)
from arena.repositories.challenge_repository import ChallengeRepository
from arena.repositories.submission_repository import SubmissionRepository
from arena.repositories.user_repository import UserRepository
from arena.services.challenge_service import ChallengeService

logger = get_logger(__name__)

REVIEW_OUTCOMES = (SubmissionStatus.APPROVED.value, SubmissionStatus.REJECTED.value)


class SubmissionService:
    """
    Submission intake and review.

    Invariants kept here:
    - at most one submission per (user, challenge)
    - PENDING -> APPROVED | REJECTED happens exactly once
    - points move only on approval, through the user's atomic increment
    """

    def __init__(
        self,
        submissions: SubmissionRepository,
        users: UserRepository,
        challenges: ChallengeRepository,
        clock: Callable[[], datetime] = utcnow
    ):
        self.submissions = submissions
        self.users = users
        self.challenges = challenges
        self.clock = clock

    # ==================== INTAKE ====================

    async def submit_solution(self, user_id: str, data: SubmissionCreate) -> Submission:
        """
        Raises:
            DuplicateSubmission: the user already submitted for this challenge
            ChallengeNotFound / ChallengeInactive / ChallengeNotStarted / ChallengeExpired
        """
        if await self.submissions.has_user_submitted(user_id, data.challenge_id):
            raise DuplicateSubmission(
                f"User {user_id} has already submitted a solution for challenge {data.challenge_id}"
            )

        challenge = await self.challenges.find_by_id(data.challenge_id)
        if not challenge:
            raise ChallengeNotFound(f"Challenge {data.challenge_id} not found")

        now = self.clock()
        ChallengeService.ensure_accepting_submissions(challenge, now)

        # a concurrent duplicate that slipped past the check collides on _id here
        submission = await self.submissions.create_submission({
            **data.model_dump(),
            "user_id": user_id,
            "submitted_at": now,
            "status": SubmissionStatus.PENDING.value,
        })
        logger.info("Submission %s created for challenge %s", submission.id, challenge.id)
        return submission

    # ==================== REVIEW ====================

    async def review_submission(
        self,
        submission_id: str,
        status: SubmissionStatus,
        feedback: str,
        reviewer_id: str
    ) -> Submission:
        """
        One-way PENDING -> APPROVED | REJECTED transition.

        Approval stamps the challenge's point value on the submission and
        adds it to the owner's total_points; rejection stamps 0 and leaves
        the user untouched.
        """
        status = SubmissionStatus(status).value
        if status not in REVIEW_OUTCOMES:
            raise InvalidReviewStatus(f"Cannot review a submission as {status}")

        submission = await self.submissions.find_by_id(submission_id)
        if not submission:
            raise SubmissionNotFound(f"Submission {submission_id} not found")

        if submission.status != SubmissionStatus.PENDING.value:
            raise AlreadyReviewed(f"Submission {submission_id} has already been reviewed")

        challenge = await self.challenges.find_by_id(submission.challenge_id)
        if not challenge:
            raise ChallengeNotFound(f"Associated challenge {submission.challenge_id} not found")

        approved = status == SubmissionStatus.APPROVED.value
        points = challenge.points if approved else 0

        # owner must exist before the stamp; nothing rolls the stamp back
        if approved and not await self.users.exists(submission.user_id):
            raise UserNotFound(f"Submission owner {submission.user_id} not found")

        # the PENDING guard makes the stamp the single winner among concurrent reviews
        stamped = await self.submissions.mark_reviewed(
            submission_id,
            status,
            feedback,
            reviewer_id,
            points,
            self.clock(),
        )
        if not stamped:
            raise AlreadyReviewed(f"Submission {submission_id} has already been reviewed")

        if approved:
            await self.users.increment_total_points(submission.user_id, points)
            logger.info("Awarded %d points to %s for submission %s", points, submission.user_id, submission_id)

        logger.info("Submission %s reviewed as %s by %s", submission_id, status, reviewer_id)
        return await self.submissions.find_by_id(submission_id)

    # ==================== QUERIES ====================

    async def get_submission_by_id(self, submission_id: str) -> Optional[Submission]:
        return await self.submissions.find_by_id(submission_id)

    async def require_submission(self, submission_id: str) -> Submission:
        submission = await self.submissions.find_by_id(submission_id)
        if not submission:
            raise SubmissionNotFound(f"Submission {submission_id} not found")
        return submission

    async def get_submissions(self, filters: Optional[SubmissionFilters] = None, limit: int = 50) -> List[Submission]:
        return await self.submissions.find_submissions(filters, limit)

    async def get_submissions_by_challenge(self, challenge_id: str, limit: int = 50) -> List[Submission]:
        return await self.submissions.find_submissions_by_challenge(challenge_id, limit)

    async def get_submissions_by_user(self, user_id: str, limit: int = 50) -> List[Submission]:
        return await self.submissions.find_submissions_by_user(user_id, limit)

    async def get_pending_submissions(self, limit: int = 50) -> List[Submission]:
        return await self.submissions.find_pending_submissions(limit)

    async def get_reviewed_submissions(self, limit: int = 50) -> List[Submission]:
        return await self.submissions.find_reviewed_submissions(limit)

    async def has_user_submitted(self, user_id: str, challenge_id: str) -> bool:
        return await self.submissions.has_user_submitted(user_id, challenge_id)

    async def get_submission_stats(self) -> SubmissionStats:
        return SubmissionStats(**await self.submissions.get_stats())

    # ==================== ENRICHMENT ====================

    async def enrich_submission(self, submission: Submission) -> EnrichedSubmission:
        challenge, user = await asyncio.gather(
            self.challenges.find_by_id(submission.challenge_id),
            self.users.find_by_id(submission.user_id),
        )
        return EnrichedSubmission(
            submission=submission,
            challenge=challenge,
            username=user.display_name if user else "Unknown User",
        )

    async def enrich_submissions(self, submissions: List[Submission]) -> List[EnrichedSubmission]:
        return list(await asyncio.gather(*(self.enrich_submission(s) for s in submissions)))
