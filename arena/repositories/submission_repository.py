from datetime import datetime
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING

from arena.database import SUBMISSIONS
from arena.exceptions import DuplicateSubmission
from arena.models import Submission, SubmissionFilters, SubmissionStatus
from arena.repositories.base_repository import BaseRepository

REVIEWED_STATUSES = [SubmissionStatus.APPROVED.value, SubmissionStatus.REJECTED.value]


def submission_key(user_id: str, challenge_id: str) -> str:
    """
    Deterministic identity for the (user, challenge) pair, so the insert
    itself is exclusive - a second submission collides on _id.

    Unambiguous only because challenge ids are generated as ``CH_`` plus 12
    hex digits: the key always ends in exactly that fixed-width suffix, so a
    uid containing ``_`` cannot collide with another pair.
    """
    return f"{user_id}_{challenge_id}"


class SubmissionRepository(BaseRepository[Submission]):
    collection_name = SUBMISSIONS
    model = Submission
    id_prefix = "SUB"
    duplicate_error = DuplicateSubmission

    async def create_submission(self, data: dict) -> Submission:
        return await self.create_with_id(submission_key(data["user_id"], data["challenge_id"]), data)

    async def find_submissions(self, filters: Optional[SubmissionFilters] = None, limit: int = 50) -> List[Submission]:
        """Filtered list, newest first"""
        filters = filters or SubmissionFilters()
        query = {}

        if filters.challenge_id:
            query["challenge_id"] = filters.challenge_id
        if filters.user_id:
            query["user_id"] = filters.user_id
        if filters.status:
            query["status"] = SubmissionStatus(filters.status).value

        return await self.query(query, sort=[("submitted_at", DESCENDING)], limit=limit)

    async def find_submissions_by_challenge(self, challenge_id: str, limit: int = 50) -> List[Submission]:
        return await self.query({"challenge_id": challenge_id}, sort=[("submitted_at", DESCENDING)], limit=limit)

    async def find_submissions_by_user(self, user_id: str, limit: int = 50) -> List[Submission]:
        return await self.query({"user_id": user_id}, sort=[("submitted_at", DESCENDING)], limit=limit)

    async def find_pending_submissions(self, limit: int = 50) -> List[Submission]:
        # oldest first for fair review order
        return await self.query(
            {"status": SubmissionStatus.PENDING.value},
            sort=[("submitted_at", ASCENDING)],
            limit=limit
        )

    async def find_reviewed_submissions(self, limit: int = 50) -> List[Submission]:
        return await self.query(
            {"status": {"$in": REVIEWED_STATUSES}},
            sort=[("reviewed_at", DESCENDING)],
            limit=limit
        )

    async def find_user_challenge_submission(self, user_id: str, challenge_id: str) -> Optional[Submission]:
        submissions = await self.query({"user_id": user_id, "challenge_id": challenge_id}, limit=1)
        return submissions[0] if submissions else None

    async def has_user_submitted(self, user_id: str, challenge_id: str) -> bool:
        return await self.find_user_challenge_submission(user_id, challenge_id) is not None

    async def find_approved_in_window(self, start: datetime, end: datetime) -> List[Submission]:
        return await self.query({
            "status": SubmissionStatus.APPROVED.value,
            "reviewed_at": {"$gte": start, "$lte": end},
        })

    async def find_approved_for_challenge(self, challenge_id: str, limit: int = 10) -> List[Submission]:
        """Earliest submission first"""
        return await self.query(
            {"challenge_id": challenge_id, "status": SubmissionStatus.APPROVED.value},
            sort=[("submitted_at", ASCENDING)],
            limit=limit
        )

    async def mark_reviewed(
        self,
        submission_id: str,
        status: SubmissionStatus,
        feedback: str,
        reviewer_id: str,
        points: int,
        reviewed_at: datetime
    ) -> bool:
        """
        Stamp review fields only while the submission is still PENDING.
        Returns False when another review got there first.
        """
        result = await self.collection.update_one(
            {"_id": submission_id, "status": SubmissionStatus.PENDING.value},
            {"$set": {
                "status": SubmissionStatus(status).value,
                "feedback": feedback,
                "reviewer_id": reviewer_id,
                "reviewed_at": reviewed_at,
                "points": points,
            }}
        )
        return result.modified_count > 0

    async def get_stats(self) -> dict:
        total = await self.count()
        pending = await self.count({"status": SubmissionStatus.PENDING.value})
        reviewed = await self.count({"status": {"$in": REVIEWED_STATUSES}})
        return {
            "total_submissions": total,
            "pending_submissions": pending,
            "reviewed_submissions": reviewed,
        }
