"""
Leaderboard aggregation.

The all-time board reads the incrementally maintained ``total_points``
directly. Weekly/monthly boards scan approved submissions reviewed inside the
window, sum their stamped points per user, resolve the users in bounded
identity batches, then rank by points. Equal points keep the order the batches
came back in; there is no secondary key.
"""

import asyncio
from datetime import datetime
from typing import Callable, Dict, List

from arena import date_helpers
from arena.date_helpers import utcnow
from arena.logger import get_logger
from arena.models import ChallengeLeaderboardEntry, LeaderboardEntry
from arena.repositories.submission_repository import SubmissionRepository
from arena.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class LeaderboardService:

    def __init__(
        self,
        submissions: SubmissionRepository,
        users: UserRepository,
        batch_size: int = 10,
        clock: Callable[[], datetime] = utcnow
    ):
        self.submissions = submissions
        self.users = users
        self.batch_size = batch_size
        self.clock = clock

    async def get_overall_leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        users = await self.users.find_top_users(limit)
        return [
            LeaderboardEntry(rank=idx + 1, user=user, points=user.total_points)
            for idx, user in enumerate(users)
        ]

    async def get_weekly_leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        now = self.clock()
        return await self.get_window_leaderboard(date_helpers.start_of_week(now), now, limit)

    async def get_monthly_leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        now = self.clock()
        return await self.get_window_leaderboard(date_helpers.start_of_month(now), now, limit)

    async def get_window_leaderboard(self, start: datetime, end: datetime, limit: int = 10) -> List[LeaderboardEntry]:
        submissions = await self.submissions.find_approved_in_window(start, end)

        # user_id -> {"points", "submission_count"}, insertion ordered
        tallies: Dict[str, Dict[str, int]] = {}
        for submission in submissions:
            if not submission.reviewed_at or not submission.challenge_id:
                continue
            stats = tallies.setdefault(submission.user_id, {"points": 0, "submission_count": 0})
            stats["points"] += submission.points or 0
            stats["submission_count"] += 1

        if not tallies:
            return []

        users = await self.users.find_by_ids(list(tallies), self.batch_size)

        unresolved = len(tallies) - len(users)
        if unresolved:
            logger.warning(
                "%d user(s) with approved submissions between %s and %s no longer exist",
                unresolved, start, end
            )

        ranked = sorted(users, key=lambda user: tallies[user.id]["points"], reverse=True)[:limit]
        return [
            LeaderboardEntry(
                rank=idx + 1,
                user=user,
                points=tallies[user.id]["points"],
                submission_count=tallies[user.id]["submission_count"],
            )
            for idx, user in enumerate(ranked)
        ]

    async def get_challenge_leaderboard(self, challenge_id: str, limit: int = 10) -> List[ChallengeLeaderboardEntry]:
        """Earliest approved submission first; submitters that no longer exist are dropped"""
        submissions = await self.submissions.find_approved_for_challenge(challenge_id, limit)
        if not submissions:
            return []

        users = await asyncio.gather(*(self.users.find_by_id(s.user_id) for s in submissions))

        entries = []
        for submission, user in zip(submissions, users):
            if user is None:
                continue
            entries.append(ChallengeLeaderboardEntry(
                rank=len(entries) + 1,
                user=user,
                submitted_at=submission.submitted_at,
            ))
        return entries
