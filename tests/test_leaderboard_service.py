"""
Unit tests for LeaderboardService.

Window sums, batching, ranking and the per-challenge board.
"""

import logging
from datetime import datetime, timedelta

import pytest

from arena.models import SubmissionCreate, SubmissionStatus
from tests.conftest import NOW

WEEK_START = datetime(2024, 3, 10)
MONTH_START = datetime(2024, 3, 1)


class TestOverall:

    @pytest.mark.asyncio
    async def test_reads_total_points(self, leaderboard_service, make_user):
        await make_user("alice", total_points=300)
        await make_user("bob", total_points=500)
        await make_user("carol", total_points=100)

        board = await leaderboard_service.get_overall_leaderboard(limit=2)

        assert [(e.rank, e.user.id, e.points) for e in board] == [(1, "bob", 500), (2, "alice", 300)]
        assert all(e.submission_count is None for e in board)


class TestWindows:

    @pytest.mark.asyncio
    async def test_two_users_one_challenge_this_week(
        self, leaderboard_service, submission_service, make_user, make_challenge, clock
    ):
        await make_user("alice")
        await make_user("bob")
        challenge = await make_challenge(points=100)

        for user_id in ("alice", "bob"):
            submission = await submission_service.submit_solution(user_id, SubmissionCreate(
                challenge_id=challenge.id,
                repository_url=f"https://github.com/{user_id}/shortener",
                language="python",
            ))
            await submission_service.review_submission(submission.id, SubmissionStatus.APPROVED, "", "r1")
            clock.advance(minutes=1)

        board = await leaderboard_service.get_weekly_leaderboard(limit=10)

        assert {e.user.id for e in board} == {"alice", "bob"}
        assert [e.rank for e in board] == [1, 2]
        assert all(e.points == 100 and e.submission_count == 1 for e in board)

    @pytest.mark.asyncio
    async def test_higher_points_rank_first(self, leaderboard_service, make_user, make_approved_submission):
        await make_user("alice")
        await make_user("bob")
        await make_approved_submission("alice", "CH_1", 50)
        await make_approved_submission("bob", "CH_1", 200)

        board = await leaderboard_service.get_weekly_leaderboard()

        assert [(e.user.id, e.points) for e in board] == [("bob", 200), ("alice", 50)]

    @pytest.mark.asyncio
    async def test_points_are_window_sums(self, leaderboard_service, make_user, make_approved_submission):
        await make_user("alice")
        await make_user("bob")
        # inside this week
        await make_approved_submission("alice", "CH_1", 30, reviewed_at=WEEK_START)
        await make_approved_submission("alice", "CH_2", 45, reviewed_at=NOW - timedelta(hours=2))
        await make_approved_submission("bob", "CH_1", 60, reviewed_at=NOW)
        # this month, last week
        await make_approved_submission("alice", "CH_3", 100, reviewed_at=WEEK_START - timedelta(seconds=1))
        # last month
        await make_approved_submission("bob", "CH_2", 500, reviewed_at=MONTH_START - timedelta(days=1))

        weekly = {e.user.id: (e.points, e.submission_count) for e in await leaderboard_service.get_weekly_leaderboard()}
        monthly = {e.user.id: (e.points, e.submission_count) for e in await leaderboard_service.get_monthly_leaderboard()}

        assert weekly == {"alice": (75, 2), "bob": (60, 1)}
        assert monthly == {"alice": (175, 3), "bob": (60, 1)}

    @pytest.mark.asyncio
    async def test_pending_and_rejected_do_not_count(
        self, leaderboard_service, submission_service, make_user, make_challenge
    ):
        await make_user("alice")
        await make_user("bob")
        challenge = await make_challenge(points=100)
        for user_id in ("alice", "bob"):
            await submission_service.submit_solution(user_id, SubmissionCreate(
                challenge_id=challenge.id, repository_url="https://github.com/x/y", language="go",
            ))
        await submission_service.review_submission(f"alice_{challenge.id}", SubmissionStatus.REJECTED, "", "r1")

        assert await leaderboard_service.get_weekly_leaderboard() == []

    @pytest.mark.asyncio
    async def test_empty_window(self, leaderboard_service, make_user):
        await make_user("alice", total_points=1000)
        assert await leaderboard_service.get_window_leaderboard(WEEK_START, NOW) == []

    @pytest.mark.asyncio
    async def test_twenty_five_users_in_three_batches(
        self, leaderboard_service, user_repo, make_user, make_approved_submission
    ):
        for i in range(25):
            await make_user(f"user{i:02d}")
            await make_approved_submission(f"user{i:02d}", "CH_1", (i + 1) * 10)

        batch_sizes = []
        real_lookup = user_repo.find_id_batch

        async def spy(batch):
            batch_sizes.append(len(batch))
            return await real_lookup(batch)

        user_repo.find_id_batch = spy
        board = await leaderboard_service.get_weekly_leaderboard(limit=25)

        assert batch_sizes == [10, 10, 5]
        assert len(board) == 25
        assert [e.points for e in board] == sorted((e.points for e in board), reverse=True)
        assert board[0].user.id == "user24"

    @pytest.mark.asyncio
    async def test_limit_applies_after_ranking(self, leaderboard_service, make_user, make_approved_submission):
        for i in range(5):
            await make_user(f"user{i}")
            await make_approved_submission(f"user{i}", "CH_1", i * 10)

        board = await leaderboard_service.get_weekly_leaderboard(limit=2)

        assert [e.user.id for e in board] == ["user4", "user3"]

    @pytest.mark.asyncio
    async def test_missing_users_dropped_with_warning(
        self, leaderboard_service, make_user, make_approved_submission, caplog
    ):
        await make_user("alice")
        await make_approved_submission("alice", "CH_1", 10)
        await make_approved_submission("deleted-user", "CH_1", 999)

        with caplog.at_level(logging.WARNING, logger="arena.services.leaderboard_service"):
            board = await leaderboard_service.get_weekly_leaderboard()

        assert [e.user.id for e in board] == ["alice"]
        assert "no longer exist" in caplog.text


class TestChallengeBoard:

    @pytest.mark.asyncio
    async def test_earliest_approved_first(self, leaderboard_service, make_user, make_approved_submission):
        await make_user("alice")
        await make_user("bob")
        await make_user("carol")
        await make_approved_submission("bob", "CH_1", 100, submitted_at=NOW - timedelta(days=3))
        await make_approved_submission("alice", "CH_1", 100, submitted_at=NOW - timedelta(days=2))
        await make_approved_submission("carol", "CH_2", 100, submitted_at=NOW - timedelta(days=5))

        board = await leaderboard_service.get_challenge_leaderboard("CH_1")

        assert [(e.rank, e.user.id) for e in board] == [(1, "bob"), (2, "alice")]
        assert board[0].submitted_at == NOW - timedelta(days=3)

    @pytest.mark.asyncio
    async def test_missing_submitters_are_skipped_and_ranks_stay_dense(
        self, leaderboard_service, make_user, make_approved_submission
    ):
        await make_user("alice")
        await make_approved_submission("ghost", "CH_1", 100, submitted_at=NOW - timedelta(days=3))
        await make_approved_submission("alice", "CH_1", 100, submitted_at=NOW - timedelta(days=2))

        board = await leaderboard_service.get_challenge_leaderboard("CH_1")

        assert [(e.rank, e.user.id) for e in board] == [(1, "alice")]

    @pytest.mark.asyncio
    async def test_no_approvals(self, leaderboard_service):
        assert await leaderboard_service.get_challenge_leaderboard("CH_1") == []
