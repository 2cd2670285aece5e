from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from arena.database import CHALLENGES
from arena.date_helpers import utcnow
from arena.models import Challenge, ChallengeDifficulty, ChallengeFilters
from arena.repositories.base_repository import BaseRepository
from arena.search import OverfetchSearchIndex, SearchIndex


class ChallengeRepository(BaseRepository[Challenge]):
    collection_name = CHALLENGES
    model = Challenge
    id_prefix = "CH"

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        search_index: Optional[SearchIndex] = None,
        overfetch_factor: int = 3
    ):
        super().__init__(db)
        self.search_index = search_index or OverfetchSearchIndex(
            self.collection,
            fields=("title", "description"),
            order_field="created_at",
            overfetch_factor=overfetch_factor,
        )

    async def find_challenges(
        self,
        filters: Optional[ChallengeFilters] = None,
        limit: int = 50,
        now: Optional[datetime] = None
    ) -> List[Challenge]:
        """Filtered list, newest start date first"""
        filters = filters or ChallengeFilters()
        query = {}

        if filters.active_only:
            query["active"] = True
        if filters.difficulty:
            query["difficulty"] = ChallengeDifficulty(filters.difficulty).value
        if filters.category:
            query["category"] = filters.category
        if filters.upcoming:
            query["start_date"] = {"$gt": now or utcnow()}

        return await self.query(query, sort=[("start_date", DESCENDING)], limit=limit)

    async def find_active_challenges(self, limit: int = 50, now: Optional[datetime] = None) -> List[Challenge]:
        """Active flag set and now inside [start_date, end_date]"""
        now = now or utcnow()
        return await self.query(
            {
                "active": True,
                "start_date": {"$lte": now},
                "end_date": {"$gte": now},
            },
            sort=[("start_date", DESCENDING)],
            limit=limit
        )

    async def find_upcoming_challenges(self, limit: int = 50, now: Optional[datetime] = None) -> List[Challenge]:
        return await self.query(
            {"active": True, "start_date": {"$gt": now or utcnow()}},
            sort=[("start_date", ASCENDING)],
            limit=limit
        )

    async def find_challenges_by_creator(self, user_id: str, limit: int = 50) -> List[Challenge]:
        return await self.query({"created_by": user_id}, sort=[("created_at", DESCENDING)], limit=limit)

    async def find_challenges_by_difficulty(
        self,
        difficulty: ChallengeDifficulty,
        active_only: bool = True,
        limit: int = 50
    ) -> List[Challenge]:
        query = {"difficulty": ChallengeDifficulty(difficulty).value}
        if active_only:
            query["active"] = True
        return await self.query(query, sort=[("created_at", DESCENDING)], limit=limit)

    async def search_challenges(self, term: str, limit: int = 50) -> List[Challenge]:
        docs = await self.search_index.search(term, limit)
        return self.to_entities(docs)

    async def get_categories(self, scan_limit: int = 1000) -> List[str]:
        """Distinct categories, in first-seen order"""
        docs = await self.query_raw(projection={"category": 1}, limit=scan_limit)
        categories = []
        for doc in docs:
            category = doc.get("category")
            if category and category not in categories:
                categories.append(category)
        return categories
