from datetime import datetime
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from arena.database import SUBMISSIONS, USERS
from arena.date_helpers import utcnow
from arena.exceptions import UserAlreadyExists, UserNotFound
from arena.models import User, UserFilters, UserRole
from arena.repositories.base_repository import BaseRepository
from arena.search import OverfetchSearchIndex, SearchIndex


class UserRepository(BaseRepository[User]):
    collection_name = USERS
    model = User
    id_prefix = "USR"
    duplicate_error = UserAlreadyExists

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        search_index: Optional[SearchIndex] = None,
        overfetch_factor: int = 3
    ):
        super().__init__(db)
        self.search_index = search_index or OverfetchSearchIndex(
            self.collection,
            fields=("display_name", "email", "github_username"),
            order_field="joined_at",
            overfetch_factor=overfetch_factor,
        )

    async def find_by_email(self, email: str) -> Optional[User]:
        users = await self.query({"email": email}, limit=1)
        return users[0] if users else None

    async def find_by_role(self, role: UserRole, limit: int = 50) -> List[User]:
        return await self.query({"role": UserRole(role).value}, sort=[("joined_at", DESCENDING)], limit=limit)

    async def find_users(self, filters: Optional[UserFilters] = None, limit: int = 50) -> List[User]:
        filters = filters or UserFilters()
        query = {}
        if filters.role:
            query["role"] = UserRole(filters.role).value
        return await self.query(query, sort=[("joined_at", DESCENDING)], limit=limit)

    async def search_users(self, term: str, limit: int = 50) -> List[User]:
        docs = await self.search_index.search(term, limit)
        return self.to_entities(docs)

    async def find_top_users(self, limit: int = 10) -> List[User]:
        return await self.query(
            sort=[("total_points", DESCENDING), ("display_name", ASCENDING)],
            limit=limit
        )

    async def find_recent_users(self, limit: int = 10) -> List[User]:
        return await self.query(sort=[("joined_at", DESCENDING)], limit=limit)

    async def increment_total_points(self, user_id: str, points: int) -> User:
        """
        Atomic single-document increment. The read-modify-write happens
        inside the store, so concurrent approvals cannot lose updates.
        """
        doc = await self.collection.find_one_and_update(
            {"_id": user_id},
            {
                "$inc": {"total_points": points},
                "$set": {"updated_at": utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise UserNotFound(f"User {user_id} not found")
        return self.to_entity(doc)

    async def update_role(self, user_id: str, role: UserRole) -> bool:
        return await self.update(user_id, {"role": UserRole(role).value, "updated_at": utcnow()})

    async def get_stats(self) -> Dict[str, object]:
        total = await self.count()
        by_role = {}
        for role in UserRole:
            by_role[role.value] = await self.count({"role": role.value})
        return {"total_users": total, "users_by_role": by_role}

    async def find_active_users(
        self,
        start: datetime,
        end: datetime,
        limit: int = 50,
        batch_size: int = 10
    ) -> List[User]:
        """Users with any submission in [start, end], highest total points first"""
        docs = await self.db[SUBMISSIONS].find(
            {"submitted_at": {"$gte": start, "$lte": end}},
            {"user_id": 1}
        ).to_list(length=None)
        user_ids = []
        seen = set()
        for doc in docs:
            user_id = doc.get("user_id")
            if user_id and user_id not in seen:
                seen.add(user_id)
                user_ids.append(user_id)

        if not user_ids:
            return []

        users = await self.find_by_ids(user_ids, batch_size)
        users.sort(key=lambda user: user.total_points, reverse=True)
        return users[:limit]
