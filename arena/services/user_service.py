from datetime import datetime
from typing import Callable, List, Optional

from arena.date_helpers import utcnow
from arena.exceptions import UserNotFound
from arena.logger import get_logger
from arena.models import (
    PreferencesUpdate, User, UserCreate, UserFilters, UserPreferences,
    UserRole, UserStats, UserUpdate
)
from arena.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class UserService:
    """Profile, role and points operations on users"""

    def __init__(
        self,
        users: UserRepository,
        batch_size: int = 10,
        clock: Callable[[], datetime] = utcnow
    ):
        self.users = users
        self.batch_size = batch_size
        self.clock = clock

    async def create_user(self, user_id: str, data: UserCreate) -> User:
        """
        Register the profile for an identity-provider subject.
        Raises UserAlreadyExists when the id is taken.
        """
        user_data = {
            **data.model_dump(exclude_none=True),
            "role": UserRole.CHALLENGER.value,
            "total_points": 0,
            "joined_at": self.clock(),
        }
        user = await self.users.create_with_id(user_id, user_data)
        logger.info("User %s registered", user_id)
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self.users.find_by_id(user_id)

    async def require_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise UserNotFound(f"User {user_id} not found")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.users.find_by_email(email)

    async def update_user(self, user_id: str, data: UserUpdate) -> User:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        updates["updated_at"] = self.clock()

        if not await self.users.update(user_id, updates):
            raise UserNotFound(f"User {user_id} not found")
        return await self.require_user(user_id)

    async def update_user_role(self, user_id: str, role: UserRole) -> User:
        if not await self.users.update_role(user_id, role):
            raise UserNotFound(f"User {user_id} not found")
        logger.info("User %s role set to %s", user_id, UserRole(role).value)
        return await self.require_user(user_id)

    async def get_users(self, filters: Optional[UserFilters] = None, limit: int = 50) -> List[User]:
        return await self.users.find_users(filters, limit)

    async def get_top_users(self, limit: int = 10) -> List[User]:
        return await self.users.find_top_users(limit)

    async def add_user_points(self, user_id: str, points: int) -> User:
        return await self.users.increment_total_points(user_id, points)

    async def get_users_by_role(self, role: UserRole, limit: int = 50) -> List[User]:
        return await self.users.find_by_role(role, limit)

    async def search_users(self, term: str, limit: int = 50) -> List[User]:
        return await self.users.search_users(term, limit)

    async def get_recent_users(self, limit: int = 10) -> List[User]:
        return await self.users.find_recent_users(limit)

    async def get_active_users(self, start: datetime, end: datetime, limit: int = 50) -> List[User]:
        return await self.users.find_active_users(start, end, limit, self.batch_size)

    async def get_user_stats(self) -> UserStats:
        return UserStats(**await self.users.get_stats())

    async def update_user_preferences(self, user_id: str, preferences: PreferencesUpdate) -> User:
        """Merge the given fields over the stored preferences (or the defaults)"""
        user = await self.require_user(user_id)

        current = user.preferences or UserPreferences()
        merged = current.model_copy(update=preferences.model_dump(exclude_none=True))
        # round-trip so enum fields are stored as plain values
        merged = UserPreferences.model_validate(merged.model_dump())

        await self.users.update(user_id, {
            "preferences": merged.model_dump(),
            "updated_at": self.clock(),
        })
        return await self.require_user(user_id)
