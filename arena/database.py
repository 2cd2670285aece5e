from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from arena.config import Config
from arena.logger import get_logger

logger = get_logger(__name__)

# ==================== COLLECTIONS ====================

USERS = "users"
CHALLENGES = "challenges"
SUBMISSIONS = "submissions"


def create_mongo_client(config: Config) -> AsyncIOMotorClient:
    """One client per process, created by the app factory and passed down"""
    return AsyncIOMotorClient(config.MONGO_URL)


def get_database(client: AsyncIOMotorClient, config: Config) -> AsyncIOMotorDatabase:
    return client[config.MONGO_DB_NAME]


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create MongoDB indexes backing the repository queries"""

    # Users
    await db[USERS].create_index("email")
    await db[USERS].create_index([("role", ASCENDING), ("joined_at", DESCENDING)])
    await db[USERS].create_index([("total_points", DESCENDING), ("display_name", ASCENDING)])
    await db[USERS].create_index("joined_at")

    # Challenges
    await db[CHALLENGES].create_index([("active", ASCENDING), ("start_date", DESCENDING)])
    await db[CHALLENGES].create_index([("created_by", ASCENDING), ("created_at", DESCENDING)])
    await db[CHALLENGES].create_index([("difficulty", ASCENDING), ("active", ASCENDING), ("created_at", DESCENDING)])
    await db[CHALLENGES].create_index("created_at")

    # Submissions - _id is already user_id + challenge_id, the compound index backs lookups
    await db[SUBMISSIONS].create_index([("user_id", ASCENDING), ("challenge_id", ASCENDING)], unique=True)
    await db[SUBMISSIONS].create_index([("challenge_id", ASCENDING), ("status", ASCENDING), ("submitted_at", ASCENDING)])
    await db[SUBMISSIONS].create_index([("status", ASCENDING), ("reviewed_at", DESCENDING)])
    await db[SUBMISSIONS].create_index([("user_id", ASCENDING), ("submitted_at", DESCENDING)])

    logger.info("Challenge arena indexes created")
