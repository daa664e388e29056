import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from smartsplit.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        tz_aware=True
    )
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # Users
    await db.users.create_index("email", unique=True)
    await db.users.create_index("username", unique=True)

    # Groups: membership lookups
    await db.groups.create_index("members.user_id")

    # Expenses: balance aggregation and listing are per group
    await db.expenses.create_index([("group_id", 1), ("created_at", -1)])

    # Password reset tokens: one per user, purged once expired
    await db.password_reset_tokens.create_index("user_id", unique=True)
    await db.password_reset_tokens.create_index("token_hash")
    await db.password_reset_tokens.create_index("expires_at", expireAfterSeconds=0)

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
