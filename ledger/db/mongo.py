import logging
from typing import Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ledger.core.config import Settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager, one per application."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Connect to MongoDB."""
        self.client = AsyncIOMotorClient(self.settings.MONGODB_URI, tz_aware=True)
        self.db = self.client[self.settings.MONGODB_DB]

        await create_indexes(self.db)
        logger.info("Connected to MongoDB: %s", self.settings.MONGODB_DB)

    async def close(self) -> None:
        """Disconnect from MongoDB."""
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.db = None


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create database indexes."""
    # User email unique index
    await db["users"].create_index("email", unique=True)

    # Company names are unique per owner
    await db["companies"].create_index([("owner_id", 1), ("name_key", 1)], unique=True)

    # Transaction indexes
    await db["transactions"].create_index([("owner_id", 1), ("company_id", 1)])
    await db["transactions"].create_index([("owner_id", 1), ("created_at", -1)])

    # One settings document per owner
    await db["user_settings"].create_index("owner_id", unique=True)


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Get database instance."""
    mongo: Optional[MongoDatabase] = getattr(request.app.state, "mongo", None)
    if mongo is None or mongo.db is None:
        raise RuntimeError("MongoDB is not connected")
    return mongo.db
