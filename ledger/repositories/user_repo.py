import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ledger.core.security import hash_password
from ledger.models.base import _utcnow
from ledger.models.user import UserCreate, UserInDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Accounts for the mongo backend. Emails are stored lowercased."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db["users"]

    @staticmethod
    def _active(**filters) -> Dict[str, Any]:
        return {"is_deleted": False, **filters}

    async def create_user(self, user_data: UserCreate) -> UserInDB:
        """Insert a new account; DuplicateKeyError propagates on a taken email."""
        now = _utcnow()
        doc = {
            "name": user_data.name.strip(),
            "email": user_data.email.lower(),
            "password_hash": hash_password(user_data.password),
            "is_deleted": False,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.collection.insert_one(doc)
        logger.info("Created user %s", result.inserted_id)
        return UserInDB.model_validate({**doc, "_id": result.inserted_id})

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        doc = await self.collection.find_one(self._active(email=email.lower()))
        return UserInDB.model_validate(doc) if doc else None

    async def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        """Look up by the string form of the ObjectId; malformed ids match nothing."""
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None

        doc = await self.collection.find_one(self._active(_id=oid))
        return UserInDB.model_validate(doc) if doc else None
