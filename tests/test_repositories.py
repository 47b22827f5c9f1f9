"""Tests for user repository."""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from ledger.models.user import UserCreate
from ledger.repositories.user_repo import UserRepository


@pytest.mark.asyncio
class TestUserRepository:
    """Test UserRepository operations against a mocked users collection."""

    async def test_create_user(self, mock_db):
        users = mock_db.collections["users"]
        users.insert_one.return_value = MagicMock(inserted_id=ObjectId())
        repo = UserRepository(mock_db)

        user = await repo.create_user(UserCreate(name="Jo", email="Jo@Example.com", password="SecurePass123"))

        stored = users.insert_one.call_args.args[0]
        assert stored["email"] == "jo@example.com"
        assert stored["password_hash"] != "SecurePass123"
        assert stored["is_deleted"] is False
        assert user.id == users.insert_one.return_value.inserted_id

    async def test_get_user_by_email_is_case_insensitive(self, mock_db):
        users = mock_db.collections["users"]
        repo = UserRepository(mock_db)

        assert await repo.get_user_by_email("NOBODY@example.com") is None
        users.find_one.assert_called_once_with({"email": "nobody@example.com", "is_deleted": False})

    async def test_get_user_by_id(self, mock_db):
        user_id = ObjectId()
        now = datetime.now(timezone.utc)
        mock_db.collections["users"].find_one.return_value = {
            "_id": user_id,
            "name": "Jo",
            "email": "jo@example.com",
            "password_hash": "hash",
            "created_at": now,
            "updated_at": now
        }
        repo = UserRepository(mock_db)

        user = await repo.get_user_by_id(str(user_id))

        assert user.to_response().id == str(user_id)

    async def test_get_user_by_invalid_id(self, mock_db):
        repo = UserRepository(mock_db)

        assert await repo.get_user_by_id("not-an-object-id") is None
        mock_db.collections["users"].find_one.assert_not_called()
