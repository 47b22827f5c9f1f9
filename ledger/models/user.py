"""
Account models for the mongo backend.

UserInDB mirrors the stored document (ObjectId key, bcrypt hash);
UserResponse is what the API returns, with the id as a string.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # bcrypt ignores anything past 72 bytes
    password: str = Field(..., min_length=8, max_length=72)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: EmailStr
    created_at: Optional[datetime] = None


class UserInDB(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(alias="_id")
    name: str
    email: str
    password_hash: str
    is_deleted: bool = False
    created_at: datetime
    updated_at: datetime

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=str(self.id),
            name=self.name,
            email=self.email,
            created_at=self.created_at
        )
