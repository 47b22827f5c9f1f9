from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ledger.models.base import _utcnow


class UserSettings(BaseModel):
    """Display names offered in the paid-by selector."""
    user1_name: str = Field("User 1", max_length=100)
    user2_name: str = Field("User 2", max_length=100)

    owner_id: Optional[str] = None
    updated_at: datetime = Field(default_factory=_utcnow)

    def names(self) -> list[str]:
        return [self.user1_name, self.user2_name]


class UserSettingsUpdate(BaseModel):
    user1_name: str = ""
    user2_name: str = ""
