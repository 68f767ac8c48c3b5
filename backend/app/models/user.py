"""
User model for the auth database.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserStatus(str, Enum):
    """User account status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    BANNED = "banned"


class UserMetadata(BaseModel):
    """Account state embedded in each user document."""
    status: UserStatus = Field(default=UserStatus.ACTIVE, description="Account status")
    verified: bool = Field(default=False, description="Email verified")

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """
    User document model for the users collection.
    """
    id: Optional[str] = Field(None, alias="_id", description="MongoDB ObjectId as string")
    email: EmailStr = Field(..., description="Unique, lowercased email address")
    password: str = Field(..., description="Bcrypt hashed password")
    metadata: UserMetadata = Field(default_factory=UserMetadata)
    created_at: datetime = Field(default_factory=_utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=_utcnow, description="Last update timestamp")

    model_config = ConfigDict(populate_by_name=True)

    def is_verified(self) -> bool:
        return self.metadata.verified

    def to_document(self) -> dict:
        """Document to insert into MongoDB (no _id)."""
        return self.model_dump(exclude={"id"})
