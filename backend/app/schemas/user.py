"""
User request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 6


class UserCreate(BaseModel):
    """Create-user request body."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        description=f"User password (min {PASSWORD_MIN_LENGTH} characters)",
    )

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class UserCreated(BaseModel):
    """Create-user response (excludes credentials)."""
    email: str = Field(..., description="Registered email")
    status: str = Field(..., description="Account status")
    verified: bool = Field(..., description="Email verified")


class UserMetadataResponse(BaseModel):
    status: str
    verified: bool


class UserResponse(BaseModel):
    """User listing entry (excludes sensitive data)."""
    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    metadata: UserMetadataResponse
    created_at: Optional[datetime] = Field(None, description="Account creation date")
    updated_at: Optional[datetime] = Field(None, description="Last update date")
