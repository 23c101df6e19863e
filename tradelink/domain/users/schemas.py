"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_role


class UserCreate(BaseModel):
    """Schema for registering a realtor or contractor profile"""

    name: str
    email: str
    role: str
    company: Optional[str] = None
    specialty: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("role")
    @classmethod
    def validate_user_role(cls, v):
        return validate_role(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class UserResponse(BaseModel):
    """Schema for user response"""

    id: str
    name: str
    email: str
    role: str
    company: Optional[str] = None
    specialty: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
