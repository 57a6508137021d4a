from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from celpip_api.models.enums import UserRole


class LoginRequest(BaseModel):
    """Login request schema."""
    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class SignupRequest(BaseModel):
    """Signup request schema."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=6, description="Password (minimum 6 characters)")
    name: Optional[str] = Field(None, max_length=200, description="Display name")


class UserResponse(BaseModel):
    """User identity returned by login and signup (without credentials)."""
    id: str
    email: str
    role: UserRole
    name: Optional[str] = None

    class Config:
        from_attributes = True
