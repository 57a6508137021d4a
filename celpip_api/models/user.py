"""
User model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from celpip_api.models.enums import UserRole


class User(SQLModel, table=True):
    """User table - stores user information."""
    __tablename__ = "user"

    id: str = Field(primary_key=True)  # "user-<hex>", generated at signup
    email: str = Field(unique=True, index=True)  # Stored lower-cased
    password_hash: str  # pbkdf2_sha256$<iterations>$<salt>$<hash>; legacy rows hold plaintext
    role: UserRole = Field(default=UserRole.USER)
    name: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
