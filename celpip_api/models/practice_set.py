"""
PracticeSet model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from celpip_api.models.section import Section


class PracticeSet(SQLModel, table=True):
    """PracticeSet table - root of a content tree. Deleting a row cascades to every descendant."""
    __tablename__ = "practice_set"

    id: str = Field(primary_key=True)  # Caller-assigned
    title: str
    description: str = Field(default="")
    is_published: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    sections: List["Section"] = Relationship(
        back_populates="practice_set",
        sa_relationship_kwargs={"passive_deletes": True},
    )
