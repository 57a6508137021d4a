"""
Section model.
"""
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import List, TYPE_CHECKING
from celpip_api.models.enums import SectionType

if TYPE_CHECKING:
    from celpip_api.models.practice_set import PracticeSet
    from celpip_api.models.part import Part


class Section(SQLModel, table=True):
    """Section table - one skill block of a practice set."""
    __tablename__ = "section"
    __table_args__ = (
        UniqueConstraint("set_id", "position", name="uq_section_set_position"),
    )

    id: str = Field(primary_key=True)
    set_id: str = Field(foreign_key="practice_set.id", ondelete="CASCADE", index=True)
    type: SectionType
    title: str = Field(default="")
    position: int  # Zero-based rank among the set's sections

    # Relationships
    practice_set: "PracticeSet" = Relationship(back_populates="sections")
    parts: List["Part"] = Relationship(
        back_populates="section",
        sa_relationship_kwargs={"passive_deletes": True},
    )
