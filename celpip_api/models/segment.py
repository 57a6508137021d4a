"""
Segment model.
"""
from sqlalchemy import Text, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from celpip_api.models.part import Part
    from celpip_api.models.question import Question


class Segment(SQLModel, table=True):
    """Segment table - independently timed sub-unit of a part (e.g. one audio track)."""
    __tablename__ = "segment"
    __table_args__ = (
        UniqueConstraint("part_id", "position", name="uq_segment_part_position"),
    )

    id: str = Field(primary_key=True)
    part_id: str = Field(foreign_key="part.id", ondelete="CASCADE", index=True)
    content_text: str = Field(default="", sa_type=Text)
    audio_data: Optional[str] = Field(default=None, sa_type=Text)
    prep_seconds: Optional[int] = None
    timer_seconds: Optional[int] = None
    position: int

    # Relationships
    part: "Part" = Relationship(back_populates="segments")
    questions: List["Question"] = Relationship(
        back_populates="segment",
        sa_relationship_kwargs={"passive_deletes": True},
    )
