"""
Question model.
"""
from sqlalchemy import CheckConstraint, Column, JSON, Text, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from celpip_api.models.enums import QuestionType

if TYPE_CHECKING:
    from celpip_api.models.part import Part
    from celpip_api.models.segment import Segment


class Question(SQLModel, table=True):
    """Question table - belongs to exactly one part or one segment."""
    __tablename__ = "question"
    __table_args__ = (
        CheckConstraint(
            "(part_id IS NULL) <> (segment_id IS NULL)",
            name="question_single_parent_check",
        ),
        UniqueConstraint("part_id", "position", name="uq_question_part_position"),
        UniqueConstraint("segment_id", "position", name="uq_question_segment_position"),
    )

    id: str = Field(primary_key=True)
    part_id: Optional[str] = Field(default=None, foreign_key="part.id", ondelete="CASCADE", index=True)
    segment_id: Optional[str] = Field(default=None, foreign_key="segment.id", ondelete="CASCADE", index=True)
    # For CLOZE this is the placeholder id (e.g. "1"); for PASSAGE it is the passage content
    text: str = Field(default="", sa_column=Column("question_text", Text, nullable=False))
    type: QuestionType
    options: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    correct_answer: Optional[str] = None
    weight: float = Field(default=1.0)
    audio_data: Optional[str] = Field(default=None, sa_type=Text)
    image_data: Optional[str] = Field(default=None, sa_type=Text)
    position: int

    # Relationships
    part: Optional["Part"] = Relationship(back_populates="questions")
    segment: Optional["Segment"] = Relationship(back_populates="questions")
