"""
Part model.
"""
from sqlalchemy import Text, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from celpip_api.models.enums import PartLayout

if TYPE_CHECKING:
    from celpip_api.models.section import Section
    from celpip_api.models.segment import Segment
    from celpip_api.models.question import Question

DEFAULT_PART_TIMER_SECONDS = 600


class Part(SQLModel, table=True):
    """Part table - a passage, transcript or prompt with its questions or segments."""
    __tablename__ = "part"
    __table_args__ = (
        UniqueConstraint("section_id", "position", name="uq_part_section_position"),
    )

    id: str = Field(primary_key=True)
    section_id: str = Field(foreign_key="section.id", ondelete="CASCADE", index=True)
    content_text: str = Field(default="", sa_type=Text)
    image_data: Optional[str] = Field(default=None, sa_type=Text)  # Base64 data URL or reference
    audio_data: Optional[str] = Field(default=None, sa_type=Text)  # Base64 data URL or reference
    instructions: Optional[str] = Field(default=None, sa_type=Text)
    timer_seconds: int = Field(default=DEFAULT_PART_TIMER_SECONDS)
    prep_seconds: Optional[int] = None
    layout: PartLayout = Field(default=PartLayout.DIRECT)
    position: int

    # Relationships
    section: "Section" = Relationship(back_populates="parts")
    segments: List["Segment"] = Relationship(
        back_populates="part",
        sa_relationship_kwargs={"passive_deletes": True},
    )
    questions: List["Question"] = Relationship(
        back_populates="part",
        sa_relationship_kwargs={"passive_deletes": True},
    )
