"""
Practice set tree schemas.

Payload schemas describe what a caller saves; response schemas describe what the
tree reader returns. Position fields on input are ignored: sibling order is
taken from array order.
"""
from pydantic import Field, field_validator, model_serializer, model_validator
from typing import Any, Dict, List, Optional
from celpip_api.models.enums import PartLayout, QuestionType, SectionType
from celpip_api.models.part import DEFAULT_PART_TIMER_SECONDS
from celpip_api.schemas.utils import CamelModel


# ---------- Payloads ----------

class QuestionPayload(CamelModel):
    """Question as submitted by an editor."""
    id: str = Field(..., min_length=1)
    text: str = ""
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    weight: float = 1.0
    audio_data: Optional[str] = None
    image_data: Optional[str] = None

    @field_validator('options', mode='before')
    @classmethod
    def default_options(cls, v):
        """PASSAGE blocks are often sent without options."""
        return [] if v is None else v

    @field_validator('weight', mode='before')
    @classmethod
    def default_weight(cls, v):
        return 1.0 if v is None else v


class SegmentPayload(CamelModel):
    """Segment as submitted by an editor."""
    id: str = Field(..., min_length=1)
    content_text: str = ""
    audio_data: Optional[str] = None
    prep_seconds: Optional[int] = Field(None, ge=0)
    timer_seconds: Optional[int] = Field(None, ge=0)
    questions: List[QuestionPayload] = Field(default_factory=list)


class PartPayload(CamelModel):
    """
    Part as submitted by an editor.

    A part carries either ``questions`` or ``segments``. ``layout`` is optional;
    when omitted it is derived from which container is populated.
    """
    id: str = Field(..., min_length=1)
    content_text: str = ""
    image_data: Optional[str] = None
    audio_data: Optional[str] = None
    instructions: Optional[str] = None
    timer_seconds: Optional[int] = Field(None, ge=0)
    prep_seconds: Optional[int] = Field(None, ge=0)
    layout: Optional[PartLayout] = None
    questions: List[QuestionPayload] = Field(default_factory=list)
    segments: List[SegmentPayload] = Field(default_factory=list)

    @field_validator('content_text', mode='before')
    @classmethod
    def default_content_text(cls, v):
        return "" if v is None else v

    @model_validator(mode='after')
    def check_single_container(self):
        """Reject parts that mix direct questions with segments."""
        if self.questions and self.segments:
            raise ValueError(f"Part {self.id} has both questions and segments; use one or the other")
        if self.layout == PartLayout.DIRECT and self.segments:
            raise ValueError(f"Part {self.id} is DIRECT but has segments")
        if self.layout == PartLayout.SEGMENTED and self.questions:
            raise ValueError(f"Part {self.id} is SEGMENTED but has direct questions")
        if self.layout is None:
            self.layout = PartLayout.SEGMENTED if self.segments else PartLayout.DIRECT
        return self

    @property
    def effective_timer_seconds(self) -> int:
        return self.timer_seconds if self.timer_seconds is not None else DEFAULT_PART_TIMER_SECONDS


class SectionPayload(CamelModel):
    """Section as submitted by an editor."""
    id: str = Field(..., min_length=1)
    type: SectionType
    title: str = ""
    parts: List[PartPayload] = Field(default_factory=list)


class PracticeSetPayload(CamelModel):
    """A complete tree. Saving it replaces whatever is stored under ``id``."""
    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    is_published: bool = False
    sections: List[SectionPayload] = Field(default_factory=list)

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v):
        return "" if v is None else v

    class Config:
        json_schema_extra = {
            "example": {
                "id": "set-1",
                "title": "Demo",
                "description": "",
                "isPublished": True,
                "sections": [
                    {
                        "id": "sec-1",
                        "type": "READING",
                        "title": "Reading Section",
                        "parts": [
                            {
                                "id": "p-1",
                                "contentText": "",
                                "questions": [
                                    {
                                        "id": "q-1",
                                        "text": "2+2?",
                                        "type": "MCQ",
                                        "options": ["3", "4"],
                                        "correctAnswer": "4",
                                        "weight": 1
                                    }
                                ]
                            }
                        ]
                    }
                ]
            }
        }


# ---------- Responses ----------

class QuestionResponse(CamelModel):
    """Question as read back from the store."""
    id: str
    part_id: Optional[str] = None
    segment_id: Optional[str] = None
    text: str
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    weight: float
    audio_data: Optional[str] = None
    image_data: Optional[str] = None
    position: int


class SegmentResponse(CamelModel):
    """Segment as read back from the store."""
    id: str
    part_id: str
    content_text: str
    audio_data: Optional[str] = None
    prep_seconds: Optional[int] = None
    timer_seconds: Optional[int] = None
    position: int
    questions: List[QuestionResponse] = Field(default_factory=list)


class PartResponse(CamelModel):
    """
    Part as read back from the store.

    Only the container named by ``layout`` is serialized; the other key is
    omitted from the JSON entirely.
    """
    id: str
    section_id: str
    content_text: str
    image_data: Optional[str] = None
    audio_data: Optional[str] = None
    instructions: Optional[str] = None
    timer_seconds: int
    prep_seconds: Optional[int] = None
    layout: PartLayout
    position: int
    questions: List[QuestionResponse] = Field(default_factory=list)
    segments: List[SegmentResponse] = Field(default_factory=list)

    @model_serializer(mode='wrap')
    def omit_unused_container(self, handler) -> Dict[str, Any]:
        data = handler(self)
        unused = "questions" if self.layout == PartLayout.SEGMENTED else "segments"
        data.pop(unused, None)
        return data


class SectionResponse(CamelModel):
    """Section as read back from the store."""
    id: str
    set_id: str
    type: SectionType
    title: str
    position: int
    parts: List[PartResponse] = Field(default_factory=list)


class PracticeSetResponse(CamelModel):
    """A complete tree as read back from the store."""
    id: str
    title: str
    description: str
    is_published: bool
    sections: List[SectionResponse] = Field(default_factory=list)
