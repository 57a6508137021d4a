"""
Attempt schemas.
"""
from pydantic import AliasChoices, Field, computed_field
from typing import Any, Dict, Optional
from datetime import datetime
from celpip_api.schemas.utils import CamelModel


class RecordAttemptRequest(CamelModel):
    """Request to record a completed attempt."""
    id: Optional[str] = Field(None, min_length=1, description="Attempt id; generated when omitted")
    user_id: str = Field(..., min_length=1, description="User who took the test")
    set_id: str = Field(..., min_length=1, description="Practice set that was taken")
    set_title: Optional[str] = Field(None, description="Title shown to the user, used if the set no longer exists")
    section_scores: Dict[str, float] = Field(default_factory=dict, description="Section id -> score")
    band_score: Optional[float] = Field(None, description="Overall band score")
    feedback: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("feedback", "aiFeedback", "ai_feedback"),
        description="Evaluation feedback captured at scoring time (e.g. part id -> writing evaluation)",
    )
    completed_at: Optional[datetime] = Field(None, description="Completion time; defaults to now")

    class Config:
        json_schema_extra = {
            "example": {
                "userId": "user-1",
                "setId": "set-1",
                "sectionScores": {"sec-1": 7, "sec-2": 10},
                "bandScore": 8.5,
                "feedback": {
                    "part-3": {"bandScore": 9, "feedback": "### Vocabulary\nGood range.", "corrections": ""}
                }
            }
        }


class RecordAttemptResponse(CamelModel):
    """Acknowledgement of a recorded attempt."""
    success: bool = True
    id: str


class AttemptResponse(CamelModel):
    """Attempt summary as shown in a user's history."""
    id: str
    user_id: str
    set_id: str
    set_title: str
    date: str  # Caller-facing date, M/D/YYYY
    completed_at: datetime
    section_scores: Dict[str, float] = Field(default_factory=dict)
    band_score: Optional[float] = None
    feedback: Dict[str, Any] = Field(default_factory=dict)

    @computed_field(alias="aiFeedback")
    @property
    def ai_feedback(self) -> Dict[str, Any]:
        """Same payload under the key older clients read."""
        return self.feedback
