"""
Section scoring schemas.
"""
from pydantic import Field
from typing import Dict
from celpip_api.schemas.utils import CamelModel


class ScoreAnswersRequest(CamelModel):
    """Submitted answers for a practice set."""
    answers: Dict[str, str] = Field(default_factory=dict, description="Question id -> selected answer")


class ScoreAnswersResponse(CamelModel):
    """Scores for auto-gradable sections."""
    section_scores: Dict[str, float] = Field(default_factory=dict)
    total_correct: int = 0
    total_possible: int = 0
