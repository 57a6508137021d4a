"""
Schemas for the writing evaluation and speech synthesis collaborators.
"""
from pydantic import Field
from typing import Optional
from celpip_api.schemas.utils import CamelModel


class EvaluateWritingRequest(CamelModel):
    """Writing task prompt and the candidate's response."""
    question_text: str = Field(..., description="Task instructions shown to the candidate")
    user_response: str = Field(..., description="Candidate's written response")


class CategoryScores(CamelModel):
    """Optional per-pillar scores."""
    content: Optional[float] = None
    vocabulary: Optional[float] = None
    readability: Optional[float] = None
    task_fulfillment: Optional[float] = None


class WritingEvaluation(CamelModel):
    """Structured evaluation of a writing response."""
    band_score: float = Field(..., description="CLB level 0-12")
    scores: Optional[CategoryScores] = None
    feedback: str = ""
    corrections: str = ""
    error: Optional[str] = None


class GenerateSpeechRequest(CamelModel):
    """Text to synthesize. Lines like ``Name: ...`` mark speakers."""
    text: str = ""


class GenerateSpeechResponse(CamelModel):
    """Synthesized audio as a data URL."""
    audio_data: str = Field(..., description="data:audio/wav;base64,...")
