"""
Attempt model.
"""
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class Attempt(SQLModel, table=True):
    """Attempt table - immutable record of one completed test session.

    user_id and set_id are deliberately plain columns, not foreign keys: the set
    may be deleted later and attempts for unknown users are accepted.
    """
    __tablename__ = "attempt"

    id: str = Field(primary_key=True)
    user_id: str = Field(index=True)
    set_id: str = Field(index=True)
    set_title: str = Field(default="")  # Title snapshot taken when the attempt was recorded
    completed_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    section_scores: Dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    band_score: Optional[float] = None
    feedback: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
