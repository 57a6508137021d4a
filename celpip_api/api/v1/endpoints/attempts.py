"""
Attempt endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List

from celpip_api.core.database import get_session
from celpip_api.schemas.attempt import RecordAttemptRequest, RecordAttemptResponse, AttemptResponse
from celpip_api.services.attempt_service import record_attempt, list_attempts

router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.post("", response_model=RecordAttemptResponse, status_code=status.HTTP_200_OK)
def save_attempt(
    request: RecordAttemptRequest,
    session: Session = Depends(get_session)
):
    """Record a completed attempt. Attempts are never modified afterwards."""
    attempt_id = record_attempt(session, request)
    return RecordAttemptResponse(id=attempt_id)


@router.get("/{user_id}", response_model=List[AttemptResponse])
def get_attempts(
    user_id: str,
    session: Session = Depends(get_session)
):
    """Get a user's attempts, newest first."""
    return list_attempts(session, user_id)
