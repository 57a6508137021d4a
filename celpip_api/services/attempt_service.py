"""
Attempt service: append-only attempt records and per-user history.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
from datetime import datetime, timezone
from typing import List
import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from celpip_api.core.exceptions import ConflictError, StoreError
from celpip_api.models.models import Attempt, PracticeSet, User
from celpip_api.schemas.attempt import RecordAttemptRequest, AttemptResponse

logger = logging.getLogger(__name__)

UNKNOWN_SET_TITLE = "Unknown Set"


def _to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_attempt_date(value: datetime) -> str:
    """Render a completion time as a caller-facing date, e.g. 3/7/2026."""
    return f"{value.month}/{value.day}/{value.year}"


def record_attempt(session: Session, request: RecordAttemptRequest) -> str:
    """
    Insert one immutable attempt record.

    The referenced user is not required to exist; attempts are accepted for any
    user id. The set title is snapshotted so history stays readable after the
    set is deleted.

    Args:
        session: Database session
        request: Attempt data

    Returns:
        The attempt id

    Raises:
        ConflictError: If an attempt with this id already exists
        StoreError: If the insert fails for any other reason
    """
    attempt_id = request.id or f"attempt-{uuid.uuid4().hex}"
    if request.id and session.get(Attempt, attempt_id) is not None:
        raise ConflictError(f"Attempt {attempt_id} already exists")

    practice_set = session.get(PracticeSet, request.set_id)
    set_title = practice_set.title if practice_set else (request.set_title or "")

    if session.get(User, request.user_id) is None:
        logger.info(f"Recording attempt {attempt_id} for unregistered user id {request.user_id}")

    attempt = Attempt(
        id=attempt_id,
        user_id=request.user_id,
        set_id=request.set_id,
        set_title=set_title,
        completed_at=_to_naive_utc(request.completed_at) if request.completed_at else datetime.utcnow(),
        section_scores=dict(request.section_scores),
        band_score=request.band_score,
        feedback=request.feedback,
    )
    session.add(attempt)

    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError(f"Attempt {attempt_id} already exists") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error recording attempt {attempt_id}: {str(e)}")
        raise StoreError(f"Failed to record attempt {attempt_id}") from e

    logger.info(f"Recorded attempt {attempt_id} for user {request.user_id} on set {request.set_id}")
    return attempt_id


def list_attempts(session: Session, user_id: str) -> List[AttemptResponse]:
    """
    Return a user's attempts, newest first.

    Each attempt carries the referenced set's current title, falling back to
    the recorded snapshot and then to "Unknown Set" when the set is gone.
    """
    rows = session.exec(
        select(Attempt, PracticeSet.title)
        .join(PracticeSet, Attempt.set_id == PracticeSet.id, isouter=True)
        .where(Attempt.user_id == user_id)
        .order_by(Attempt.completed_at.desc(), Attempt.id.desc())
    ).all()

    return [
        AttemptResponse(
            id=attempt.id,
            user_id=attempt.user_id,
            set_id=attempt.set_id,
            set_title=current_title or attempt.set_title or UNKNOWN_SET_TITLE,
            date=format_attempt_date(attempt.completed_at),
            completed_at=attempt.completed_at,
            section_scores=attempt.section_scores or {},
            band_score=attempt.band_score,
            feedback=attempt.feedback or {},
        )
        for attempt, current_title in rows
    ]
