"""
Practice set endpoints.

Handlers are plain functions: the database calls block, so FastAPI runs them
in its threadpool instead of on the event loop.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import logging

from celpip_api.core.database import get_session
from celpip_api.schemas.practice_set import PracticeSetPayload, PracticeSetResponse
from celpip_api.schemas.scoring import ScoreAnswersRequest, ScoreAnswersResponse
from celpip_api.schemas.utils import SuccessResponse
from celpip_api.services.tree_reader import list_practice_sets, get_practice_set
from celpip_api.services.tree_writer import save_practice_set, delete_practice_set
from celpip_api.services.scoring_service import score_answers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sets", tags=["sets"])


@router.get("", response_model=List[PracticeSetResponse])
def get_sets(
    published_only: bool = False,
    session: Session = Depends(get_session)
):
    """
    Get all practice sets with their complete trees.

    Sections, parts, segments and questions are ordered by position. A part
    carries either ``questions`` or ``segments``, as named by its ``layout``.
    """
    return list_practice_sets(session, published_only=published_only)


@router.get("/{set_id}", response_model=PracticeSetResponse)
def get_set(
    set_id: str,
    session: Session = Depends(get_session)
):
    """Get one practice set with its complete tree."""
    return get_practice_set(session, set_id)


@router.post("", response_model=SuccessResponse, status_code=status.HTTP_200_OK)
def save_set(
    payload: PracticeSetPayload,
    session: Session = Depends(get_session)
):
    """
    Save a practice set, replacing any stored tree with the same id.

    The whole tree is deleted and reinserted in one transaction; on failure
    nothing changes. Array order in the payload becomes the stored order.
    """
    save_practice_set(session, payload)
    return SuccessResponse()


@router.delete("/{set_id}", response_model=SuccessResponse)
def delete_set(
    set_id: str,
    session: Session = Depends(get_session)
):
    """Delete a practice set and everything under it. Succeeds for unknown ids too."""
    delete_practice_set(session, set_id)
    return SuccessResponse()


@router.post("/{set_id}/score", response_model=ScoreAnswersResponse)
def score_set(
    set_id: str,
    request: ScoreAnswersRequest,
    session: Session = Depends(get_session)
):
    """Score submitted answers for the reading and listening sections of a set."""
    practice_set = get_practice_set(session, set_id)
    return score_answers(practice_set, request.answers)
