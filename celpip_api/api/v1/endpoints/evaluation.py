"""
Writing evaluation endpoint.
"""
from fastapi import APIRouter

from celpip_api.schemas.evaluation import EvaluateWritingRequest, WritingEvaluation
from celpip_api.services.evaluation_service import evaluate_writing

router = APIRouter(tags=["evaluation"])


@router.post("/evaluate-writing", response_model=WritingEvaluation)
def evaluate_writing_endpoint(request: EvaluateWritingRequest):
    """
    Score a writing response with the AI examiner.

    Runs in the threadpool since the upstream call blocks for several seconds.
    """
    return evaluate_writing(request.question_text, request.user_response)
