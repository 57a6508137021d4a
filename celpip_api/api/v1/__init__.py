"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from celpip_api.api.v1.endpoints import auth, sets, attempts, evaluation, speech

api_router = APIRouter()

# Include all endpoint routers
# Note: Each router already defines its own prefix, so we don't add another one here
api_router.include_router(auth.router)
api_router.include_router(sets.router)
api_router.include_router(attempts.router)
api_router.include_router(evaluation.router)
api_router.include_router(speech.router)
