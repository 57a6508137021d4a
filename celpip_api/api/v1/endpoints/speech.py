"""
Speech synthesis endpoint.
"""
from fastapi import APIRouter

from celpip_api.schemas.evaluation import GenerateSpeechRequest, GenerateSpeechResponse
from celpip_api.services.speech_service import generate_speech, to_data_url

router = APIRouter(tags=["speech"])


@router.post("/generate-speech", response_model=GenerateSpeechResponse)
def generate_speech_endpoint(request: GenerateSpeechRequest):
    """Generate listening audio. Dialogue lines like "Man: ..." get distinct voices."""
    return GenerateSpeechResponse(audio_data=to_data_url(generate_speech(request.text)))
