"""
Minimal client for the Gemini generateContent REST endpoint.
"""
from typing import Any, Dict, Optional
import json
import logging

import requests

from celpip_api.core.config import settings
from celpip_api.core.exceptions import CollaboratorError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


def is_configured() -> bool:
    return bool(settings.google_gemini_api_key)


def generate_content(model_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    POST a generateContent request and return the decoded JSON body.

    Args:
        model_name: Gemini model, e.g. "gemini-2.5-flash"
        payload: Request body (contents, generationConfig, systemInstruction)

    Returns:
        Parsed response body

    Raises:
        CollaboratorError: If the key is missing, the request fails, or the body is not JSON
    """
    api_key = settings.google_gemini_api_key
    if not api_key:
        raise CollaboratorError("Google Gemini API key not configured")

    try:
        response = requests.post(
            f"{GEMINI_BASE_URL}/{model_name}:generateContent?key={api_key}",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.gemini_timeout_seconds,
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        error_msg = f"Gemini API request failed: {str(e)}"
        if getattr(e, 'response', None) is not None:
            error_msg += f" - Status: {e.response.status_code}, Body: {e.response.text[:500]}"
        logger.error(error_msg)
        raise CollaboratorError("Gemini API request failed") from e
    except ValueError as e:
        logger.error(f"Gemini API returned a non-JSON body: {str(e)}")
        raise CollaboratorError("Gemini API returned an invalid response") from e

    usage = data.get('usageMetadata', {})
    logger.info(
        f"Gemini {model_name}: {usage.get('promptTokenCount', 0)} prompt tokens, "
        f"{usage.get('candidatesTokenCount', 0)} output tokens"
    )
    return data


def _first_part(data: Dict[str, Any]) -> Dict[str, Any]:
    candidates = data.get('candidates') or []
    if not candidates:
        raise CollaboratorError("Gemini response missing candidates (it may have been blocked)")
    parts = candidates[0].get('content', {}).get('parts') or []
    if not parts:
        raise CollaboratorError("Gemini response missing content parts")
    return parts[0]


def extract_text(data: Dict[str, Any]) -> str:
    """Return the text of the first candidate."""
    text = (_first_part(data).get('text') or '').strip()
    if not text:
        raise CollaboratorError("Gemini returned an empty response")
    return text


def extract_inline_data(data: Dict[str, Any]) -> Optional[str]:
    """Return the base64 inline data of the first candidate, if any."""
    return _first_part(data).get('inlineData', {}).get('data')


def parse_json_text(text: str) -> Dict[str, Any]:
    """
    Parse model output as a JSON object, tolerating a markdown code fence.

    Raises:
        CollaboratorError: If the text is not a JSON object
    """
    text = text.strip()
    if text.startswith('```'):
        lines = text.split('\n')
        text = '\n'.join(lines[1:])
        if text.rstrip().endswith('```'):
            text = text.rstrip()[:-3]

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse Gemini JSON response: {e}. Response text: {text[:500]}")
        raise CollaboratorError("Gemini returned invalid JSON") from e

    if not isinstance(parsed, dict):
        raise CollaboratorError("Gemini output must be a JSON object")
    return parsed
