"""
Writing evaluation through the Gemini API.
"""
import logging

from pydantic import ValidationError as PydanticValidationError

from celpip_api.core.config import settings
from celpip_api.core.exceptions import CollaboratorError
from celpip_api.schemas.evaluation import WritingEvaluation
from celpip_api.services import gemini_client

logger = logging.getLogger(__name__)

WRITING_EXAMINER_INSTRUCTION = """You are a certified CELPIP Writing examiner. Score the candidate's response the way the official CELPIP Writing performance standards do: fairly, realistically and consistently.

Judge four pillars:
1. Content / Coherence: relevance, development of ideas, logical flow and paragraphing.
2. Vocabulary: range, precision and natural word choice without heavy repetition.
3. Readability: grammar, sentence variety, spelling and punctuation, weighted by how much errors affect clarity.
4. Task Fulfillment: every required point covered, tone suited to the reader, word count respected.

Task 1 is an email: its purpose must be clear, each bullet point must be addressed and the register must match the recipient.
Task 2 is a survey response: the candidate must state a clear preference and support it. Candidates may invent reasons or challenge the background information; judge how persuasively and clearly the opinion is expressed, not its real-world accuracy.
If both tasks are present, evaluate each independently.

Assign one holistic CLB level from 1 to 12 based on overall communicative effectiveness. Do not inflate scores for safe but shallow answers and do not penalize minor slips that leave meaning intact.

Return JSON only, with:
- bandScore: integer CLB level.
- feedback: Markdown with the headings "### Content / Coherence", "### Vocabulary", "### Readability" and "### Task Fulfillment", each followed by at least one short paragraph.
- corrections: Markdown list of 3 to 5 real errors, one per line, as "* **Error:** original -> **Fix:** correction (reason)".
"""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "bandScore": {"type": "NUMBER", "description": "CELPIP level 0-12"},
        "feedback": {"type": "STRING", "description": "Markdown feedback by criterion"},
        "corrections": {"type": "STRING", "description": "Specific errors and fixes"},
    },
    "required": ["bandScore", "feedback", "corrections"],
}


def evaluate_writing(question_text: str, user_response: str) -> WritingEvaluation:
    """
    Score a writing response.

    Without a configured API key a placeholder evaluation is returned with
    ``error`` set, so callers keep working offline.

    Args:
        question_text: Task instructions
        user_response: Candidate's response

    Returns:
        Band score with markdown feedback and corrections

    Raises:
        CollaboratorError: If the Gemini call fails or returns an unusable result
    """
    if not gemini_client.is_configured():
        logger.warning("Writing evaluation requested but no Gemini API key is configured")
        return WritingEvaluation(
            band_score=0,
            feedback="API key missing. No evaluation was performed.",
            corrections="",
            error="Evaluation service not configured",
        )

    payload = {
        "contents": [{
            "parts": [{
                "text": f"Task Instructions: {question_text}\n\nCandidate Response: {user_response}"
            }]
        }],
        "systemInstruction": {
            "parts": [{"text": WRITING_EXAMINER_INSTRUCTION}]
        },
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }

    try:
        data = gemini_client.generate_content(settings.gemini_text_model, payload)
        result = gemini_client.parse_json_text(gemini_client.extract_text(data))
        return WritingEvaluation.model_validate(result)
    except CollaboratorError as e:
        logger.error(f"Writing evaluation failed: {str(e)}")
        raise CollaboratorError("Failed to evaluate writing.") from e
    except PydanticValidationError as e:
        logger.error(f"Writing evaluation returned an unexpected shape: {str(e)}")
        raise CollaboratorError("Failed to evaluate writing.") from e
