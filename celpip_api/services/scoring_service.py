"""
Scoring service: grades objective questions of a practice set.
"""
from typing import Dict, Iterator
import logging

from celpip_api.models.enums import PartLayout, QuestionType, SectionType
from celpip_api.schemas.practice_set import PracticeSetResponse, SectionResponse, QuestionResponse
from celpip_api.schemas.scoring import ScoreAnswersResponse

logger = logging.getLogger(__name__)

# Writing and speaking are scored by the evaluation collaborator
AUTO_GRADED_SECTION_TYPES = {SectionType.READING, SectionType.LISTENING}


def _section_questions(section: SectionResponse) -> Iterator[QuestionResponse]:
    for part in section.parts:
        if part.layout == PartLayout.SEGMENTED:
            for segment in part.segments:
                yield from segment.questions
        else:
            yield from part.questions


def score_answers(practice_set: PracticeSetResponse, answers: Dict[str, str]) -> ScoreAnswersResponse:
    """
    Score submitted answers against a practice set.

    Each auto-graded section scores the summed weight of its correctly answered
    questions. PASSAGE blocks are content, not questions, and are skipped.

    Args:
        practice_set: The set as read by the tree reader
        answers: Question id -> submitted answer

    Returns:
        Section scores keyed by section id, plus correct / possible counts
    """
    section_scores: Dict[str, float] = {}
    total_correct = 0
    total_possible = 0

    for section in practice_set.sections:
        if section.type not in AUTO_GRADED_SECTION_TYPES:
            continue

        score = 0.0
        for question in _section_questions(section):
            if question.type == QuestionType.PASSAGE:
                continue
            total_possible += 1
            if question.correct_answer is not None and answers.get(question.id) == question.correct_answer:
                score += question.weight
                total_correct += 1
        section_scores[section.id] = score

    logger.info(f"Scored set {practice_set.id}: {total_correct}/{total_possible} correct")
    return ScoreAnswersResponse(
        section_scores=section_scores,
        total_correct=total_correct,
        total_possible=total_possible,
    )
