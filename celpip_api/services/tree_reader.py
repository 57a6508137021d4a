"""
Tree reader: reconstructs practice set trees from the relational tables.

Each level is fetched with one query ordered by parent and position, and the
nested response is assembled in memory. All queries run in a single
transaction so a concurrent save is seen either entirely or not at all.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
from collections import defaultdict
from typing import Dict, List
import logging

from sqlmodel import Session, select

from celpip_api.core.exceptions import NotFoundError
from celpip_api.models.models import PracticeSet, Section, Part, Segment, Question, PartLayout
from celpip_api.schemas.practice_set import (
    PracticeSetResponse,
    SectionResponse,
    PartResponse,
    SegmentResponse,
    QuestionResponse,
)

logger = logging.getLogger(__name__)


def _begin_snapshot(session: Session) -> bool:
    """
    Open the read transaction.

    On PostgreSQL the transaction runs at REPEATABLE READ so every statement
    shares one snapshot; under READ COMMITTED a save committing between two
    statements would mix old sections with new parts. On SQLite the engine
    emits an explicit BEGIN (see core.database), so the WAL snapshot taken by
    the first SELECT holds until the transaction ends.

    Returns:
        True if this call opened the transaction (and should close it)
    """
    if session.in_transaction():
        return False
    if session.get_bind().dialect.name == "postgresql":
        session.connection(execution_options={"isolation_level": "REPEATABLE READ"})
    return True


def _group_by(rows, key: str) -> Dict[str, list]:
    """Group rows by a parent key, keeping the query's position order."""
    grouped: Dict[str, list] = defaultdict(list)
    for row in rows:
        grouped[getattr(row, key)].append(row)
    return grouped


def _question_response(question: Question) -> QuestionResponse:
    return QuestionResponse(
        id=question.id,
        part_id=question.part_id,
        segment_id=question.segment_id,
        text=question.text,
        type=question.type,
        options=list(question.options or []),
        correct_answer=question.correct_answer,
        weight=question.weight,
        audio_data=question.audio_data,
        image_data=question.image_data,
        position=question.position,
    )


def _read_trees(session: Session, *set_filters) -> List[PracticeSetResponse]:
    """
    Read every set matching set_filters with its complete tree.

    Descendant queries join back to practice_set and repeat the filters rather
    than passing long IN lists of ids.
    """
    opened = _begin_snapshot(session)
    try:
        sets = session.exec(
            select(PracticeSet)
            .where(*set_filters)
            .order_by(PracticeSet.created_at, PracticeSet.id)
        ).all()
        if not sets:
            return []

        sections = session.exec(
            select(Section)
            .join(PracticeSet, Section.set_id == PracticeSet.id)
            .where(*set_filters)
            .order_by(Section.set_id, Section.position)
        ).all()
        parts = session.exec(
            select(Part)
            .join(Section, Part.section_id == Section.id)
            .join(PracticeSet, Section.set_id == PracticeSet.id)
            .where(*set_filters)
            .order_by(Part.section_id, Part.position)
        ).all()
        segments = session.exec(
            select(Segment)
            .join(Part, Segment.part_id == Part.id)
            .join(Section, Part.section_id == Section.id)
            .join(PracticeSet, Section.set_id == PracticeSet.id)
            .where(*set_filters)
            .order_by(Segment.part_id, Segment.position)
        ).all()
        part_questions = session.exec(
            select(Question)
            .join(Part, Question.part_id == Part.id)
            .join(Section, Part.section_id == Section.id)
            .join(PracticeSet, Section.set_id == PracticeSet.id)
            .where(*set_filters)
            .order_by(Question.part_id, Question.position)
        ).all()
        segment_questions = session.exec(
            select(Question)
            .join(Segment, Question.segment_id == Segment.id)
            .join(Part, Segment.part_id == Part.id)
            .join(Section, Part.section_id == Section.id)
            .join(PracticeSet, Section.set_id == PracticeSet.id)
            .where(*set_filters)
            .order_by(Question.segment_id, Question.position)
        ).all()

        trees = _assemble(sets, sections, parts, segments, part_questions, segment_questions)
    finally:
        # Read-only; a rollback ends the transaction on the error path too
        if opened:
            session.rollback()

    logger.debug(
        f"Read {len(trees)} practice set(s): {len(sections)} sections, {len(parts)} parts, "
        f"{len(segments)} segments, {len(part_questions) + len(segment_questions)} questions"
    )
    return trees


def _assemble(sets, sections, parts, segments, part_questions, segment_questions) -> List[PracticeSetResponse]:
    """Nest the flat, position-ordered rows into response trees."""
    sections_by_set = _group_by(sections, "set_id")
    parts_by_section = _group_by(parts, "section_id")
    segments_by_part = _group_by(segments, "part_id")
    questions_by_part = _group_by(part_questions, "part_id")
    questions_by_segment = _group_by(segment_questions, "segment_id")

    def build_part(part: Part) -> PartResponse:
        response = PartResponse(
            id=part.id,
            section_id=part.section_id,
            content_text=part.content_text,
            image_data=part.image_data,
            audio_data=part.audio_data,
            instructions=part.instructions,
            timer_seconds=part.timer_seconds,
            prep_seconds=part.prep_seconds,
            layout=part.layout,
            position=part.position,
        )
        if part.layout == PartLayout.SEGMENTED:
            response.segments = [
                SegmentResponse(
                    id=segment.id,
                    part_id=segment.part_id,
                    content_text=segment.content_text,
                    audio_data=segment.audio_data,
                    prep_seconds=segment.prep_seconds,
                    timer_seconds=segment.timer_seconds,
                    position=segment.position,
                    questions=[_question_response(q) for q in questions_by_segment.get(segment.id, [])],
                )
                for segment in segments_by_part.get(part.id, [])
            ]
        else:
            response.questions = [_question_response(q) for q in questions_by_part.get(part.id, [])]
        return response

    return [
        PracticeSetResponse(
            id=practice_set.id,
            title=practice_set.title,
            description=practice_set.description,
            is_published=practice_set.is_published,
            sections=[
                SectionResponse(
                    id=section.id,
                    set_id=section.set_id,
                    type=section.type,
                    title=section.title,
                    position=section.position,
                    parts=[build_part(part) for part in parts_by_section.get(section.id, [])],
                )
                for section in sections_by_set.get(practice_set.id, [])
            ],
        )
        for practice_set in sets
    ]


def list_practice_sets(session: Session, published_only: bool = False) -> List[PracticeSetResponse]:
    """
    Read all practice sets with their complete, ordered trees.

    Args:
        session: Database session
        published_only: Only return sets whose published flag is set

    Returns:
        Trees ordered by creation time; every child list is ordered by position
    """
    if published_only:
        return _read_trees(session, PracticeSet.is_published == True)  # noqa: E712
    return _read_trees(session)


def get_practice_set(session: Session, set_id: str) -> PracticeSetResponse:
    """
    Read one practice set with its complete, ordered tree.

    Raises:
        NotFoundError: If no set has this id
    """
    trees = _read_trees(session, PracticeSet.id == set_id)
    if not trees:
        raise NotFoundError(f"Practice set {set_id} not found")
    return trees[0]
