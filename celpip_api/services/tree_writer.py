"""
Tree writer: atomically replaces the content tree rooted at a practice set.

A save never patches. The stored tree for the set id is deleted (the database
cascades the delete to sections, parts, segments and questions) and the
submitted tree is inserted in its place, all inside one transaction. Sibling
order is taken from array order in the payload.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional
import logging

from sqlalchemy import delete, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from celpip_api.core.exceptions import ConflictError, StoreError, ValidationError
from celpip_api.models.models import PracticeSet, Section, Part, Segment, Question, PartLayout
from celpip_api.schemas.practice_set import PracticeSetPayload, QuestionPayload

logger = logging.getLogger(__name__)

TREE_MODELS = (PracticeSet, Section, Part, Segment, Question)


def validate_tree(payload: PracticeSetPayload) -> None:
    """
    Check a tree payload before any statement is issued.

    Ids must be unique per entity type within the payload. Container exclusivity
    on parts is already enforced by the payload schema.

    Raises:
        ValidationError: If an id repeats within the payload
    """
    ids: Dict[str, List[str]] = {"section": [], "part": [], "segment": [], "question": []}
    for section in payload.sections:
        ids["section"].append(section.id)
        for part in section.parts:
            ids["part"].append(part.id)
            ids["question"].extend(q.id for q in part.questions)
            for segment in part.segments:
                ids["segment"].append(segment.id)
                ids["question"].extend(q.id for q in segment.questions)

    for entity, values in ids.items():
        duplicates = sorted(value for value, count in Counter(values).items() if count > 1)
        if duplicates:
            raise ValidationError(f"Duplicate {entity} id(s) in practice set {payload.id}: {', '.join(duplicates)}")


def _lock_set_id(session: Session, set_id: str) -> None:
    """
    Serialize writers of the same set id for the rest of the transaction.

    Row locks alone are not enough on PostgreSQL: a second writer blocked on the
    DELETE resumes after the first commits, finds the old row gone, deletes
    nothing and then collides with the freshly inserted primary key. The
    advisory lock also covers the first save of an id, where no row exists yet.
    """
    if session.get_bind().dialect.name == "postgresql":
        session.exec(text("SELECT pg_advisory_xact_lock(hashtext(:set_id))").bindparams(set_id=set_id))


def _forget_tree_objects(session: Session) -> None:
    """
    Drop loaded tree rows from the identity map.

    Rows removed by the database cascade are still mapped, and a new row whose
    id matches any mapped row would fail at flush before reaching the database.
    """
    for obj in list(session.identity_map.values()):
        if isinstance(obj, TREE_MODELS):
            session.expunge(obj)


def _delete_tree(session: Session, set_id: str) -> Optional[datetime]:
    """
    Delete the set row for set_id, relying on ON DELETE CASCADE for descendants.

    Returns:
        The deleted set's created_at, or None if no set existed
    """
    created_at = session.exec(
        select(PracticeSet.created_at).where(PracticeSet.id == set_id).with_for_update()
    ).first()
    if created_at is not None:
        session.exec(delete(PracticeSet).where(PracticeSet.id == set_id))
    _forget_tree_objects(session)
    return created_at


def _insert(session: Session, row) -> None:
    session.add(row)
    session.flush()


def _insert_questions(
    session: Session,
    questions: List[QuestionPayload],
    counts: Counter,
    part_id: Optional[str] = None,
    segment_id: Optional[str] = None,
) -> None:
    for position, question in enumerate(questions):
        _insert(session, Question(
            id=question.id,
            part_id=part_id,
            segment_id=segment_id,
            text=question.text,
            type=question.type,
            options=list(question.options),
            correct_answer=question.correct_answer,
            weight=question.weight,
            audio_data=question.audio_data,
            image_data=question.image_data,
            position=position,
        ))
        counts["questions"] += 1


def _insert_tree(session: Session, payload: PracticeSetPayload, created_at: Optional[datetime]) -> Counter:
    """Insert the set and walk its tree top-down. Positions come from array indices."""
    counts: Counter = Counter()

    _insert(session, PracticeSet(
        id=payload.id,
        title=payload.title,
        description=payload.description,
        is_published=payload.is_published,
        created_at=created_at or datetime.utcnow(),
    ))

    for section_position, section in enumerate(payload.sections):
        _insert(session, Section(
            id=section.id,
            set_id=payload.id,
            type=section.type,
            title=section.title,
            position=section_position,
        ))
        counts["sections"] += 1

        for part_position, part in enumerate(section.parts):
            _insert(session, Part(
                id=part.id,
                section_id=section.id,
                content_text=part.content_text,
                image_data=part.image_data,
                audio_data=part.audio_data,
                instructions=part.instructions,
                timer_seconds=part.effective_timer_seconds,
                prep_seconds=part.prep_seconds,
                layout=part.layout,
                position=part_position,
            ))
            counts["parts"] += 1

            if part.layout == PartLayout.SEGMENTED:
                for segment_position, segment in enumerate(part.segments):
                    _insert(session, Segment(
                        id=segment.id,
                        part_id=part.id,
                        content_text=segment.content_text,
                        audio_data=segment.audio_data,
                        prep_seconds=segment.prep_seconds,
                        timer_seconds=segment.timer_seconds,
                        position=segment_position,
                    ))
                    counts["segments"] += 1
                    _insert_questions(session, segment.questions, counts, segment_id=segment.id)
            else:
                _insert_questions(session, part.questions, counts, part_id=part.id)

    return counts


def save_practice_set(session: Session, payload: PracticeSetPayload) -> Dict[str, int]:
    """
    Replace the tree stored under payload.id with payload, atomically.

    Saving an id that does not exist yet is a plain insert. On any failure the
    transaction is rolled back before the error propagates, so the store holds
    either the previous tree intact or, for a first save, nothing.

    Args:
        session: Database session with no transaction in progress
        payload: The complete tree

    Returns:
        Dict with counts of inserted sections, parts, segments and questions

    Raises:
        ValidationError: If the payload repeats an id
        ConflictError: If a constraint fails, e.g. an id already used by another set
        StoreError: If the database fails for any other reason
    """
    validate_tree(payload)

    try:
        _lock_set_id(session, payload.id)
        previous_created_at = _delete_tree(session, payload.id)
        counts = _insert_tree(session, payload, previous_created_at)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.error(f"Rolled back save of practice set {payload.id}: {e.orig}")
        raise ConflictError(
            f"Practice set {payload.id} conflicts with existing content (an id is already in use)"
        ) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Rolled back save of practice set {payload.id}: {str(e)}")
        raise StoreError(f"Failed to save practice set {payload.id}") from e
    except Exception:
        session.rollback()
        logger.error(f"Rolled back save of practice set {payload.id}", exc_info=True)
        raise

    logger.info(
        f"Saved practice set {payload.id} ({'replaced' if previous_created_at else 'created'}): "
        f"{counts['sections']} sections, {counts['parts']} parts, "
        f"{counts['segments']} segments, {counts['questions']} questions"
    )
    return {
        'sections': counts['sections'],
        'parts': counts['parts'],
        'segments': counts['segments'],
        'questions': counts['questions'],
    }


def delete_practice_set(session: Session, set_id: str) -> bool:
    """
    Delete the tree rooted at set_id. Deleting an absent id is not an error.

    Returns:
        True if a set was deleted, False if none existed

    Raises:
        StoreError: If the database fails; the transaction is rolled back
    """
    try:
        _lock_set_id(session, set_id)
        deleted = _delete_tree(session, set_id) is not None
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Rolled back delete of practice set {set_id}: {str(e)}")
        raise StoreError(f"Failed to delete practice set {set_id}") from e

    if deleted:
        logger.info(f"Deleted practice set {set_id} and its content tree")
    return deleted
