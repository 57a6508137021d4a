"""
Models module - re-exports all models.

Allows imports like:
    from celpip_api.models.models import PracticeSet
"""
from celpip_api.models.enums import SectionType, QuestionType, PartLayout, UserRole
from celpip_api.models.practice_set import PracticeSet
from celpip_api.models.section import Section
from celpip_api.models.part import Part
from celpip_api.models.segment import Segment
from celpip_api.models.question import Question
from celpip_api.models.user import User
from celpip_api.models.attempt import Attempt

__all__ = [
    'SectionType',
    'QuestionType',
    'PartLayout',
    'UserRole',
    'PracticeSet',
    'Section',
    'Part',
    'Segment',
    'Question',
    'User',
    'Attempt',
]
