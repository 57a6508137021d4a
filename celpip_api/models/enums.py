"""
Model enums.
"""
from enum import Enum


class SectionType(str, Enum):
    """Skill tested by a section."""
    READING = "READING"
    WRITING = "WRITING"
    LISTENING = "LISTENING"
    SPEAKING = "SPEAKING"


class QuestionType(str, Enum):
    """Question kinds. PASSAGE blocks are content only and never scored."""
    MCQ = "MCQ"
    CLOZE = "CLOZE"
    PASSAGE = "PASSAGE"


class PartLayout(str, Enum):
    """Which child container a part uses."""
    DIRECT = "DIRECT"  # Questions hang off the part
    SEGMENTED = "SEGMENTED"  # Questions hang off the part's segments


class UserRole(str, Enum):
    """User roles."""
    ADMIN = "admin"
    USER = "user"
