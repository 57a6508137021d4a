"""
Shared schema base classes and helpers.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """
    Base schema whose JSON keys are camelCase (``contentText``, ``isPublished``).

    Snake_case keys are accepted on input as well.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SuccessResponse(BaseModel):
    """Plain acknowledgement."""
    success: bool = True


def normalize_email(v: Optional[str]) -> Optional[str]:
    """
    Normalize an email address for storage and lookup.

    Args:
        v: Raw email value (can be None)

    Returns:
        Trimmed, lower-cased email, or None
    """
    if v is None:
        return None
    return v.strip().lower()
