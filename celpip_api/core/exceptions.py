"""
Application exceptions. main.py maps each one to an HTTP status code.
"""


class CelpipException(Exception):
    """Base class; unmapped subclasses surface as 500."""
    pass


class ValidationError(CelpipException):
    """Input passed schema validation but breaks a business rule (e.g. repeated ids in a tree)."""
    pass


class NotFoundError(CelpipException):
    """A practice set or other resource does not exist."""
    pass


class ConflictError(CelpipException):
    """A write collides with stored data: an id owned by another set, a taken email, a repeated attempt id."""
    pass


class AuthenticationError(CelpipException):
    """Unknown email or wrong password."""
    pass


class StoreError(CelpipException):
    """A database transaction failed and has been rolled back."""
    pass


class CollaboratorError(CelpipException):
    """The evaluation or speech service failed or returned something unusable."""
    pass
