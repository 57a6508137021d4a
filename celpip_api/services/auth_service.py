"""
Auth service: signup and login against the user table.

Credentials are stored as salted PBKDF2 hashes:

    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

Rows created by the earlier system hold the plaintext credential instead. They
are still accepted once and rewritten in the salted format on that login.
"""
from typing import Optional, Tuple
import hashlib
import hmac
import logging
import secrets
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from celpip_api.core.config import settings
from celpip_api.core.exceptions import AuthenticationError, ConflictError
from celpip_api.models.models import User, UserRole
from celpip_api.schemas.utils import normalize_email

logger = logging.getLogger(__name__)

_PBKDF2_SCHEME = "pbkdf2_sha256"
_PBKDF2_DIGEST = "sha256"


def _pbkdf2_hash(password: str, salt_hex: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac(
        _PBKDF2_DIGEST,
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        iterations,
    ).hex()


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Hash a password with a fresh random salt."""
    iterations = iterations or settings.password_hash_iterations
    salt_hex = secrets.token_bytes(16).hex()
    return f"{_PBKDF2_SCHEME}${iterations}${salt_hex}${_pbkdf2_hash(password, salt_hex, iterations)}"


def verify_password(password: str, stored: str) -> Tuple[bool, bool]:
    """
    Check a password against a stored credential.

    Returns:
        (valid, needs_upgrade) where needs_upgrade is True for a legacy
        plaintext credential that matched
    """
    stored = stored or ""
    if stored.startswith(f"{_PBKDF2_SCHEME}$"):
        try:
            _, iterations, salt_hex, expected = stored.split("$")
            derived = _pbkdf2_hash(password, salt_hex, int(iterations))
        except ValueError:
            logger.warning("Malformed stored credential")
            return False, False
        return hmac.compare_digest(expected, derived), False

    valid = hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))
    return valid, valid


def register(session: Session, email: str, password: str, name: Optional[str] = None) -> User:
    """
    Create a user with the default role.

    Raises:
        ConflictError: If the email is already registered
    """
    email = normalize_email(email)
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("Email already exists")

    user = User(
        id=f"user-{uuid.uuid4().hex}",
        email=email,
        password_hash=hash_password(password),
        role=UserRole.USER,
        name=name,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email
        session.rollback()
        raise ConflictError("Email already exists") from e
    session.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    """
    Return the user for valid credentials.

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    user = session.exec(select(User).where(User.email == normalize_email(email))).first()
    if not user:
        raise AuthenticationError("Invalid credentials")

    valid, needs_upgrade = verify_password(password, user.password_hash)
    if not valid:
        raise AuthenticationError("Invalid credentials")

    if needs_upgrade:
        user.password_hash = hash_password(password)
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Upgraded legacy credential for user {user.id}")

    return user
