# catalog_service/otp.py - one-time code issuance and verification
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import notifier
from .config import CatalogConfig
from .errors import (
    ExpiredError,
    InvalidCredentialError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from .models import User, utcnow
from .security import create_access_token, get_password_hash

logger = logging.getLogger(__name__)


def generate_otp(length: int = CatalogConfig.OTP_LENGTH) -> str:
    lower = 10 ** (length - 1)
    return str(lower + secrets.randbelow(9 * lower))


def _clean_identifier(identifier: Optional[str]) -> str:
    identifier = (identifier or "").strip()
    if not identifier:
        raise ValidationError("Email or phone number is required")
    return identifier


def _commit(db: Session, user: User, action: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise UnexpectedError(f"Error in {action}")
    db.refresh(user)


def generate_otp_for_user(db: Session, user: User) -> str:
    # a new code always replaces whatever was pending
    otp = generate_otp()
    user.otp = otp
    user.otp_expires = utcnow() + timedelta(minutes=CatalogConfig.OTP_EXPIRE_MINUTES)
    _commit(db, user, "login")
    notifier.deliver_code(user.email_or_phone, otp)
    return otp


def request_code(db: Session, identifier: Optional[str]) -> Tuple[str, User]:
    identifier = _clean_identifier(identifier)
    user = db.query(User).filter(User.email_or_phone == identifier).first()
    if user is None:
        user = User(email_or_phone=identifier, name=identifier)
        db.add(user)
        logger.info("Creating user for new identifier %s", identifier)
    otp = generate_otp_for_user(db, user)
    return otp, user


def register(
    db: Session,
    identifier: Optional[str],
    name: Optional[str] = None,
    password: Optional[str] = None,
) -> Tuple[str, User]:
    identifier = _clean_identifier(identifier)
    if db.query(User).filter(User.email_or_phone == identifier).first():
        raise ValidationError("User already exists")
    user = User(
        email_or_phone=identifier,
        name=(name or "").strip() or identifier,
        password_hash=get_password_hash(password) if password else None,
        is_verified=False,
    )
    db.add(user)
    otp = generate_otp_for_user(db, user)
    logger.info("Registered user %s", user.id)
    return otp, user


def verify_code(db: Session, user_id: Optional[str], otp: Optional[str]) -> Tuple[str, User]:
    """Check ``otp`` against the pending code of ``user_id``.

    On success the code is consumed, the user is marked verified and a session
    token is returned along with the user.
    """
    if not user_id or not otp:
        raise ValidationError("User ID and OTP are required")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    if user.otp is None or user.otp_expires is None:
        raise InvalidCredentialError("Invalid OTP")

    if user.otp_expires < utcnow():
        logger.info("Expired OTP submitted for user %s", user.id)
        raise ExpiredError("OTP has expired")

    if not hmac.compare_digest(user.otp.encode(), str(otp).strip().encode()):
        logger.info("Invalid OTP submitted for user %s", user.id)
        raise InvalidCredentialError("Invalid OTP")

    user.otp = None
    user.otp_expires = None
    user.is_verified = True
    _commit(db, user, "OTP verification")

    return create_access_token(user.id), user
