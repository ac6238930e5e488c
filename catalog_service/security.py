# catalog_service/security.py - session tokens and password hashing
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import CatalogConfig
from .errors import AuthenticationError
from .models import User

logger = logging.getLogger(__name__)

# Password Hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password):
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=CatalogConfig.ACCESS_TOKEN_EXPIRE_DAYS)
    )
    to_encode = {"sub": user_id, "exp": expire}
    return jwt.encode(
        to_encode, CatalogConfig.require_secret(), algorithm=CatalogConfig.ALGORITHM
    )


def decode_access_token(token: str) -> str:
    try:
        payload = jwt.decode(
            token, CatalogConfig.require_secret(), algorithms=[CatalogConfig.ALGORITHM]
        )
    except JWTError:
        raise AuthenticationError("Not authorized, invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Not authorized, invalid token")
    return user_id


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Not authorized, no token")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Not authorized, invalid token")
    return parts[1]


def authenticate(db: Session, authorization: Optional[str]) -> User:
    """Resolve an ``Authorization`` header to a freshly loaded user.

    The user is re-read on every call so role changes and removals apply
    to tokens that are already out in the wild.
    """
    user_id = decode_access_token(bearer_token(authorization))
    user = db.get(User, user_id)
    if user is None:
        logger.warning("Token for unknown user %s rejected", user_id)
        raise AuthenticationError("Not authorized, user not found")
    return user
