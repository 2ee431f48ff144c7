"""Authentication service for JWT, refresh token and password handling."""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.config import get_settings
from bookstore.exceptions import ConflictError, ForbiddenError, UnauthorizedError
from bookstore.models.refresh_token import RefreshToken
from bookstore.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Same message for unknown email, deleted account and wrong password
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
DEFAULT_DEVICE = "Unknown Device"

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_uid: str) -> str:
    """Create a short-lived JWT access token."""
    now = datetime.now(UTC)
    to_encode = {
        "sub": user_uid,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token.

    Raises:
        UnauthorizedError: if the token is expired, malformed, signed with
            the wrong key or is not an access token.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise UnauthorizedError("Not authorized, token expired") from e
    except JWTError as e:
        raise UnauthorizedError("Not authorized, invalid token") from e

    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise UnauthorizedError("Not authorized, invalid token")
    return payload


def create_refresh_token(user_uid: str) -> tuple[str, datetime]:
    """Create a long-lived JWT refresh token.

    Returns:
        The encoded token and its expiry time.
    """
    now = datetime.now(UTC)
    expires_at = now + timedelta(days=settings.refresh_token_expire_days)
    to_encode = {
        "sub": user_uid,
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(to_encode, settings.jwt_refresh_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_refresh_token(token: str) -> dict:
    """Decode and validate a JWT refresh token.

    Raises:
        ForbiddenError: if the token is expired or invalid.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_refresh_secret, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError as e:
        raise ForbiddenError("Refresh token expired, please login again") from e
    except JWTError as e:
        raise ForbiddenError("Invalid refresh token") from e

    if payload.get("type") != REFRESH_TOKEN_TYPE or not payload.get("sub"):
        raise ForbiddenError("Invalid refresh token")
    return payload


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a live (not deleted) user by email."""
    return User.live(db).filter(User.email == email.strip().lower()).first()


def get_user_by_uid(db: Session, uid: str) -> User | None:
    """Get a live (not deleted) user by public id."""
    return User.live(db).filter(User.uid == uid).first()


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Raises:
        UnauthorizedError: with the same message whether the account is
            missing, deleted or the password is wrong.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
    return user


def create_user(
    db: Session, name: str, email: str, password: str, age: int | None = None
) -> User:
    """Create a new user.

    Raises:
        ConflictError: if a live user already has this email.
    """
    email = email.strip().lower()
    if get_user_by_email(db, email):
        raise ConflictError("User with this email already exists")

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        age=age,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise ConflictError("User with this email already exists") from e
    db.refresh(user)
    logger.info(f"Registered user {user.uid}")
    return user


def issue_refresh_token(
    db: Session, user: User, device: str | None = None, ip: str | None = None
) -> str:
    """Issue a refresh token for a user and remember it."""
    token, expires_at = create_refresh_token(user.uid)
    db.add(
        RefreshToken(
            user_id=user.id,
            token=token,
            device=device or DEFAULT_DEVICE,
            ip=ip,
            expires_at=expires_at,
        )
    )
    db.commit()
    return token


def refresh_access_token(db: Session, token: str) -> str:
    """Exchange a currently issued refresh token for a new access token.

    Raises:
        ForbiddenError: if the token is invalid, expired, revoked, or its
            user is gone.
    """
    payload = decode_refresh_token(token)

    record = (
        db.query(RefreshToken)
        .join(User, RefreshToken.user_id == User.id)
        .filter(
            RefreshToken.token == token,
            RefreshToken.expires_at > datetime.now(UTC),
            User.uid == payload["sub"],
            User.deleted_at.is_(None),
        )
        .first()
    )
    if record is None:
        logger.warning("Rejected refresh token that is not currently issued")
        raise ForbiddenError("Invalid or expired refresh token")

    return create_access_token(record.user.uid)


def revoke_refresh_tokens(
    db: Session, user: User, token: str | None = None, device: str | None = None
) -> int:
    """Revoke a user's refresh tokens matching the token or the device.

    Returns:
        Number of revoked tokens.
    """
    if not token and not device:
        return 0

    query = db.query(RefreshToken).filter(RefreshToken.user_id == user.id)
    if token and device:
        query = query.filter((RefreshToken.token == token) | (RefreshToken.device == device))
    elif token:
        query = query.filter(RefreshToken.token == token)
    else:
        query = query.filter(RefreshToken.device == device)

    revoked = query.delete(synchronize_session=False)
    db.commit()
    logger.info(f"Revoked {revoked} refresh token(s) for user {user.uid}")
    return revoked


def revoke_all_refresh_tokens(db: Session, user: User) -> int:
    """Revoke every refresh token of a user. The caller commits."""
    return (
        db.query(RefreshToken)
        .filter(RefreshToken.user_id == user.id)
        .delete(synchronize_session=False)
    )


def purge_expired_refresh_tokens(db: Session, now: datetime | None = None) -> int:
    """Delete refresh tokens whose expiry has passed.

    Returns:
        Number of deleted tokens.
    """
    now = now or datetime.now(UTC)
    purged = (
        db.query(RefreshToken)
        .filter(RefreshToken.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()
    return purged
