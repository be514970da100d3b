import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy import or_
from sqlalchemy.orm import Session

from lims.config import settings
from lims.models.user import User, UserRole

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


def create_access_token(user: User) -> str:
    payload = {
        "sub": user.id,
        "username": user.username,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except jwt.InvalidTokenError:
        return None


def authenticate(db: Session, login: str, password: str) -> User | None:
    """Look the user up by username or e-mail."""
    user = (
        db.query(User)
        .filter(or_(User.username == login, User.email == login), User.active.is_(True))
        .first()
    )
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    display_name: str = "",
    role: str = UserRole.USER.value,
) -> User:
    if role not in {r.value for r in UserRole}:
        raise ValueError(f"Invalid role '{role}'")
    existing = db.query(User).filter(or_(User.username == username, User.email == email)).first()
    if existing:
        raise ValueError("User with that email or username already exists")
    user = User(
        username=username,
        email=email,
        display_name=display_name or username,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s user %s", role, username)
    return user


def update_user(
    db: Session,
    user: User,
    display_name: str | None = None,
    email: str | None = None,
    role: str | None = None,
    active: bool | None = None,
    password: str | None = None,
) -> User:
    if role is not None:
        if role not in {r.value for r in UserRole}:
            raise ValueError(f"Invalid role '{role}'")
        user.role = role
    if email is not None and email != user.email:
        if db.query(User).filter(User.email == email, User.id != user.id).first():
            raise ValueError("User with that email already exists")
        user.email = email
    if display_name is not None:
        user.display_name = display_name
    if active is not None:
        user.active = active
    if password:
        user.password_hash = hash_password(password)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s (role=%s, active=%s)", user.username, user.role, user.active)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def delete_user(db: Session, user_id: str) -> bool:
    user = get_user_by_id(db, user_id)
    if not user:
        return False
    db.delete(user)
    db.commit()
    return True


def ensure_default_admin(db: Session) -> None:
    """Create default admin user if no users exist."""
    count = db.query(User).count()
    if count == 0:
        create_user(
            db,
            username=settings.DEFAULT_ADMIN_USERNAME,
            email=settings.DEFAULT_ADMIN_EMAIL,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            display_name="Admin",
            role=UserRole.ADMIN.value,
        )
