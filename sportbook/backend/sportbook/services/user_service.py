import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import security
from ..core.context import RequestContext
from ..core.errors import ConflictError
from ..db import models
from ..db.session import atomic

logger = logging.getLogger(__name__)


def context_for(user: models.User) -> RequestContext:
    return RequestContext(user_id=user.id, is_admin=user.is_admin)


def register_user(
    db: Session, email: str, password: str, name: str, phone: str | None = None
) -> models.User:
    email = email.strip().lower()
    if db.scalar(select(models.User.id).where(models.User.email == email)):
        raise ConflictError("User with this email already exists")
    user = models.User(
        email=email,
        name=name,
        phone=phone,
        password_hash=security.get_password_hash(password),
        role=models.UserRole.user,
    )
    try:
        with atomic(db):
            db.add(user)
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User with this email already exists") from exc
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user
