import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError
from app.models.user import User, normalize_email

logger = logging.getLogger(__name__)


class UserRepository:
    """User lookups and writes."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: User) -> User:
        # two registrations can pass email_exists at the same time;
        # the unique index on email decides
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email já cadastrado.") from e
        self.db.refresh(user)
        return user

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        """Includes the password hash; callers must not serialize it."""
        return (
            self.db.query(User)
            .filter(User.email == normalize_email(email))
            .first()
        )

    def find_by_role(self, role: str) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == role)
            .order_by(User.created_at.desc())
            .all()
        )

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def update(self, user_id: str, patch: dict) -> Optional[User]:
        user = self.find_by_id(user_id)
        if user is None:
            return None
        for field, value in patch.items():
            setattr(user, field, value)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email já está em uso.") from e
        self.db.refresh(user)
        return user

    def delete(self, user_id: str) -> bool:
        user = self.find_by_id(user_id)
        if user is None:
            return False
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted user: %s", user_id)
        return True

    def email_exists(self, email: str) -> bool:
        return (
            self.db.query(User.id)
            .filter(User.email == normalize_email(email))
            .first()
            is not None
        )
