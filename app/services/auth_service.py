# app/services/auth_service.py
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InvalidCredentialError, MissingFieldError
from app.core.security import authenticate_user, create_token_for_user, get_password_hash
from app.models.user import User, normalize_email
from app.repositories.user_repository import UserRepository
from app.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def register_user(db: Session, *, obj_in: RegisterRequest) -> User:
    """
    Create a teacher or student account. The password is only hashed after
    every field passed validation.
    """
    if not (obj_in.name and obj_in.email and obj_in.password and obj_in.role):
        raise MissingFieldError("Todos os campos são obrigatórios.")

    repo = UserRepository(db)
    email = normalize_email(obj_in.email)
    if repo.email_exists(email):
        raise ConflictError("Email já cadastrado.")

    user = User(name=obj_in.name.strip(), email=email, role=obj_in.role)
    user.validate(password=obj_in.password)
    user.password_hash = get_password_hash(obj_in.password)

    user = repo.create(user)
    logger.info("Registered %s %s", user.role, user.id)
    return user


def login(db: Session, *, obj_in: LoginRequest) -> tuple[User, str]:
    user = authenticate_user(db, obj_in.email, obj_in.password)
    if not user:
        raise InvalidCredentialError()
    return user, create_token_for_user(user)
