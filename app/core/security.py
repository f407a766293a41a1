# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidCredentialError, UnauthenticatedError
from app.db.session import get_db
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services import policy
from app.services.policy import Actor

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False: a missing header is reported as our own 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = UserRepository(db).find_by_email(email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_token_for_user(user: User) -> str:
    return create_access_token(
        data={"sub": user.id, "email": user.email, "role": user.role},
    )


def decode_access_token(token: str) -> Actor:
    """Resolve a bearer token back to the caller's {id, email, role}."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise InvalidCredentialError("Token inválido ou expirado.")

    user_id = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")
    if not user_id or not email or not role:
        raise InvalidCredentialError("Token inválido ou expirado.")
    return Actor(id=user_id, email=email, role=role)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    if credentials is None:
        raise UnauthenticatedError("Token não fornecido.")
    return decode_access_token(credentials.credentials)


def get_current_user(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> User:
    user = UserRepository(db).find_by_id(actor.id)
    if user is None:
        raise InvalidCredentialError("Usuário não encontrado.")
    return user


def get_current_teacher(actor: Actor = Depends(get_current_actor)) -> Actor:
    return policy.ensure_teacher(actor)

