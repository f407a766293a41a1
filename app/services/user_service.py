# app/services/user_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    FieldError,
    ForbiddenError,
    InvalidFormatError,
    NotFoundError,
    raise_for_errors,
)
from app.models.user import Role, User, is_valid_email, normalize_email
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserUpdate
from app.services import policy
from app.services.activity_service import require_valid_id
from app.services.policy import Actor

logger = logging.getLogger(__name__)

_ROLE_LABELS = {Role.TEACHER.value: "Professor", Role.STUDENT.value: "Aluno"}


def list_users_by_role(db: Session, *, actor: Optional[Actor], role: Role) -> List[User]:
    policy.require_actor(actor)
    return UserRepository(db).find_by_role(role.value)


def _load_target(repo: UserRepository, user_id: str, role: Optional[Role]) -> User:
    require_valid_id(user_id, "user_id")
    user = repo.find_by_id(user_id)
    label = _ROLE_LABELS.get(role.value, "Usuário") if role else "Usuário"
    if user is None:
        raise NotFoundError(f"{label} não encontrado.")
    if role is not None and user.role != role:
        raise InvalidFormatError(
            f"O usuário especificado não é um {label.lower()}.", field="id"
        )
    return user


def _ensure_can_manage(actor: Actor, user: User, action: str) -> None:
    # students manage only themselves, teachers manage anyone
    if actor.role == Role.STUDENT and str(actor.id) != str(user.id):
        raise ForbiddenError(f"Você não tem permissão para {action} este usuário.")


def update_user(
    db: Session,
    *,
    actor: Optional[Actor],
    user_id: str,
    obj_in: UserUpdate,
    role: Optional[Role] = None,
) -> User:
    """
    Update name and/or email. Role and password never change here.
    """
    actor = policy.require_actor(actor)
    repo = UserRepository(db)
    user = _load_target(repo, user_id, role)
    _ensure_can_manage(actor, user, "atualizar")

    update_data = obj_in.model_dump(exclude_unset=True)
    patch = {}
    errors = []
    if "name" in update_data:
        name = update_data["name"]
        if not name or not name.strip():
            errors.append(FieldError("missing_field", "name", "Nome não pode ser vazio."))
        else:
            patch["name"] = name.strip()
    if update_data.get("email"):
        email = normalize_email(update_data["email"])
        if not is_valid_email(email):
            errors.append(FieldError("invalid_format", "email", "Email inválido."))
        elif email != user.email:
            if repo.email_exists(email):
                raise ConflictError("Email já está em uso.")
            patch["email"] = email
    raise_for_errors(errors)

    if not patch:
        return user
    user = repo.update(user.id, patch)
    logger.info("Updated user %s: %s", user.id, sorted(patch))
    return user


def delete_user(
    db: Session,
    *,
    actor: Optional[Actor],
    user_id: str,
    role: Optional[Role] = None,
) -> None:
    actor = policy.require_actor(actor)
    repo = UserRepository(db)
    user = _load_target(repo, user_id, role)
    _ensure_can_manage(actor, user, "deletar")
    repo.delete(user.id)
