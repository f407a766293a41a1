"""Authorization policy for activities.

``can_*`` functions are pure decisions over (actor, activity). The matching
``ensure_*`` functions raise a ``DomainError`` instead of returning False, so
a denial is never a silent no-op.

Visibility for students is decided by enrollment only: a student sees an
activity iff their email is enrolled in it. ``is_public`` is the flag
teachers use to share activities with other teachers and does not open
anything to students.
"""

from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import (
    ActivityFinalizedError,
    ForbiddenError,
    InvalidActorTypeError,
    MissingActorError,
    NotATeacherError,
)
from app.models.activity import Activity
from app.models.answer_set import AnswerSet
from app.models.user import Role, User, normalize_email


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as resolved from the bearer token."""

    id: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, email=normalize_email(user.email), role=user.role)

    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    def is_student(self) -> bool:
        return self.role == Role.STUDENT


def require_actor(actor: Optional[Actor]) -> Actor:
    if actor is None or not actor.id:
        raise MissingActorError()
    return actor


def _unknown_role(actor: Actor):
    raise InvalidActorTypeError(actor.role)


# --- decisions ----------------------------------------------------------


def can_read(actor: Actor, activity: Activity) -> bool:
    if actor.role == Role.TEACHER:
        return activity.belongs_to_teacher(actor.id) or bool(activity.is_public)
    if actor.role == Role.STUDENT:
        return activity.is_enrolled(actor.email)
    _unknown_role(actor)


def can_write(actor: Actor, activity: Activity) -> bool:
    return actor.is_teacher() and activity.belongs_to_teacher(actor.id)


def can_duplicate(actor: Actor, activity: Activity) -> bool:
    return actor.is_teacher() and (
        bool(activity.is_public) or activity.belongs_to_teacher(actor.id)
    )


def can_enroll(actor: Actor, activity: Activity) -> bool:
    return actor.is_teacher() and activity.belongs_to_teacher(actor.id)


def can_list_enrollments(actor: Actor, activity: Activity) -> bool:
    return can_enroll(actor, activity)


def can_answer(actor: Actor, activity: Activity) -> bool:
    if activity.finalized:
        return False
    if actor.role == Role.TEACHER:
        return activity.belongs_to_teacher(actor.id)
    if actor.role == Role.STUDENT:
        return activity.is_published() and activity.is_enrolled(actor.email)
    _unknown_role(actor)


def can_list_answers(actor: Actor, activity: Activity) -> bool:
    if actor.role == Role.TEACHER:
        return activity.belongs_to_teacher(actor.id)
    if actor.role == Role.STUDENT:
        return activity.is_enrolled(actor.email)
    _unknown_role(actor)


def can_view_answer_set(actor: Actor, activity: Activity, answer_set: AnswerSet) -> bool:
    if actor.role == Role.TEACHER:
        return activity.belongs_to_teacher(actor.id)
    if actor.role == Role.STUDENT:
        return str(answer_set.submitter_id) == str(actor.id)
    _unknown_role(actor)


def can_delete_answer(actor: Actor, activity: Activity, answer_set: AnswerSet) -> bool:
    if activity.finalized:
        return False
    return can_view_answer_set(actor, activity, answer_set)


# --- enforcement --------------------------------------------------------


def ensure_teacher(actor: Optional[Actor], message: Optional[str] = None) -> Actor:
    actor = require_actor(actor)
    if actor.role == Role.TEACHER:
        return actor
    if actor.role == Role.STUDENT:
        raise NotATeacherError(message) if message else NotATeacherError()
    _unknown_role(actor)


def ensure_not_finalized(activity: Activity, message: Optional[str] = None) -> None:
    if activity.finalized:
        raise ActivityFinalizedError(message) if message else ActivityFinalizedError()


def ensure_can_read(actor: Optional[Actor], activity: Activity) -> None:
    actor = require_actor(actor)
    if not can_read(actor, activity):
        raise ForbiddenError("Você não tem permissão para visualizar esta atividade.")


def ensure_can_write(actor: Optional[Actor], activity: Activity) -> None:
    actor = ensure_teacher(actor)
    if not can_write(actor, activity):
        raise ForbiddenError("Você não tem permissão para alterar esta atividade.")


def ensure_can_duplicate(actor: Optional[Actor], activity: Activity) -> None:
    actor = ensure_teacher(actor)
    if not can_duplicate(actor, activity):
        raise ForbiddenError("Você não tem permissão para duplicar esta atividade.")


def ensure_can_enroll(actor: Optional[Actor], activity: Activity) -> None:
    actor = ensure_teacher(
        actor, "Apenas professores podem gerenciar inscrições em atividades."
    )
    if not can_enroll(actor, activity):
        raise ForbiddenError(
            "Você não tem permissão para gerenciar inscrições nesta atividade."
        )
    ensure_not_finalized(
        activity, "Não é possível alterar inscrições de uma atividade finalizada."
    )


def ensure_can_list_enrollments(actor: Optional[Actor], activity: Activity) -> None:
    actor = ensure_teacher(
        actor, "Alunos não têm permissão para visualizar a lista de inscrições."
    )
    if not can_list_enrollments(actor, activity):
        raise ForbiddenError(
            "Você não tem permissão para visualizar inscrições desta atividade."
        )


def ensure_can_answer(actor: Optional[Actor], activity: Activity) -> None:
    actor = require_actor(actor)
    ensure_not_finalized(
        activity, "Não é possível modificar respostas de uma atividade finalizada."
    )
    if not can_answer(actor, activity):
        if actor.is_student():
            raise ForbiddenError("Esta atividade não está disponível para respostas.")
        raise ForbiddenError(
            "Você não tem permissão para criar respostas nesta atividade."
        )


def ensure_can_list_answers(actor: Optional[Actor], activity: Activity) -> None:
    actor = require_actor(actor)
    if not can_list_answers(actor, activity):
        if actor.is_student():
            raise ForbiddenError(
                "Esta atividade não está disponível para visualização."
            )
        raise ForbiddenError(
            "Você não tem permissão para visualizar respostas desta atividade."
        )


def ensure_can_delete_answer(
    actor: Optional[Actor], activity: Activity, answer_set: AnswerSet
) -> None:
    actor = require_actor(actor)
    ensure_not_finalized(
        activity, "Não é possível deletar respostas de uma atividade finalizada."
    )
    if not can_delete_answer(actor, activity, answer_set):
        raise ForbiddenError("Você não tem permissão para deletar esta resposta.")
