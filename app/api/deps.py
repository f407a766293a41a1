# app/api/deps.py
from typing import Optional

from app.core.exceptions import MissingFieldError
from app.models.activity import Activity
from app.models.user import Role
from app.schemas.activity import ActivityPublic
from app.services import policy
from app.services.policy import Actor


def require_activity_id(activity_id: Optional[str]) -> str:
    if not activity_id:
        raise MissingFieldError("ID da atividade é obrigatório.", field="activity_id")
    return activity_id


def activity_for(actor: Actor, activity: Activity) -> ActivityPublic:
    """
    Serialize an activity for the caller. Only the owner gets every
    enrollment and answer set; a student gets their own rows without the
    correct answers, any other teacher gets neither list.
    """
    data = ActivityPublic.model_validate(activity)
    if policy.can_write(actor, activity):
        return data

    if actor.role == Role.STUDENT:
        data.enrollments = [e for e in data.enrollments if e.student_email == actor.email]
        data.answer_sets = [a for a in data.answer_sets if a.submitter_id == actor.id]
        for question in data.content:
            question.correct_answer = None
    else:
        data.enrollments = []
        data.answer_sets = []
    return data
