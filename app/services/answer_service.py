# app/services/answer_service.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    FieldError,
    MissingFieldError,
    NotFoundError,
    QuestionNotFoundError,
    raise_for_errors,
)
from app.models.activity import Activity
from app.models.answer_set import AnswerSet
from app.models.user import Role
from app.repositories.activity_repository import ActivityRepository
from app.schemas.answer import AnswerItem
from app.services import policy
from app.services.activity_service import load_activity, require_valid_id
from app.services.policy import Actor

logger = logging.getLogger(__name__)


@dataclass
class AnswerListing:
    activity: Activity
    answer_sets: List[AnswerSet]

    @property
    def finalized(self) -> bool:
        return bool(self.activity.finalized)

    @property
    def total(self) -> int:
        return len(self.answer_sets)


def _build_items(activity: Activity, answers: List[AnswerItem]) -> List[dict]:
    """
    Check the submitted items against the activity's questions and return
    them in storage form. Answer values are stored as text.
    """
    if not answers:
        raise MissingFieldError(
            "É necessário fornecer pelo menos uma resposta.", field="answers"
        )

    errors = []
    for index, item in enumerate(answers):
        if not item.question_id or not str(item.question_id).strip():
            errors.append(
                FieldError(
                    "missing_field",
                    f"answers[{index}].question_id",
                    "Todas as respostas devem ter um question_id.",
                )
            )
        if item.answer_text is None:
            errors.append(
                FieldError(
                    "missing_field",
                    f"answers[{index}].answer_text",
                    "Todas as respostas devem ter um valor.",
                )
            )
    raise_for_errors(errors)

    known = activity.question_ids()
    for item in answers:
        if item.question_id not in known:
            raise QuestionNotFoundError(item.question_id)

    return [
        {"question_id": item.question_id, "answer_text": str(item.answer_text)}
        for item in answers
    ]


def submit_answers(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    answers: List[AnswerItem],
    submitted: bool = False,
) -> Activity:
    """
    Save the actor's answers. The actor's previous answer set, if any, is
    replaced wholesale by the new items, never merged with them.
    """
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_answer(actor, activity)

    items = _build_items(activity, answers)
    repo.upsert_answer_set(activity.id, actor.id, items, submitted)
    logger.info(
        "Saved %d answer(s) from %s on activity %s", len(items), actor.id, activity.id
    )
    return repo.find_by_id(activity.id)


def list_answers(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
) -> AnswerListing:
    """
    Owner sees every answer set; a student sees only their own (possibly
    none). Works on finalized activities too.
    """
    activity = load_activity(ActivityRepository(db), activity_id)
    policy.ensure_can_list_answers(actor, activity)

    if actor.role == Role.TEACHER:
        answer_sets = list(activity.answer_sets)
    else:
        answer_sets = [
            a for a in activity.answer_sets if policy.can_view_answer_set(actor, activity, a)
        ]
    return AnswerListing(activity=activity, answer_sets=answer_sets)


def delete_answer(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    answer_set_id: str,
) -> None:
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_not_finalized(
        activity, "Não é possível deletar respostas de uma atividade finalizada."
    )

    require_valid_id(answer_set_id, "answer_set_id")
    answer_set = activity.find_answer_set(answer_set_id)
    if answer_set is None:
        raise NotFoundError("Resposta não encontrada.")
    policy.ensure_can_delete_answer(actor, activity, answer_set)

    if not repo.delete_answer_set(activity.id, answer_set_id):
        raise NotFoundError("Resposta não encontrada.")
    logger.info("Deleted answer set %s from activity %s", answer_set_id, activity.id)
