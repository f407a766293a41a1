# app/api/v1/endpoints/answers.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import activity_for, require_activity_id
from app.core.security import get_current_actor
from app.db.session import get_db
from app.schemas.answer import AnswerListResponse, AnswerSetPublic, AnswerSubmission
from app.schemas.activity import ActivityResponse, MessageResponse
from app.services import answer_service
from app.services.policy import Actor

router = APIRouter(prefix="/respostas", tags=["answers"])


@router.post("", response_model=ActivityResponse)
def submit_answers(
    obj_in: AnswerSubmission,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    学生提交答案，同一个学生再次提交会整体覆盖之前的答案。
    """
    activity = answer_service.submit_answers(
        db,
        actor=actor,
        activity_id=require_activity_id(obj_in.activity_id),
        answers=obj_in.answers,
        submitted=obj_in.submitted,
    )
    return ActivityResponse(
        activity=activity_for(actor, activity),
        message="Respostas enviadas com sucesso.",
    )


@router.get("", response_model=AnswerListResponse)
def list_answers(
    activity_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    listing = answer_service.list_answers(
        db, actor=actor, activity_id=require_activity_id(activity_id)
    )
    return AnswerListResponse(
        activity_id=listing.activity.id,
        title=listing.activity.title,
        finalized=listing.finalized,
        answer_sets=[AnswerSetPublic.model_validate(a) for a in listing.answer_sets],
        total=listing.total,
    )


@router.delete("/{answer_set_id}", response_model=MessageResponse)
def delete_answer(
    answer_set_id: str,
    activity_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    answer_service.delete_answer(
        db,
        actor=actor,
        activity_id=require_activity_id(activity_id),
        answer_set_id=answer_set_id,
    )
    return MessageResponse(message="Resposta deletada com sucesso.")
