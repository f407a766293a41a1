# app/api/v1/endpoints/enrollments.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import require_activity_id
from app.core.security import get_current_actor
from app.db.session import get_db
from app.schemas.activity import MessageResponse
from app.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentCreateResponse,
    EnrollmentListResponse,
    EnrollmentPublic,
)
from app.services import enrollment_service
from app.services.policy import Actor

router = APIRouter(prefix="/inscricoes", tags=["enrollments"])


@router.post(
    "",
    response_model=EnrollmentCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def enroll_students(
    obj_in: EnrollmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    老师按邮箱给活动报名学生，已报名的邮箱会被跳过。
    """
    result = enrollment_service.enroll_students(
        db,
        actor=actor,
        activity_id=require_activity_id(obj_in.activity_id),
        emails=obj_in.emails,
    )
    enrollments = result.activity.enrollments
    if result.all_already_enrolled:
        message = "Todos os alunos já estavam inscritos nesta atividade."
    else:
        message = f"{result.new_count} aluno(s) inscrito(s) com sucesso."
    return EnrollmentCreateResponse(
        activity_id=result.activity.id,
        enrollments=[EnrollmentPublic.model_validate(e) for e in enrollments],
        total=len(enrollments),
        new_enrollments=result.new_count,
        message=message,
    )


@router.get("", response_model=EnrollmentListResponse)
def list_enrollments(
    activity_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    activity = enrollment_service.list_enrollments(
        db, actor=actor, activity_id=require_activity_id(activity_id)
    )
    return EnrollmentListResponse(
        activity_id=activity.id,
        title=activity.title,
        enrollments=[EnrollmentPublic.model_validate(e) for e in activity.enrollments],
        total=len(activity.enrollments),
    )


@router.delete("/{enrollment_id}", response_model=MessageResponse)
def delete_enrollment(
    enrollment_id: str,
    activity_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    enrollment_service.delete_enrollment(
        db,
        actor=actor,
        activity_id=require_activity_id(activity_id),
        enrollment_id=enrollment_id,
    )
    return MessageResponse(message="Inscrição removida com sucesso.")
