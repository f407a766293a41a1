# app/api/v1/endpoints/activities.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import activity_for
from app.core.security import get_current_actor, get_current_teacher
from app.db.session import get_db
from app.schemas.activity import (
    ActivityCreate,
    ActivityFilters,
    ActivityListResponse,
    ActivityResponse,
    ActivityUpdate,
    MessageResponse,
    SupportMaterial,
)
from app.services import activity_service
from app.services.policy import Actor

router = APIRouter(prefix="/atividades", tags=["activities"])


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    obj_in: ActivityCreate,
    db: Session = Depends(get_db),
    teacher: Actor = Depends(get_current_teacher),
):
    """
    老师创建活动，默认是私有草稿。
    """
    activity = activity_service.create_activity(db, actor=teacher, obj_in=obj_in)
    return ActivityResponse(
        activity=activity_for(teacher, activity),
        message="Atividade criada com sucesso.",
    )


@router.get("", response_model=ActivityListResponse)
def list_activities(
    subject: Optional[str] = None,
    grade_level: Optional[str] = None,
    status: Optional[str] = None,
    owner_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    filters = ActivityFilters(
        subject=subject,
        grade_level=grade_level,
        status=status,
        owner_id=owner_id,
    )
    activities = activity_service.list_activities(db, actor=actor, filters=filters)
    return ActivityListResponse(
        activities=[activity_for(actor, a) for a in activities],
        total=len(activities),
    )


@router.get("/{activity_id}", response_model=ActivityResponse)
def get_activity(
    activity_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    activity = activity_service.get_activity(db, actor=actor, activity_id=activity_id)
    return ActivityResponse(activity=activity_for(actor, activity))


@router.put("/{activity_id}", response_model=ActivityResponse)
def update_activity(
    activity_id: str,
    obj_in: ActivityUpdate,
    db: Session = Depends(get_db),
    teacher: Actor = Depends(get_current_teacher),
):
    activity = activity_service.update_activity(
        db, actor=teacher, activity_id=activity_id, obj_in=obj_in
    )
    return ActivityResponse(
        activity=activity_for(teacher, activity),
        message="Atividade atualizada com sucesso.",
    )


@router.delete("/{activity_id}", response_model=MessageResponse)
def delete_activity(
    activity_id: str,
    db: Session = Depends(get_db),
    teacher: Actor = Depends(get_current_teacher),
):
    activity_service.delete_activity(db, actor=teacher, activity_id=activity_id)
    return MessageResponse(message="Atividade deletada com sucesso.")


@router.post(
    "/{activity_id}/duplicar",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_activity(
    activity_id: str,
    db: Session = Depends(get_db),
    teacher: Actor = Depends(get_current_teacher),
):
    """复制自己的或者公开的活动，生成新的私有草稿。"""
    copy = activity_service.duplicate_activity(db, actor=teacher, activity_id=activity_id)
    return ActivityResponse(
        activity=activity_for(teacher, copy),
        message="Atividade duplicada com sucesso.",
    )


# 状态切换：publicar / despublicar / tornar-publica / tornar-privada / finalizar
_TRANSITIONS = [
    ("publicar", activity_service.publish_activity, "Atividade publicada com sucesso."),
    ("despublicar", activity_service.unpublish_activity, "Atividade despublicada com sucesso."),
    ("tornar-publica", activity_service.make_activity_public, "Atividade tornada pública."),
    ("tornar-privada", activity_service.make_activity_private, "Atividade tornada privada."),
    ("finalizar", activity_service.finalize_activity, "Atividade finalizada com sucesso."),
]


def _transition_endpoint(transition, message: str):
    def endpoint(
        activity_id: str,
        db: Session = Depends(get_db),
        teacher: Actor = Depends(get_current_teacher),
    ):
        activity = transition(db, actor=teacher, activity_id=activity_id)
        return ActivityResponse(activity=activity_for(teacher, activity), message=message)

    endpoint.__name__ = transition.__name__
    return endpoint


for _path, _transition, _message in _TRANSITIONS:
    router.add_api_route(
        f"/{{activity_id}}/{_path}",
        _transition_endpoint(_transition, _message),
        methods=["POST"],
        response_model=ActivityResponse,
    )


@router.post(
    "/{activity_id}/materiais",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_support_material(
    activity_id: str,
    material: SupportMaterial,
    db: Session = Depends(get_db),
    teacher: Actor = Depends(get_current_teacher),
):
    activity = activity_service.add_support_material(
        db,
        actor=teacher,
        activity_id=activity_id,
        material=material.model_dump(),
    )
    return ActivityResponse(
        activity=activity_for(teacher, activity),
        message="Material de apoio adicionado com sucesso.",
    )
