# app/api/v1/endpoints/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.security import get_current_actor
from app.db.session import get_db
from app.models.user import Role
from app.schemas.activity import MessageResponse
from app.schemas.user import UserListResponse, UserPublic, UserResponse, UserUpdate
from app.services import user_service
from app.services.policy import Actor

router = APIRouter(prefix="/usuarios", tags=["users"])


def _list(db: Session, actor: Actor, role: Role) -> UserListResponse:
    users = user_service.list_users_by_role(db, actor=actor, role=role)
    return UserListResponse(
        users=[UserPublic.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/alunos", response_model=UserListResponse)
def list_students(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return _list(db, actor, Role.STUDENT)


@router.get("/professores", response_model=UserListResponse)
def list_teachers(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return _list(db, actor, Role.TEACHER)


@router.put("/alunos/{user_id}", response_model=UserResponse)
def update_student(
    user_id: str,
    obj_in: UserUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """学生只能修改自己，老师可以修改任何学生。"""
    user = user_service.update_user(
        db, actor=actor, user_id=user_id, obj_in=obj_in, role=Role.STUDENT
    )
    return UserResponse(
        user=UserPublic.model_validate(user),
        message="Aluno atualizado com sucesso.",
    )


@router.put("/professores/{user_id}", response_model=UserResponse)
def update_teacher(
    user_id: str,
    obj_in: UserUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    user = user_service.update_user(
        db, actor=actor, user_id=user_id, obj_in=obj_in, role=Role.TEACHER
    )
    return UserResponse(
        user=UserPublic.model_validate(user),
        message="Professor atualizado com sucesso.",
    )


@router.delete("/alunos/{user_id}", response_model=MessageResponse)
def delete_student(
    user_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    user_service.delete_user(db, actor=actor, user_id=user_id, role=Role.STUDENT)
    return MessageResponse(message="Aluno deletado com sucesso.")


@router.delete("/professores/{user_id}", response_model=MessageResponse)
def delete_teacher(
    user_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    user_service.delete_user(db, actor=actor, user_id=user_id, role=Role.TEACHER)
    return MessageResponse(message="Professor deletado com sucesso.")
