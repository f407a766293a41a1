# app/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.security import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from app.schemas.user import UserPublic, UserResponse
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/registrar",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    注册老师或学生账号，返回的用户信息不包含密码 hash。
    """
    user = auth_service.register_user(db, obj_in=payload)
    return RegisterResponse(
        user=UserPublic.model_validate(user),
        message="Usuário registrado com sucesso.",
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user, access_token = auth_service.login(db, obj_in=payload)
    return LoginResponse(
        access_token=access_token,
        user=UserPublic.model_validate(user),
        message="Login realizado com sucesso.",
    )


@router.get("/perfil", response_model=UserResponse)
def read_profile(current_user: User = Depends(get_current_user)):
    return UserResponse(user=UserPublic.model_validate(current_user))
