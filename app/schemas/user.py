from pydantic import BaseModel
from datetime import datetime


class UserBase(BaseModel):
    email: str
    name: str
    role: str  # "teacher" / "student"


class UserUpdate(BaseModel):
    """role and password are never changed through this path."""
    name: str | None = None
    email: str | None = None


class UserPublic(UserBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    user: UserPublic
    message: str | None = None


class UserListResponse(BaseModel):
    users: list[UserPublic]
    total: int
