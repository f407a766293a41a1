from pydantic import BaseModel, EmailStr

from app.schemas.user import UserPublic


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    # email/password/role are checked by User.validate so all errors
    # come back together
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None  # "teacher" / "student"


class RegisterResponse(BaseModel):
    user: UserPublic
    message: str


class LoginResponse(Token):
    user: UserPublic
    message: str
