# app/models/user.py
from enum import Enum

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import Column, String, DateTime

from app.core.config import settings
from app.core.exceptions import FieldError, raise_for_errors
from app.db.base import Base, new_id, utcnow


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: object) -> bool:
    if not isinstance(email, str):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)  # 可重复，不唯一
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)  # 'teacher' / 'student'
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    def validate(self, password: str | None = None) -> None:
        """
        Check name, email shape, role and, when given, the plaintext password.
        All violations are reported together.
        """
        errors: list[FieldError] = []
        if not self.name or not self.name.strip():
            errors.append(FieldError("missing_field", "name", "Nome é obrigatório."))
        if not self.email:
            errors.append(FieldError("missing_field", "email", "Email é obrigatório."))
        elif not is_valid_email(self.email):
            errors.append(FieldError("invalid_format", "email", "Email inválido."))
        if password is not None and len(password) < settings.PASSWORD_MIN_LENGTH:
            errors.append(
                FieldError(
                    "invalid_format",
                    "password",
                    f"A senha deve ter no mínimo {settings.PASSWORD_MIN_LENGTH} caracteres.",
                )
            )
        if self.role not in [role.value for role in Role]:
            errors.append(
                FieldError(
                    "invalid_format",
                    "role",
                    'Tipo de usuário inválido. Deve ser "teacher" ou "student".',
                )
            )
        raise_for_errors(errors)
