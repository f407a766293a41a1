"""Domain exceptions.

Every failure raised by the services is a ``DomainError`` subclass tagged
with an ``ErrorKind``. The HTTP layer maps kinds to status codes in one place
(``app.api.errors``), so services never raise ``HTTPException`` themselves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_FORMAT = "invalid_format"
    INVALID_STATE = "invalid_state"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class FieldError:
    """A single violated field, e.g. ``content[0].choices``."""

    code: str
    field: str | None
    message: str

    def to_dict(self) -> dict:
        return {"code": self.code, "field": self.field, "message": self.message}


class DomainError(Exception):
    """Base exception for all application errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def details(self) -> list[dict]:
        return []


# --- validation -------------------------------------------------------------


class ValidationError(DomainError):
    """Raised when an entity or payload fails validation.

    Carries every violated field, not just the first one.
    """

    kind = ErrorKind.INVALID_FORMAT
    code = "invalid_format"

    def __init__(
        self,
        errors: Iterable[FieldError] | str,
        field: str | None = None,
    ):
        if isinstance(errors, str):
            errors = [FieldError(self.code, field, errors)]
        self.errors = list(errors)
        super().__init__(" ".join(error.message for error in self.errors))

    @property
    def details(self) -> list[dict]:
        return [error.to_dict() for error in self.errors]


class MissingFieldError(ValidationError):
    kind = ErrorKind.MISSING_FIELD
    code = "missing_field"


class InvalidFormatError(ValidationError):
    code = "invalid_format"


class InvalidStatusError(ValidationError):
    code = "invalid_status"


class InvalidQuestionKindError(ValidationError):
    code = "invalid_question_kind"


class MissingChoicesError(ValidationError):
    kind = ErrorKind.MISSING_FIELD
    code = "missing_choices"


class InvalidMaterialError(ValidationError):
    code = "invalid_material"


class InvalidIdError(ValidationError):
    code = "invalid_id"


_VALIDATION_ERRORS = {
    cls.code: cls
    for cls in (
        MissingFieldError,
        InvalidFormatError,
        InvalidStatusError,
        InvalidQuestionKindError,
        MissingChoicesError,
        InvalidMaterialError,
        InvalidIdError,
    )
}


def raise_for_errors(errors: list[FieldError]) -> None:
    """Raise the validation error matching the first violation, if any."""
    if errors:
        raise _VALIDATION_ERRORS.get(errors[0].code, ValidationError)(errors)


# --- state ------------------------------------------------------------------


class InvalidStateError(DomainError):
    """Raised on an illegal state transition (publish when published...)."""

    kind = ErrorKind.INVALID_STATE


# --- lookup -----------------------------------------------------------------


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class QuestionNotFoundError(NotFoundError):
    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(
            f"Pergunta com ID {question_id} não encontrada nesta atividade."
        )


# --- identity ---------------------------------------------------------------


class UnauthenticatedError(DomainError):
    kind = ErrorKind.UNAUTHENTICATED


class MissingActorError(UnauthenticatedError):
    def __init__(self, message: str = "Usuário não identificado."):
        super().__init__(message)


class InvalidCredentialError(UnauthenticatedError):
    def __init__(self, message: str = "Credenciais inválidas."):
        super().__init__(message)


# --- permission -------------------------------------------------------------


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN


class NotATeacherError(ForbiddenError):
    def __init__(
        self,
        message: str = "Acesso negado. Apenas professores podem realizar esta ação.",
    ):
        super().__init__(message)


class ActivityFinalizedError(ForbiddenError):
    def __init__(
        self,
        message: str = "Não é possível modificar uma atividade finalizada.",
    ):
        super().__init__(message)


class InvalidActorTypeError(ForbiddenError):
    def __init__(self, role: object = None):
        self.role = role
        super().__init__("Tipo de usuário inválido.")


# --- conflict ---------------------------------------------------------------


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
