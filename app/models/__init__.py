# app/models/__init__.py
# Import every model so Base.metadata knows all tables
from app.models.user import Role, User  # noqa
from app.models.activity import (  # noqa
    Activity,
    ActivityStatus,
    MaterialKind,
    QuestionKind,
)
from app.models.enrollment import Enrollment  # noqa
from app.models.answer_set import AnswerSet  # noqa
