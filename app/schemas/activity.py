from datetime import datetime

from pydantic import BaseModel, Field

from app.db.base import new_id
from app.schemas.answer import AnswerSetPublic
from app.schemas.enrollment import EnrollmentPublic


class SupportMaterial(BaseModel):
    # kind/content are checked by Activity.validate so every problem
    # is reported at once instead of failing on the first pydantic error
    id: str = Field(default_factory=new_id)
    kind: str | None = None  # "text" / "link" / "pdf"
    content: str | None = None
    title: str | None = None


class Question(BaseModel):
    id: str = Field(default_factory=new_id)
    prompt: str | None = None
    kind: str | None = None  # "multiple_choice" / "essay"
    choices: list[str] | None = None
    correct_answer: str | None = None


class ActivityCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    subject: str | None = None
    grade_level: str | None = None
    objective: str | None = None
    support_materials: list[SupportMaterial] = Field(default_factory=list)
    content: list[Question] = Field(default_factory=list)
    status: str | None = None
    is_public: bool = False
    due_date: datetime | None = None


class ActivityUpdate(BaseModel):
    """Patchable fields. owner_id, finalized and the sub-lists are rejected."""

    model_config = {"extra": "forbid"}

    title: str | None = None
    description: str | None = None
    subject: str | None = None
    grade_level: str | None = None
    objective: str | None = None
    support_materials: list[SupportMaterial] | None = None
    content: list[Question] | None = None
    status: str | None = None
    is_public: bool | None = None
    due_date: datetime | None = None


class ActivityFilters(BaseModel):
    subject: str | None = None
    grade_level: str | None = None
    status: str | None = None
    owner_id: str | None = None


class ActivityPublic(BaseModel):
    id: str
    title: str
    description: str
    subject: str
    grade_level: str
    objective: str | None = None
    support_materials: list[SupportMaterial] = []
    content: list[Question] = []
    status: str
    owner_id: str
    is_public: bool
    finalized: bool
    due_date: datetime | None = None
    enrollments: list[EnrollmentPublic] = []
    answer_sets: list[AnswerSetPublic] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ActivityResponse(BaseModel):
    activity: ActivityPublic
    message: str | None = None


class ActivityListResponse(BaseModel):
    activities: list[ActivityPublic]
    total: int


class MessageResponse(BaseModel):
    message: str
