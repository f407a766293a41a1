from datetime import datetime

from pydantic import BaseModel, Field


class AnswerItem(BaseModel):
    question_id: str | None = None
    # numbers are accepted and stored as text
    answer_text: str | int | float | None = None


class AnswerSubmission(BaseModel):
    activity_id: str | None = None
    answers: list[AnswerItem] = Field(default_factory=list)
    submitted: bool = False


class AnswerItemPublic(BaseModel):
    question_id: str
    answer_text: str


class AnswerSetPublic(BaseModel):
    """学生的一份完整作答"""
    id: str
    submitter_id: str
    submitted: bool
    items: list[AnswerItemPublic] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AnswerListResponse(BaseModel):
    activity_id: str
    title: str
    finalized: bool
    answer_sets: list[AnswerSetPublic]
    total: int
