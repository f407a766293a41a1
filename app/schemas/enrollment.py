from datetime import datetime

from pydantic import BaseModel


class EnrollmentCreate(BaseModel):
    activity_id: str | None = None
    emails: list[str] | None = None


class EnrollmentPublic(BaseModel):
    id: str
    student_email: str
    enrolled_at: datetime

    model_config = {"from_attributes": True}


class EnrollmentCreateResponse(BaseModel):
    activity_id: str
    enrollments: list[EnrollmentPublic]
    total: int
    new_enrollments: int
    message: str


class EnrollmentListResponse(BaseModel):
    activity_id: str
    title: str
    enrollments: list[EnrollmentPublic]
    total: int
