# app/services/enrollment_service.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    FieldError,
    MissingFieldError,
    NotFoundError,
    raise_for_errors,
)
from app.models.activity import Activity
from app.models.enrollment import Enrollment
from app.models.user import is_valid_email, normalize_email
from app.repositories.activity_repository import ActivityRepository
from app.services import policy
from app.services.activity_service import load_activity, require_valid_id
from app.services.policy import Actor

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentResult:
    activity: Activity
    added: List[Enrollment] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return len(self.added)

    @property
    def all_already_enrolled(self) -> bool:
        return not self.added


def _normalized_emails(emails: Optional[List[str]]) -> List[str]:
    """Validate every email and return them lowercase, without repeats."""
    if not emails:
        raise MissingFieldError(
            "É necessário fornecer pelo menos um email de aluno.", field="emails"
        )
    errors = []
    normalized: List[str] = []
    for index, email in enumerate(emails):
        value = normalize_email(email) if isinstance(email, str) else email
        if not is_valid_email(value):
            errors.append(
                FieldError("invalid_format", f"emails[{index}]", f"Email inválido: {email}")
            )
        elif value not in normalized:
            normalized.append(value)
    raise_for_errors(errors)
    return normalized


def enroll_students(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    emails: Optional[List[str]],
) -> EnrollmentResult:
    """
    Owner enrolls students by email. Emails already enrolled are skipped,
    not re-inserted; the result reports how many rows were actually added.
    """
    # "not a teacher" is reported before the activity is even looked up
    policy.ensure_teacher(
        actor, "Apenas professores podem inscrever alunos em atividades."
    )
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_enroll(actor, activity)

    normalized = _normalized_emails(emails)
    already = {e.student_email for e in activity.enrollments}
    to_add = [email for email in normalized if email not in already]

    added = repo.add_enrollments(activity.id, to_add) if to_add else []
    activity = repo.find_by_id(activity.id)
    logger.info(
        "Enrolled %d new student(s) in activity %s (%d requested)",
        len(added),
        activity.id,
        len(normalized),
    )
    return EnrollmentResult(activity=activity, added=added)


def list_enrollments(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
) -> Activity:
    activity = load_activity(ActivityRepository(db), activity_id)
    policy.ensure_can_list_enrollments(actor, activity)
    return activity


def delete_enrollment(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    enrollment_id: str,
) -> None:
    policy.ensure_teacher(actor, "Apenas professores podem remover inscrições.")
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_enroll(actor, activity)

    require_valid_id(enrollment_id, "enrollment_id")
    if activity.find_enrollment(enrollment_id) is None:
        raise NotFoundError("Inscrição não encontrada.")
    if not repo.remove_enrollment(activity.id, enrollment_id):
        # removed by a concurrent request between the lookup and the delete
        raise NotFoundError("Inscrição não encontrada.")
    logger.info("Removed enrollment %s from activity %s", enrollment_id, activity.id)
