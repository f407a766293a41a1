# app/services/activity_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidActorTypeError, InvalidIdError, NotFoundError
from app.db.base import is_valid_id
from app.models.activity import Activity
from app.models.user import Role
from app.repositories.activity_repository import ActivityRepository
from app.schemas.activity import ActivityCreate, ActivityFilters, ActivityUpdate
from app.services import policy
from app.services.policy import Actor

logger = logging.getLogger(__name__)

_NON_NULLABLE_PATCH_FIELDS = ("support_materials", "content", "is_public")


def require_valid_id(value: str, field: str = "id") -> str:
    if not is_valid_id(value):
        raise InvalidIdError("ID inválido.", field=field)
    return value


def load_activity(repo: ActivityRepository, activity_id: str) -> Activity:
    require_valid_id(activity_id, "activity_id")
    activity = repo.find_by_id(activity_id)
    if activity is None:
        raise NotFoundError("Atividade não encontrada.")
    return activity


def create_activity(
    db: Session,
    *,
    actor: Optional[Actor],
    obj_in: ActivityCreate,
) -> Activity:
    """
    Teacher creates an activity. It starts as a private, unfinalized draft unless
    the payload sets status or is_public.
    """
    actor = policy.ensure_teacher(actor)

    data = obj_in.model_dump(exclude_none=True)
    activity = Activity(**data, owner_id=actor.id)
    # validation must finish before anything is written
    activity.validate()

    activity = ActivityRepository(db).create(activity)
    logger.info("Created activity %s for teacher %s", activity.id, actor.id)
    return activity


def get_activity(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
) -> Activity:
    activity = load_activity(ActivityRepository(db), activity_id)
    policy.ensure_can_read(actor, activity)
    return activity


def update_activity(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    obj_in: ActivityUpdate,
) -> Activity:
    """
    Owner merges a patch. Only fields present in the request are applied;
    owner, finalization and the enrollment/answer lists are not patchable.
    """
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_write(actor, activity)

    update_data = obj_in.model_dump(exclude_unset=True)
    # explicit nulls on required text fields are left to validate() to report
    for field in _NON_NULLABLE_PATCH_FIELDS:
        if field in update_data and update_data[field] is None:
            del update_data[field]
    return repo.update(activity.id, update_data)


def delete_activity(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
) -> None:
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_write(actor, activity)
    repo.delete(activity.id)
    logger.info("Deleted activity %s", activity_id)


def duplicate_activity(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
) -> Activity:
    """
    Copy an own or public activity into a new private draft owned by the
    requesting teacher. Enrollments and answers are not copied.
    """
    repo = ActivityRepository(db)
    original = load_activity(repo, activity_id)
    policy.ensure_can_duplicate(actor, original)
    copy = repo.duplicate(original.id, actor.id)
    logger.info("Duplicated activity %s into %s", original.id, copy.id)
    return copy


def list_activities(
    db: Session,
    *,
    actor: Optional[Actor],
    filters: Optional[ActivityFilters] = None,
) -> List[Activity]:
    """
    Teacher: own activities (any status) plus other teachers' public ones.
    Student: activities they are enrolled in, filtered by subject/grade only.
    Newest first.
    """
    actor = policy.require_actor(actor)
    filters = filters or ActivityFilters()
    repo = ActivityRepository(db)

    if actor.role == Role.TEACHER:
        return repo.list_all(actor.id, filters)
    if actor.role == Role.STUDENT:
        student_filters = ActivityFilters(
            subject=filters.subject,
            grade_level=filters.grade_level,
        )
        return repo.list_by_enrolled_email(actor.email, student_filters)
    raise InvalidActorTypeError(actor.role)


def _owner_transition(
    db: Session,
    actor: Optional[Actor],
    activity_id: str,
    transition: str,
) -> Activity:
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_write(actor, activity)
    getattr(activity, transition)()
    activity = repo.save(activity)
    logger.info("Activity %s: %s", activity.id, transition)
    return activity


def publish_activity(db: Session, *, actor: Optional[Actor], activity_id: str) -> Activity:
    return _owner_transition(db, actor, activity_id, "publish")


def unpublish_activity(db: Session, *, actor: Optional[Actor], activity_id: str) -> Activity:
    return _owner_transition(db, actor, activity_id, "unpublish")


def make_activity_public(db: Session, *, actor: Optional[Actor], activity_id: str) -> Activity:
    return _owner_transition(db, actor, activity_id, "make_public")


def make_activity_private(db: Session, *, actor: Optional[Actor], activity_id: str) -> Activity:
    return _owner_transition(db, actor, activity_id, "make_private")


def finalize_activity(db: Session, *, actor: Optional[Actor], activity_id: str) -> Activity:
    """One-way: once finalized, answers and enrollments are frozen."""
    return _owner_transition(db, actor, activity_id, "finalize")


def add_support_material(
    db: Session,
    *,
    actor: Optional[Actor],
    activity_id: str,
    material: dict,
) -> Activity:
    repo = ActivityRepository(db)
    activity = load_activity(repo, activity_id)
    policy.ensure_can_write(actor, activity)
    activity.add_support_material(material)
    return repo.save(activity)
