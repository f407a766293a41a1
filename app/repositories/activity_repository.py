"""Persistence for the Activity aggregate and its sub-records."""

import logging
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.core.exceptions import ValidationError
from app.db.base import utcnow
from app.models.activity import Activity, ActivityStatus
from app.models.answer_set import AnswerSet
from app.models.enrollment import Enrollment
from app.schemas.activity import ActivityFilters

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (cópia)"


class ActivityRepository:
    """Activity queries and writes over a request-scoped SQLAlchemy session.

    Enrollment and answer-set writes go through single-row statements guarded
    by unique constraints, never by rewriting the whole list in memory, so two
    concurrent requests cannot lose each other's rows.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- reads ---------------------------------------------------------

    def find_by_id(self, activity_id: str) -> Optional[Activity]:
        return self.db.get(Activity, activity_id)

    def _filtered(self, query: Query, filters: Optional[ActivityFilters]) -> Query:
        if filters is None:
            return query
        if filters.subject:
            query = query.filter(Activity.subject == filters.subject)
        if filters.grade_level:
            query = query.filter(Activity.grade_level == filters.grade_level)
        if filters.status:
            query = query.filter(Activity.status == filters.status)
        if filters.owner_id:
            query = query.filter(Activity.owner_id == filters.owner_id)
        return query

    def _newest_first(self, query: Query) -> List[Activity]:
        return query.order_by(Activity.created_at.desc(), Activity.id.desc()).all()

    def list_by_owner(
        self, owner_id: str, filters: Optional[ActivityFilters] = None
    ) -> List[Activity]:
        query = self.db.query(Activity).filter(Activity.owner_id == owner_id)
        return self._newest_first(self._filtered(query, filters))

    def list_public(self, filters: Optional[ActivityFilters] = None) -> List[Activity]:
        query = self.db.query(Activity).filter(
            Activity.is_public.is_(True),
            Activity.status == ActivityStatus.PUBLISHED.value,
        )
        return self._newest_first(self._filtered(query, filters))

    def list_all(
        self, owner_id: str, filters: Optional[ActivityFilters] = None
    ) -> List[Activity]:
        """Own activities of any status plus other teachers' public ones."""
        query = self.db.query(Activity).filter(
            or_(Activity.owner_id == owner_id, Activity.is_public.is_(True))
        )
        return self._newest_first(self._filtered(query, filters))

    def list_by_enrolled_email(
        self, email: str, filters: Optional[ActivityFilters] = None
    ) -> List[Activity]:
        query = (
            self.db.query(Activity)
            .join(Enrollment, Enrollment.activity_id == Activity.id)
            .filter(Enrollment.student_email == email)
        )
        return self._newest_first(self._filtered(query, filters))

    # --- writes --------------------------------------------------------

    def create(self, activity: Activity) -> Activity:
        self.db.add(activity)
        self.db.commit()
        self.db.refresh(activity)
        return activity

    def save(self, activity: Activity) -> Activity:
        """Persist changes made through the entity's own methods."""
        self.db.add(activity)
        self.db.commit()
        self.db.refresh(activity)
        return activity

    def update(self, activity_id: str, patch: dict) -> Optional[Activity]:
        """Apply a field patch, validate the merged entity, then persist.

        Nothing is written when validation fails.
        """
        activity = self.find_by_id(activity_id)
        if activity is None:
            return None
        for field, value in patch.items():
            setattr(activity, field, value)
        activity.touch()
        try:
            activity.validate()
        except ValidationError:
            self.db.rollback()
            raise
        return self.save(activity)

    def delete(self, activity_id: str) -> bool:
        activity = self.find_by_id(activity_id)
        if activity is None:
            return False
        self.db.delete(activity)
        self.db.commit()
        return True

    def duplicate(self, activity_id: str, new_owner_id: str) -> Optional[Activity]:
        original = self.find_by_id(activity_id)
        if original is None:
            return None
        copy = Activity(
            title=f"{original.title}{COPY_SUFFIX}",
            description=original.description,
            subject=original.subject,
            grade_level=original.grade_level,
            objective=original.objective,
            support_materials=[dict(m) for m in original.support_materials or []],
            content=[dict(q) for q in original.content or []],
            status=ActivityStatus.DRAFT.value,
            is_public=False,
            owner_id=new_owner_id,
        )
        return self.create(copy)

    # --- enrollments ---------------------------------------------------

    def add_enrollments(self, activity_id: str, emails: List[str]) -> List[Enrollment]:
        """Insert one row per email, skipping emails already enrolled.

        Each insert runs in its own SAVEPOINT; a unique violation means a
        concurrent request enrolled the same email first.
        """
        added: List[Enrollment] = []
        for email in emails:
            enrollment = Enrollment(activity_id=activity_id, student_email=email)
            try:
                with self.db.begin_nested():
                    self.db.add(enrollment)
            except IntegrityError:
                logger.info(
                    "Email %s already enrolled in activity %s", email, activity_id
                )
                continue
            added.append(enrollment)
        self.db.commit()
        return added

    def remove_enrollment(self, activity_id: str, enrollment_id: str) -> bool:
        deleted = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.activity_id == activity_id,
                Enrollment.id == enrollment_id,
            )
            .delete(synchronize_session="fetch")
        )
        self.db.commit()
        return deleted > 0

    # --- answer sets ---------------------------------------------------

    def upsert_answer_set(
        self,
        activity_id: str,
        submitter_id: str,
        items: List[dict],
        submitted: bool,
    ) -> AnswerSet:
        """Replace the submitter's answer set wholesale, or create it.

        UPDATE by (activity_id, submitter_id) first; INSERT when nothing
        matched; if the INSERT loses a race on the unique constraint the
        UPDATE is replayed.
        """
        now = utcnow()
        overwrite = (
            update(AnswerSet)
            .where(
                AnswerSet.activity_id == activity_id,
                AnswerSet.submitter_id == submitter_id,
            )
            .values(items=items, submitted=submitted, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(overwrite)
        if result.rowcount == 0:
            try:
                with self.db.begin_nested():
                    self.db.add(
                        AnswerSet(
                            activity_id=activity_id,
                            submitter_id=submitter_id,
                            items=items,
                            submitted=submitted,
                            created_at=now,
                            updated_at=now,
                        )
                    )
            except IntegrityError:
                self.db.execute(overwrite)
        self.db.commit()
        return (
            self.db.query(AnswerSet)
            .filter(
                AnswerSet.activity_id == activity_id,
                AnswerSet.submitter_id == submitter_id,
            )
            .one()
        )

    def delete_answer_set(self, activity_id: str, answer_set_id: str) -> bool:
        deleted = (
            self.db.query(AnswerSet)
            .filter(
                AnswerSet.activity_id == activity_id,
                AnswerSet.id == answer_set_id,
            )
            .delete(synchronize_session="fetch")
        )
        self.db.commit()
        return deleted > 0
