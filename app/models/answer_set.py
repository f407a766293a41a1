# app/models/answer_set.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, new_id, utcnow


class AnswerSet(Base):
    """One submitter's complete current answers to an activity."""

    __tablename__ = "answer_sets"
    __table_args__ = (
        UniqueConstraint(
            "activity_id", "submitter_id", name="uq_answer_sets_activity_submitter"
        ),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    activity_id = Column(
        String(32),
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    submitter_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    submitted = Column(Boolean, nullable=False, default=False)
    # [{question_id, answer_text}]
    items = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    activity = relationship("Activity", back_populates="answer_sets")
