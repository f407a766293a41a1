# app/models/enrollment.py
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, new_id, utcnow


class Enrollment(Base):
    __tablename__ = "enrollments"
    # 同一活动中每个邮箱只能报名一次
    __table_args__ = (
        UniqueConstraint(
            "activity_id", "student_email", name="uq_enrollments_activity_email"
        ),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    activity_id = Column(
        String(32),
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # always stored lowercase
    student_email = Column(String(255), nullable=False, index=True)
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    activity = relationship("Activity", back_populates="enrollments")
