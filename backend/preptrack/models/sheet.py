"""
Practice sheet, chapter configuration and recommendation models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


SUBJECTS = ("physics", "chemistry", "biology")


class PracticeSheet(Base):
    """A user's practice record for the week, one JSON blob per subject."""

    __tablename__ = "practice_sheets"

    __table_args__ = (
        Index('ix_practice_sheets_created', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)

    # {"present": int, "chapters": {name: {"done", "practiced", "questions_practiced"}}}
    physics = Column(JSON, nullable=False)
    chemistry = Column(JSON, nullable=False)
    biology = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="sheets")


class ChaptersConfig(Base):
    """Current chapter list per subject (single row)."""

    __tablename__ = "chapters_config"

    id = Column(Integer, primary_key=True)
    physics = Column(JSON, nullable=False, default=list)
    chemistry = Column(JSON, nullable=False, default=list)
    biology = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ChapterRecommendation(Base):
    """Chapter proposal voted on by every registered user."""

    __tablename__ = "chapter_recommendations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(20), nullable=False)
    chapter_name = Column(String(200), nullable=False)

    # Voter ids; kept duplicate-free by the service
    approvals = Column(JSON, nullable=False, default=list)
    rejections = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
