from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class CoachProfile(Base):
    __tablename__ = "coach_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), unique=True, nullable=False, index=True)
    years_coaching = Column(Integer, nullable=False, default=0)
    certifications = Column(JSON, nullable=True)  # list of strings
    languages = Column(JSON, nullable=True)  # list of strings
    coaching_philosophy = Column(Text, nullable=True)
    rate_per_hour = Column(Numeric(10, 2), nullable=True)
    currency = Column(String, nullable=False, default="USD")
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="coach_profile")


class FeaturedCoach(Base):
    __tablename__ = "featured_coaches"

    id = Column(Integer, primary_key=True, index=True)
    coach_id = Column(String, ForeignKey("profiles.id"), unique=True, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    featured_since = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    coach = relationship("Profile")


class CoachStudentRelationship(Base):
    __tablename__ = "coach_student_relationships"

    id = Column(Integer, primary_key=True, index=True)
    coach_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending")  # pending, accepted, declined
    notes = Column(Text, nullable=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("coach_id", "student_id", name="uq_coach_student"),
    )
