from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    file_path = Column(String, nullable=False)  # storage key, videos/{user_id}/{timestamp}.{ext}
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    focus_area = Column(String, nullable=True)
    analyzed = Column(Boolean, nullable=False, default=False)
    duration_seconds = Column(Float, nullable=True)
    processing_status = Column(String, nullable=False, default="uploaded")  # uploaded, processing, processed, failed
    processing_error = Column(Text, nullable=True)
    # Quota window counts on this column
    uploaded_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship("Profile", back_populates="videos")
    coach_assignments = relationship("VideoCoach", back_populates="video", cascade="all, delete-orphan")
    feedback = relationship("VideoFeedback", back_populates="video", cascade="all, delete-orphan")


class VideoCoach(Base):
    __tablename__ = "video_coaches"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    coach_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending")  # pending, completed
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    video = relationship("Video", back_populates="coach_assignments")

    __table_args__ = (
        UniqueConstraint("video_id", "coach_id", name="uq_video_coach"),
    )


class VideoFeedback(Base):
    __tablename__ = "video_feedback"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    coach_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    player_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    feedback_text = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    video = relationship("Video", back_populates="feedback")
