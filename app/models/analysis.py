from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class AnalysisSession(Base):
    __tablename__ = "analysis_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    coach_id = Column(String, ForeignKey("profiles.id"), nullable=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    sport_type = Column(String, nullable=False, default="table-tennis")
    media_type = Column(String, nullable=False, default="video")  # video, photo, audio, document, note
    analysis_status = Column(String, nullable=False, default="pending")  # pending, completed
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    results = relationship("AnalysisResult", back_populates="session", cascade="all, delete-orphan")
    frames = relationship("AnalysisFrame", back_populates="session", cascade="all, delete-orphan")
    annotations = relationship("AnalysisAnnotation", back_populates="session", cascade="all, delete-orphan")


class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("analysis_sessions.id"), nullable=False, index=True)
    analysis_type = Column(String, nullable=False)
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    areas_of_improvement = Column(JSON, nullable=True)
    strengths = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("AnalysisSession", back_populates="results")


class AnalysisFrame(Base):
    __tablename__ = "analysis_frames"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("analysis_sessions.id"), nullable=False, index=True)
    frame_number = Column(Integer, nullable=False)
    timestamp_ms = Column(Integer, nullable=False)
    pose_data = Column(JSON, nullable=True)
    technique_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("AnalysisSession", back_populates="frames")


class AnalysisAnnotation(Base):
    __tablename__ = "analysis_annotations"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("analysis_sessions.id"), nullable=False, index=True)
    frame_id = Column(Integer, ForeignKey("analysis_frames.id"), nullable=True)
    annotation_type = Column(String, nullable=False)  # arrow, circle, line, text
    coordinates = Column(JSON, nullable=False)
    color = Column(String, nullable=False, default="#FF0000")
    label = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("AnalysisSession", back_populates="annotations")
