from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Auth subject (JWT "sub") is the primary key
    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    username = Column(String, unique=True, index=True, nullable=False)
    display_name = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    role = Column(String, nullable=False, default="player")  # player, coach, admin
    sport = Column(String, nullable=True)
    location = Column(String, nullable=True)
    playing_experience = Column(String, nullable=True)
    preferred_play_style = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    years_coaching = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="active")  # active, suspended, deleted
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    videos = relationship("Video", back_populates="owner")
    coach_profile = relationship("CoachProfile", back_populates="profile", uselist=False)
    roles = relationship("UserRole", back_populates="profile")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    role = Column(String, nullable=False)  # admin, coach, player
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="roles")

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )
