from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class PricingPlan(Base):
    __tablename__ = "pricing_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    monthly_price = Column(Numeric(10, 2), nullable=False, default=0)
    yearly_price = Column(Numeric(10, 2), nullable=False, default=0)
    features = Column(JSON, nullable=True)
    # Uploads/analyses allowed per window; zero or negative means unlimited
    analysis_limit = Column(Integer, nullable=False, default=0)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    subscriptions = relationship("UserSubscription", back_populates="plan")


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    pricing_plan_id = Column(Integer, ForeignKey("pricing_plans.id"), nullable=False)
    subscription_type = Column(String, nullable=False, default="free")  # monthly, yearly, free
    status = Column(String, nullable=False, default="pending", index=True)  # active, cancelled, expired, pending
    start_date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    plan = relationship("PricingPlan", back_populates="subscriptions")


class AnalysisUsage(Base):
    __tablename__ = "analysis_usage"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="SET NULL"), nullable=True)
    analysis_date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    reset_date = Column(DateTime(timezone=True), nullable=False)
    subscription_plan_id = Column(Integer, ForeignKey("pricing_plans.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
