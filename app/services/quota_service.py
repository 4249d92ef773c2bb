"""
Subscription quota accounting.

Counts a user's uploads or analyses inside a trailing window (30 days by
default) and compares the count against the limit of their active plan.
Every failure path denies by default.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.models.subscription import UserSubscription, AnalysisUsage
from app.models.video import Video
import structlog

logger = structlog.get_logger()

UPLOADS = "uploads"
ANALYSES = "analyses"


@dataclass
class QuotaStatus:
    can_proceed: bool
    used: int
    limit: int
    next_reset_date: Optional[datetime] = None
    days_remaining: int = 0

    def as_payload(self) -> dict:
        """camelCase shape returned to API clients."""
        return {
            "canProceed": self.can_proceed,
            "used": self.used,
            "limit": self.limit,
            "nextResetDate": self.next_reset_date,
            "daysRemaining": self.days_remaining,
            "resetLabel": format_reset_date(self.next_reset_date),
        }


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def denied(limit: int = 0) -> QuotaStatus:
    return QuotaStatus(can_proceed=False, used=0, limit=limit)


def evaluate_quota(
    used: int,
    limit: int,
    oldest_usage_at: Optional[datetime],
    now: datetime,
    window_days: int = 30
) -> QuotaStatus:
    """
    Decide whether another upload/analysis is allowed.

    Args:
        used: Usage rows inside the window
        limit: Plan limit; zero or negative means unlimited
        oldest_usage_at: Oldest usage timestamp inside the window
        now: Reference time
        window_days: Length of the trailing window

    Returns:
        QuotaStatus. When the limit is reached, next_reset_date is the oldest
        usage plus the window; a reset date already in the past counts as
        eligible again.
    """
    if limit <= 0:
        return QuotaStatus(can_proceed=True, used=used, limit=limit)

    can_proceed = used < limit
    if can_proceed or oldest_usage_at is None:
        return QuotaStatus(can_proceed=can_proceed, used=used, limit=limit)

    next_reset_date = ensure_utc(oldest_usage_at) + timedelta(days=window_days)
    days_remaining = math.ceil((next_reset_date - ensure_utc(now)).total_seconds() / 86400)

    if days_remaining <= 0:
        return QuotaStatus(can_proceed=True, used=used, limit=limit)

    return QuotaStatus(
        can_proceed=False,
        used=used,
        limit=limit,
        next_reset_date=next_reset_date,
        days_remaining=days_remaining
    )


def format_reset_date(reset_date: Optional[datetime], now: Optional[datetime] = None) -> str:
    if reset_date is None:
        return "Available now"

    now = now or datetime.now(timezone.utc)
    diff_in_days = math.ceil((ensure_utc(reset_date) - ensure_utc(now)).total_seconds() / 86400)

    if diff_in_days <= 0:
        return "Available now"
    if diff_in_days == 1:
        return "Tomorrow"
    return f"{diff_in_days} days"


class QuotaService:
    def __init__(self, db: Session, window_days: Optional[int] = None):
        self.db = db
        self.window_days = window_days or settings.quota_window_days

    def get_active_subscription(self, user_id: str) -> Optional[UserSubscription]:
        return (
            self.db.query(UserSubscription)
            .filter(UserSubscription.user_id == user_id, UserSubscription.status == "active")
            .order_by(UserSubscription.created_at.desc(), UserSubscription.id.desc())
            .first()
        )

    def check_upload_quota(self, user_id: str, now: Optional[datetime] = None) -> QuotaStatus:
        return self._check_quota(user_id, UPLOADS, now)

    def check_analysis_quota(self, user_id: str, now: Optional[datetime] = None) -> QuotaStatus:
        return self._check_quota(user_id, ANALYSES, now)

    def _check_quota(self, user_id: str, kind: str, now: Optional[datetime]) -> QuotaStatus:
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        try:
            subscription = self.get_active_subscription(user_id)
            if subscription is None:
                logger.warning("No active subscription found", user_id=user_id, quota=kind)
                return denied()

            limit = subscription.plan.analysis_limit or 0
            if limit <= 0:
                return QuotaStatus(can_proceed=True, used=0, limit=limit)

            if kind == UPLOADS:
                column, owner = Video.uploaded_at, Video.user_id
            else:
                column, owner = AnalysisUsage.analysis_date, AnalysisUsage.user_id

            window_start = now - timedelta(days=self.window_days)
            in_window = self.db.query(column).filter(owner == user_id, column >= window_start)

            used = in_window.count()
            oldest = in_window.order_by(column.asc()).first()
            oldest_usage_at = oldest[0] if oldest else None

            status = evaluate_quota(used, limit, oldest_usage_at, now, self.window_days)

            logger.info(
                "Checked quota",
                user_id=user_id,
                quota=kind,
                used=status.used,
                limit=status.limit,
                can_proceed=status.can_proceed
            )
            return status

        except Exception as e:
            logger.error("Failed to check quota", error=str(e), user_id=user_id, quota=kind)
            return denied()

    def record_analysis_usage(self, user_id: str, video_id: Optional[int], now: Optional[datetime] = None) -> bool:
        """
        Record one analysis against the user's active plan.

        Returns:
            True if the usage row was written, False otherwise
        """
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        try:
            subscription = self.get_active_subscription(user_id)
            if subscription is None:
                logger.error("No active subscription found", user_id=user_id)
                return False

            usage = AnalysisUsage(
                user_id=user_id,
                video_id=video_id,
                analysis_date=now,
                reset_date=now + timedelta(days=self.window_days),
                subscription_plan_id=subscription.pricing_plan_id
            )
            self.db.add(usage)
            self.db.commit()

            logger.info("Recorded analysis usage", user_id=user_id, video_id=video_id, usage_id=usage.id)
            return True

        except Exception as e:
            self.db.rollback()
            logger.error("Failed to record analysis usage", error=str(e), user_id=user_id, video_id=video_id)
            return False

    def get_analysis_history(self, user_id: str) -> List[AnalysisUsage]:
        return (
            self.db.query(AnalysisUsage)
            .filter(AnalysisUsage.user_id == user_id)
            .order_by(AnalysisUsage.analysis_date.desc(), AnalysisUsage.id.desc())
            .all()
        )
