import pytest
from datetime import datetime, timedelta, timezone
from app.models.subscription import AnalysisUsage, UserSubscription
from app.models.video import Video
from app.services.quota_service import (
    QuotaService, evaluate_quota, format_reset_date, ensure_utc
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("used,limit", [(0, 1), (2, 3), (3, 3), (4, 3), (29, 30), (30, 30)])
def test_can_proceed_iff_under_limit(used, limit):
    """With a recent oldest usage, the limit alone decides."""
    status = evaluate_quota(used, limit, NOW - timedelta(days=1), NOW)

    assert status.can_proceed == (used < limit)


@pytest.mark.parametrize("limit", [0, -1])
@pytest.mark.parametrize("used", [0, 5, 1000])
def test_unlimited_plan_always_proceeds(used, limit):
    status = evaluate_quota(used, limit, NOW - timedelta(days=1), NOW)

    assert status.can_proceed is True


def test_limit_reached_reports_reset_date():
    oldest = NOW - timedelta(days=10)

    status = evaluate_quota(3, 3, oldest, NOW)

    assert status.can_proceed is False
    assert status.next_reset_date == oldest + timedelta(days=30)
    assert status.days_remaining == 20


def test_days_remaining_rounds_up_partial_days():
    oldest = NOW - timedelta(days=29, hours=12)

    status = evaluate_quota(3, 3, oldest, NOW)

    assert status.days_remaining == 1


def test_past_reset_date_is_eligible_again():
    status = evaluate_quota(3, 3, NOW - timedelta(days=31), NOW)

    assert status.can_proceed is True
    assert status.next_reset_date is None


def test_naive_timestamps_are_treated_as_utc():
    naive_oldest = datetime(2024, 6, 5, 12, 0)

    status = evaluate_quota(1, 1, naive_oldest, NOW)

    assert status.next_reset_date == datetime(2024, 7, 5, 12, 0, tzinfo=timezone.utc)
    assert ensure_utc(naive_oldest).tzinfo == timezone.utc


@pytest.mark.parametrize("delta,label", [
    (None, "Available now"),
    (timedelta(days=-2), "Available now"),
    (timedelta(hours=5), "Tomorrow"),
    (timedelta(days=1), "Tomorrow"),
    (timedelta(days=6, hours=1), "7 days"),
])
def test_format_reset_date(delta, label):
    reset_date = NOW + delta if delta is not None else None

    assert format_reset_date(reset_date, now=NOW) == label


def test_no_subscription_denies(db_session, test_profile):
    status = QuotaService(db_session).check_upload_quota("test_user_123", now=NOW)

    assert status.can_proceed is False
    assert status.used == 0
    assert status.limit == 0


def test_inactive_subscription_denies(db_session, test_profile, make_subscription):
    make_subscription(limit=5, status="cancelled")

    status = QuotaService(db_session).check_analysis_quota("test_user_123", now=NOW)

    assert status.can_proceed is False


def test_latest_active_subscription_wins(db_session, test_profile, make_subscription):
    older = make_subscription(limit=1, plan_name="Free")
    older.created_at = NOW - timedelta(days=60)
    db_session.commit()
    make_subscription(limit=10, plan_name="Advanced")

    status = QuotaService(db_session).check_upload_quota("test_user_123")

    assert status.limit == 10


def test_uploads_outside_window_are_not_counted(db_session, test_profile, make_subscription):
    make_subscription(limit=2)
    for days_ago in (45, 31, 5):
        db_session.add(Video(
            user_id="test_user_123",
            file_path="videos/test_user_123/1.mp4",
            file_name="1.mp4",
            uploaded_at=NOW - timedelta(days=days_ago)
        ))
    db_session.commit()

    status = QuotaService(db_session).check_upload_quota("test_user_123", now=NOW)

    assert status.used == 1
    assert status.can_proceed is True


def test_record_and_list_analysis_usage(db_session, test_profile, make_subscription):
    subscription = make_subscription(limit=2)
    service = QuotaService(db_session)

    assert service.record_analysis_usage("test_user_123", None, now=NOW - timedelta(days=3)) is True
    assert service.record_analysis_usage("test_user_123", None, now=NOW - timedelta(days=1)) is True

    status = service.check_analysis_quota("test_user_123", now=NOW)
    assert status.can_proceed is False
    assert status.used == 2
    assert status.days_remaining == 27

    history = service.get_analysis_history("test_user_123")
    assert len(history) == 2
    assert ensure_utc(history[0].analysis_date) > ensure_utc(history[1].analysis_date)
    assert history[0].subscription_plan_id == subscription.pricing_plan_id
    assert ensure_utc(history[0].reset_date) == NOW - timedelta(days=1) + timedelta(days=30)


def test_record_analysis_usage_without_subscription(db_session, test_profile):
    assert QuotaService(db_session).record_analysis_usage("test_user_123", None) is False
    assert db_session.query(AnalysisUsage).count() == 0


def test_quota_endpoints(client, test_profile, make_subscription):
    make_subscription(limit=3)

    response = client.get("/api/quota/uploads")
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "canProceed": True,
        "used": 0,
        "limit": 3,
        "nextResetDate": None,
        "daysRemaining": 0,
        "resetLabel": "Available now"
    }

    response = client.get("/api/quota/analyses")
    assert response.json()["canProceed"] is True


def test_record_analysis_endpoint_until_exhausted(client, test_profile, make_subscription):
    make_subscription(limit=1)

    response = client.post("/api/quota/analyses", json={})
    assert response.status_code == 201
    assert response.json()["quota"]["canProceed"] is False

    response = client.post("/api/quota/analyses", json={})
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Analysis limit reached"

    response = client.get("/api/quota/analyses/history")
    assert response.status_code == 200
    assert len(response.json()) == 1


def test_subscription_me(client, test_profile, make_subscription):
    make_subscription(limit=20, plan_name="Advanced")

    response = client.get("/api/subscriptions/me")

    assert response.status_code == 200
    data = response.json()
    assert data["membership"] == "Advanced"
    assert data["canConnectWithPlayers"] is True
    assert "Detailed frame-by-frame analysis" in data["features"]


def test_subscription_me_missing(client, test_profile):
    response = client.get("/api/subscriptions/me")

    assert response.status_code == 404


def test_pricing_in_display_order(client, db_session, make_subscription):
    make_subscription(limit=20, plan_name="Advanced")
    make_subscription(limit=3, plan_name="Free")
    plans = {sub.plan.name: sub.plan for sub in db_session.query(UserSubscription).all()}
    plans["Free"].display_order = 1
    plans["Advanced"].display_order = 2
    db_session.commit()

    response = client.get("/api/pricing")

    assert response.status_code == 200
    assert [plan["name"] for plan in response.json()] == ["Free", "Advanced"]
