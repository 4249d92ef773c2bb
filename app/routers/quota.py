from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.subscription import PricingPlan
from app.middleware.auth import get_current_user_id
from app.schemas.quota import (
    QuotaResponse, AnalysisUsageCreate, AnalysisUsageResponse,
    PricingPlanResponse, SubscriptionResponse,
)
from app.services.quota_service import QuotaService
from app.services.membership import membership_for_plan, can_connect_with_players, get_analysis_features
import structlog

logger = structlog.get_logger()
router = APIRouter(tags=["quota"])


@router.get("/api/quota/uploads", response_model=QuotaResponse)
async def get_upload_quota(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Upload allowance for the current user in the trailing window."""
    quota = QuotaService(db).check_upload_quota(current_user_id)
    return QuotaResponse(**quota.as_payload())


@router.get("/api/quota/analyses", response_model=QuotaResponse)
async def get_analysis_quota(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    quota = QuotaService(db).check_analysis_quota(current_user_id)
    return QuotaResponse(**quota.as_payload())


@router.post("/api/quota/analyses", status_code=status.HTTP_201_CREATED)
async def record_analysis(
    usage_data: AnalysisUsageCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Record one analysis against the current user's plan.

    Returns 403 with the quota payload when the allowance is used up.
    """
    service = QuotaService(db)
    quota = service.check_analysis_quota(current_user_id)
    if not quota.can_proceed:
        raise HTTPException(
            status_code=403,
            detail=jsonable_encoder({"message": "Analysis limit reached", **quota.as_payload()})
        )

    if not service.record_analysis_usage(current_user_id, usage_data.videoId):
        raise HTTPException(status_code=500, detail="Failed to record analysis usage")

    remaining = service.check_analysis_quota(current_user_id)
    return {"recorded": True, "quota": QuotaResponse(**remaining.as_payload())}


@router.get("/api/quota/analyses/history", response_model=List[AnalysisUsageResponse])
async def get_analysis_history(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return QuotaService(db).get_analysis_history(current_user_id)


@router.get("/api/subscriptions/me", response_model=SubscriptionResponse)
async def get_my_subscription(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Active subscription with its membership tier and feature list."""
    subscription = QuotaService(db).get_active_subscription(current_user_id)
    if subscription is None:
        raise HTTPException(status_code=404, detail="No active subscription found")

    membership = membership_for_plan(subscription.plan.name)
    return SubscriptionResponse(
        id=subscription.id,
        user_id=subscription.user_id,
        pricing_plan_id=subscription.pricing_plan_id,
        subscription_type=subscription.subscription_type,
        status=subscription.status,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        membership=membership,
        features=get_analysis_features(membership),
        canConnectWithPlayers=can_connect_with_players(membership)
    )


@router.get("/api/pricing", response_model=List[PricingPlanResponse])
async def list_pricing_plans(db: Session = Depends(get_db)):
    return db.query(PricingPlan).order_by(PricingPlan.display_order.asc(), PricingPlan.id.asc()).all()
