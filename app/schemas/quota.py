from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


class QuotaResponse(BaseModel):
    canProceed: bool
    used: int
    limit: int
    nextResetDate: Optional[datetime] = None
    daysRemaining: int = 0
    resetLabel: str


class AnalysisUsageCreate(BaseModel):
    videoId: Optional[int] = None


class AnalysisUsageResponse(BaseModel):
    id: int
    user_id: str
    video_id: Optional[int] = None
    analysis_date: datetime
    reset_date: datetime
    subscription_plan_id: int

    class Config:
        from_attributes = True


class PricingPlanResponse(BaseModel):
    id: int
    name: str
    description: str
    monthly_price: Decimal
    yearly_price: Decimal
    features: Optional[List[str]] = None
    analysis_limit: int
    display_order: int

    class Config:
        from_attributes = True


class SubscriptionResponse(BaseModel):
    id: int
    user_id: str
    pricing_plan_id: int
    subscription_type: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    membership: str
    features: List[str]
    canConnectWithPlayers: bool
