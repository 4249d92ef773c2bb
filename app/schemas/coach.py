from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


class CoachProfileBase(BaseModel):
    years_coaching: int = Field(0, ge=0)
    certifications: List[str] = []
    languages: List[str] = []
    coaching_philosophy: Optional[str] = None
    rate_per_hour: Optional[Decimal] = Field(None, ge=0)
    currency: str = "USD"


class CoachProfileCreate(CoachProfileBase):
    pass


class CoachProfileUpdate(BaseModel):
    years_coaching: Optional[int] = Field(None, ge=0)
    certifications: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    coaching_philosophy: Optional[str] = None
    rate_per_hour: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None


class CoachProfileResponse(CoachProfileBase):
    id: int
    user_id: str
    verified: bool
    display_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    sport: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeaturedCoachCreate(BaseModel):
    coach_id: str
    display_order: int = 0
    featured_since: Optional[datetime] = None


class FeaturedCoachUpdate(BaseModel):
    display_order: Optional[int] = None
    featured_since: Optional[datetime] = None


class FeaturedCoachResponse(BaseModel):
    id: int
    coach_id: str
    display_order: int
    featured_since: Optional[datetime] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
