from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Literal, Optional


class ProfileBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    display_name: Optional[str] = None
    bio: Optional[str] = None
    sport: Optional[str] = None
    location: Optional[str] = None
    playing_experience: Optional[str] = None
    preferred_play_style: Optional[str] = None
    avatar_url: Optional[str] = None
    years_coaching: int = Field(0, ge=0)


class ProfileCreate(ProfileBase):
    email: Optional[EmailStr] = None
    role: Literal["player", "coach"] = "player"


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    display_name: Optional[str] = None
    bio: Optional[str] = None
    sport: Optional[str] = None
    location: Optional[str] = None
    playing_experience: Optional[str] = None
    preferred_play_style: Optional[str] = None
    avatar_url: Optional[str] = None
    years_coaching: Optional[int] = Field(None, ge=0)


class ProfileResponse(ProfileBase):
    id: str  # auth user ID
    email: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
