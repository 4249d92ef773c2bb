from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class VideoBase(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    focus_area: Optional[str] = None


class VideoCreate(VideoBase):
    file_path: str
    file_name: str
    file_size: Optional[int] = Field(None, ge=0)


class VideoUpdate(VideoBase):
    analyzed: Optional[bool] = None


class VideoResponse(VideoBase):
    id: int
    user_id: str
    file_path: str
    file_name: str
    file_size: Optional[int] = None
    analyzed: bool
    duration_seconds: Optional[float] = None
    processing_status: str
    uploaded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VideoCoachAssign(BaseModel):
    coach_ids: List[str] = Field(..., min_length=1)


class VideoCoachResponse(BaseModel):
    id: int
    video_id: int
    coach_id: str
    status: str

    class Config:
        from_attributes = True


class FeedbackCreate(BaseModel):
    feedback_text: str = Field(..., min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=5)


class FeedbackResponse(FeedbackCreate):
    id: int
    video_id: int
    coach_id: str
    player_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
