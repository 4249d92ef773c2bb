from pydantic import BaseModel
from datetime import datetime
from typing import Any, List, Literal, Optional


class AnalysisSessionCreate(BaseModel):
    title: str
    description: Optional[str] = None
    video_id: Optional[int] = None
    coach_id: Optional[str] = None
    sport_type: str = "table-tennis"
    media_type: Literal["video", "photo", "audio", "document", "note"] = "video"


class AnalysisSessionUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    coach_id: Optional[str] = None
    analysis_status: Optional[str] = None


class AnalysisResultResponse(BaseModel):
    id: int
    analysis_type: str
    score: Optional[float] = None
    feedback: Optional[str] = None
    strengths: Optional[List[str]] = None
    areas_of_improvement: Optional[List[str]] = None

    class Config:
        from_attributes = True


class AnalysisSessionResponse(BaseModel):
    id: int
    user_id: str
    coach_id: Optional[str] = None
    video_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    sport_type: str
    media_type: str
    analysis_status: str
    created_at: Optional[datetime] = None
    results: List[AnalysisResultResponse] = []

    class Config:
        from_attributes = True


class AnalyzeRequest(BaseModel):
    analysis_type: str = "technique"


class FrameCreate(BaseModel):
    frame_number: int
    timestamp_ms: int
    pose_data: Optional[Any] = None
    technique_notes: Optional[str] = None


class FrameResponse(FrameCreate):
    id: int
    session_id: int

    class Config:
        from_attributes = True


class AnnotationCreate(BaseModel):
    annotation_type: str
    coordinates: Any
    frame_id: Optional[int] = None
    color: str = "#FF0000"
    label: Optional[str] = None


class AnnotationResponse(AnnotationCreate):
    id: int
    session_id: int

    class Config:
        from_attributes = True
