from pydantic import BaseModel, Field
from typing import Dict, Optional


class MatchRequest(BaseModel):
    answers: Dict[str, str]
    threshold: float = Field(0.5, ge=0, le=1)


class MatchResultResponse(BaseModel):
    candidate_id: str
    username: str
    display_name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    years_coaching: Optional[int] = None
    similarity_score: float
    match_reason: str


class ConnectionCreate(BaseModel):
    coach_id: str
    student_id: str


class ConnectionResponse(BaseModel):
    id: int
    coach_id: str
    student_id: str
    status: str

    class Config:
        from_attributes = True
