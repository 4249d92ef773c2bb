from pydantic import BaseModel
from typing import Literal, Optional


class AdminUserUpdate(BaseModel):
    status: Optional[Literal["active", "suspended", "deleted"]] = None
    role: Optional[Literal["player", "coach", "admin"]] = None


class AdminCoachUpdate(BaseModel):
    verified: bool


class AdminStats(BaseModel):
    totalUsers: int
    totalCoaches: int
    totalVideos: int
    analyzedVideos: int
    pendingVideos: int
