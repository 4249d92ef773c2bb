from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional

ItemType = Literal["goal", "note", "task", "achievement"]
ItemStatus = Literal["pending", "in_progress", "completed", "archived"]
ItemPriority = Literal["low", "medium", "high"]


class DashboardItemCreate(BaseModel):
    title: str
    description: Optional[str] = None
    item_type: ItemType = "task"
    status: ItemStatus = "pending"
    priority: ItemPriority = "medium"
    due_date: Optional[datetime] = None


class DashboardItemUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    item_type: Optional[ItemType] = None
    status: Optional[ItemStatus] = None
    priority: Optional[ItemPriority] = None
    due_date: Optional[datetime] = None


class DashboardItemResponse(DashboardItemCreate):
    id: int
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    totalItems: int
    completedItems: int
    inProgressItems: int
