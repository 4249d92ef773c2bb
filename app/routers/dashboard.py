from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.models.dashboard import DashboardItem
from app.middleware.auth import get_current_user_id
from app.schemas.dashboard import (
    DashboardItemCreate, DashboardItemUpdate, DashboardItemResponse, DashboardStats
)
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _get_item_or_404(db: Session, item_id: int, user_id: str) -> DashboardItem:
    item = db.query(DashboardItem).filter(DashboardItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Dashboard item not found")
    if item.user_id != user_id:
        raise HTTPException(
            status_code=403,
            detail="Access denied: Dashboard item does not belong to current user"
        )
    return item


@router.get("/items", response_model=List[DashboardItemResponse])
async def list_items(
    item_type: Optional[str] = None,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the current user's goals, notes, tasks and achievements."""
    query = db.query(DashboardItem).filter(DashboardItem.user_id == current_user_id)
    if item_type:
        query = query.filter(DashboardItem.item_type == item_type)
    return query.order_by(DashboardItem.created_at.desc(), DashboardItem.id.desc()).all()


@router.post("/items", response_model=DashboardItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: DashboardItemCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        item = DashboardItem(user_id=current_user_id, **item_data.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)

        logger.info("Dashboard item created", item_id=item.id, user_id=current_user_id)
        return item

    except Exception as e:
        db.rollback()
        logger.error("Failed to create dashboard item", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create dashboard item: {friendly_error_message(e)}"
        )


@router.put("/items/{item_id}", response_model=DashboardItemResponse)
async def update_item(
    item_id: int,
    item_data: DashboardItemUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        item = _get_item_or_404(db, item_id, current_user_id)

        for field, value in item_data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)

        db.commit()
        db.refresh(item)
        return item

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update dashboard item", error=str(e), item_id=item_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update dashboard item: {friendly_error_message(e)}"
        )


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        item = _get_item_or_404(db, item_id, current_user_id)
        db.delete(item)
        db.commit()

        logger.info("Dashboard item deleted", item_id=item_id, user_id=current_user_id)
        return {"message": "Dashboard item deleted successfully", "itemId": item_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete dashboard item", error=str(e), item_id=item_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete dashboard item: {friendly_error_message(e)}"
        )


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    items = db.query(DashboardItem).filter(DashboardItem.user_id == current_user_id)
    return DashboardStats(
        totalItems=items.count(),
        completedItems=items.filter(DashboardItem.status == "completed").count(),
        inProgressItems=items.filter(DashboardItem.status == "in_progress").count()
    )
