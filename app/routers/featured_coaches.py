from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.profile import Profile
from app.models.coach import FeaturedCoach
from app.middleware.auth import require_admin
from app.schemas.coach import FeaturedCoachCreate, FeaturedCoachUpdate, FeaturedCoachResponse
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/featured-coaches", tags=["featured-coaches"])


def featured_response(featured: FeaturedCoach) -> FeaturedCoachResponse:
    coach = featured.coach
    return FeaturedCoachResponse(
        id=featured.id,
        coach_id=featured.coach_id,
        display_order=featured.display_order,
        featured_since=featured.featured_since,
        display_name=coach.display_name if coach else None,
        username=coach.username if coach else None,
        bio=coach.bio if coach else None,
        avatar_url=coach.avatar_url if coach else None
    )


def _get_featured_or_404(db: Session, coach_id: str) -> FeaturedCoach:
    featured = db.query(FeaturedCoach).filter(FeaturedCoach.coach_id == coach_id).first()
    if not featured:
        raise HTTPException(status_code=404, detail="Featured coach not found")
    return featured


@router.get("", response_model=List[FeaturedCoachResponse])
async def list_featured_coaches(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Featured coaches in display order."""
    try:
        featured = (
            db.query(FeaturedCoach)
            .order_by(FeaturedCoach.display_order.asc(), FeaturedCoach.id.asc())
            .limit(limit)
            .all()
        )
        return [featured_response(item) for item in featured]

    except Exception as e:
        logger.error("Failed to list featured coaches", error=str(e))
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list featured coaches: {friendly_error_message(e)}"
        )


@router.get("/search", response_model=List[FeaturedCoachResponse])
async def search_featured_coaches(
    query: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    try:
        pattern = f"%{query.strip()}%"
        featured = (
            db.query(FeaturedCoach)
            .join(Profile, FeaturedCoach.coach_id == Profile.id)
            .filter(or_(
                Profile.display_name.ilike(pattern),
                Profile.username.ilike(pattern),
                Profile.bio.ilike(pattern)
            ))
            .order_by(FeaturedCoach.display_order.asc(), FeaturedCoach.id.asc())
            .all()
        )
        return [featured_response(item) for item in featured]

    except Exception as e:
        logger.error("Failed to search featured coaches", error=str(e), query=query)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to search featured coaches: {friendly_error_message(e)}"
        )


@router.get("/{coach_id}", response_model=FeaturedCoachResponse)
async def get_featured_coach(coach_id: str, db: Session = Depends(get_db)):
    return featured_response(_get_featured_or_404(db, coach_id))


@router.post("", response_model=FeaturedCoachResponse, status_code=status.HTTP_201_CREATED)
async def create_featured_coach(
    featured_data: FeaturedCoachCreate,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Feature a coach on the landing page (admin only)."""
    try:
        coach = db.query(Profile).filter(
            Profile.id == featured_data.coach_id,
            Profile.role == "coach"
        ).first()
        if not coach:
            raise HTTPException(status_code=404, detail="Coach not found")

        values = featured_data.model_dump(exclude_none=True)
        featured = FeaturedCoach(**values)
        db.add(featured)
        db.commit()
        db.refresh(featured)

        logger.info("Featured coach added", coach_id=featured.coach_id, admin_user_id=admin_user_id)
        return featured_response(featured)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to feature coach", error=str(e), coach_id=featured_data.coach_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to feature coach: {friendly_error_message(e)}"
        )


@router.put("/{coach_id}", response_model=FeaturedCoachResponse)
async def update_featured_coach(
    coach_id: str,
    featured_data: FeaturedCoachUpdate,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        featured = _get_featured_or_404(db, coach_id)

        for field, value in featured_data.model_dump(exclude_unset=True).items():
            setattr(featured, field, value)

        db.commit()
        db.refresh(featured)

        logger.info("Featured coach updated", coach_id=coach_id, admin_user_id=admin_user_id)
        return featured_response(featured)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update featured coach", error=str(e), coach_id=coach_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update featured coach: {friendly_error_message(e)}"
        )


@router.delete("/{coach_id}")
async def delete_featured_coach(
    coach_id: str,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        featured = _get_featured_or_404(db, coach_id)
        db.delete(featured)
        db.commit()

        logger.info("Featured coach removed", coach_id=coach_id, admin_user_id=admin_user_id)
        return {"message": "Featured coach removed", "coachId": coach_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to remove featured coach", error=str(e), coach_id=coach_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to remove featured coach: {friendly_error_message(e)}"
        )
