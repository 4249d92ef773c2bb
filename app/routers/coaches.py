from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import List
from app.database import get_db
from app.models.profile import Profile, UserRole
from app.models.coach import CoachProfile
from app.models.video import Video, VideoCoach
from app.middleware.auth import get_current_user_id, is_admin
from app.schemas.coach import CoachProfileCreate, CoachProfileUpdate, CoachProfileResponse
from app.schemas.video import VideoResponse
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/coaches", tags=["coaches"])


def coach_response(coach: CoachProfile) -> CoachProfileResponse:
    """Flatten a coach profile and its owner's public profile fields."""
    profile = coach.profile
    return CoachProfileResponse(
        id=coach.id,
        user_id=coach.user_id,
        years_coaching=coach.years_coaching or 0,
        certifications=coach.certifications or [],
        languages=coach.languages or [],
        coaching_philosophy=coach.coaching_philosophy,
        rate_per_hour=coach.rate_per_hour,
        currency=coach.currency,
        verified=bool(coach.verified),
        display_name=profile.display_name if profile else None,
        username=profile.username if profile else None,
        bio=profile.bio if profile else None,
        sport=profile.sport if profile else None,
        created_at=coach.created_at
    )


def _active_coaches(db: Session):
    return (
        db.query(CoachProfile)
        .join(Profile, CoachProfile.user_id == Profile.id)
        .options(joinedload(CoachProfile.profile))
        .filter(Profile.status == "active")
    )


def _get_coach_by_user_or_404(db: Session, user_id: str) -> CoachProfile:
    coach = db.query(CoachProfile).filter(CoachProfile.user_id == user_id).first()
    if not coach:
        raise HTTPException(status_code=404, detail="Coach profile not found")
    return coach


def _require_owner(db: Session, user_id: str, current_user_id: str) -> None:
    if user_id != current_user_id and not is_admin(db, current_user_id):
        raise HTTPException(
            status_code=403,
            detail="Access denied: Coach profile does not belong to current user"
        )


@router.get("", response_model=List[CoachProfileResponse])
async def list_coaches(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """List active coaches, most experienced first."""
    try:
        coaches = (
            _active_coaches(db)
            .order_by(CoachProfile.years_coaching.desc(), CoachProfile.id.asc())
            .limit(limit)
            .all()
        )
        return [coach_response(coach) for coach in coaches]

    except Exception as e:
        logger.error("Failed to list coaches", error=str(e))
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list coaches: {friendly_error_message(e)}"
        )


@router.get("/search", response_model=List[CoachProfileResponse])
async def search_coaches(
    query: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """Case-insensitive search over coach names, usernames and bios."""
    try:
        pattern = f"%{query.strip()}%"
        coaches = (
            _active_coaches(db)
            .filter(or_(
                Profile.display_name.ilike(pattern),
                Profile.username.ilike(pattern),
                Profile.bio.ilike(pattern),
                CoachProfile.coaching_philosophy.ilike(pattern)
            ))
            .order_by(CoachProfile.years_coaching.desc(), CoachProfile.id.asc())
            .limit(limit)
            .all()
        )

        logger.info("Searched coaches", query=query, results=len(coaches))
        return [coach_response(coach) for coach in coaches]

    except Exception as e:
        logger.error("Failed to search coaches", error=str(e), query=query)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to search coaches: {friendly_error_message(e)}"
        )


@router.get("/me/pending-videos", response_model=List[VideoResponse])
async def get_pending_videos(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Videos shared with the current coach that still await feedback."""
    try:
        videos = (
            db.query(Video)
            .join(VideoCoach, VideoCoach.video_id == Video.id)
            .filter(VideoCoach.coach_id == current_user_id, VideoCoach.status == "pending")
            .order_by(Video.uploaded_at.desc(), Video.id.desc())
            .all()
        )

        logger.info("Retrieved pending videos", coach_id=current_user_id, video_count=len(videos))
        return videos

    except Exception as e:
        logger.error("Failed to retrieve pending videos", error=str(e), coach_id=current_user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve pending videos: {friendly_error_message(e)}"
        )


@router.get("/profile/{user_id}", response_model=CoachProfileResponse)
async def get_coach_by_user(user_id: str, db: Session = Depends(get_db)):
    return coach_response(_get_coach_by_user_or_404(db, user_id))


@router.get("/{coach_id}", response_model=CoachProfileResponse)
async def get_coach(coach_id: int, db: Session = Depends(get_db)):
    coach = db.query(CoachProfile).filter(CoachProfile.id == coach_id).first()
    if not coach:
        raise HTTPException(status_code=404, detail="Coach profile not found")
    return coach_response(coach)


@router.post("", response_model=CoachProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_coach_profile(
    coach_data: CoachProfileCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a coach profile for the current user.

    The user's profile role becomes "coach" and a coach role grant is added.

    Args:
        coach_data: Experience, certifications, languages and rate
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        The created coach profile
    """
    try:
        profile = db.query(Profile).filter(Profile.id == current_user_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")

        if db.query(CoachProfile).filter(CoachProfile.user_id == current_user_id).first():
            raise HTTPException(status_code=409, detail="Coach profile already exists")

        coach = CoachProfile(user_id=current_user_id, **coach_data.model_dump())
        db.add(coach)

        profile.role = "coach"
        profile.years_coaching = coach_data.years_coaching
        has_role = db.query(UserRole).filter(
            UserRole.user_id == current_user_id,
            UserRole.role == "coach"
        ).first()
        if not has_role:
            db.add(UserRole(user_id=current_user_id, role="coach"))

        db.commit()
        db.refresh(coach)

        logger.info("Coach profile created", user_id=current_user_id, coach_id=coach.id)
        return coach_response(coach)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to create coach profile", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create coach profile: {friendly_error_message(e)}"
        )


@router.put("/profile/{user_id}", response_model=CoachProfileResponse)
async def update_coach_profile(
    user_id: str,
    coach_data: CoachProfileUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        _require_owner(db, user_id, current_user_id)
        coach = _get_coach_by_user_or_404(db, user_id)

        updates = coach_data.model_dump(exclude_unset=True)
        for field, value in updates.items():
            setattr(coach, field, value)
        if "years_coaching" in updates and coach.profile is not None:
            coach.profile.years_coaching = updates["years_coaching"]

        db.commit()
        db.refresh(coach)

        logger.info("Coach profile updated", user_id=user_id, updated_by=current_user_id)
        return coach_response(coach)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update coach profile", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update coach profile: {friendly_error_message(e)}"
        )


@router.delete("/profile/{user_id}")
async def delete_coach_profile(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        _require_owner(db, user_id, current_user_id)
        coach = _get_coach_by_user_or_404(db, user_id)

        db.delete(coach)
        db.commit()

        logger.info("Coach profile deleted", user_id=user_id, deleted_by=current_user_id)
        return {"message": "Coach profile deleted successfully", "userId": user_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete coach profile", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete coach profile: {friendly_error_message(e)}"
        )
