from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.models.profile import Profile, UserRole
from app.models.coach import CoachProfile
from app.models.video import Video
from app.middleware.auth import get_current_user_id, require_admin
from app.schemas.profile import ProfileResponse
from app.schemas.video import VideoResponse
from app.schemas.coach import CoachProfileResponse
from app.schemas.admin import AdminUserUpdate, AdminCoachUpdate, AdminStats
from app.routers.coaches import coach_response
from app.routers.videos import detach_video_references
from app.services.storage_service import StorageService
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/setup")
async def setup_admin(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Bootstrap the first administrator.

    Grants the admin role to the current user only while no admin exists.
    """
    try:
        if db.query(UserRole).filter(UserRole.role == "admin").first():
            raise HTTPException(status_code=403, detail="Admin already configured")

        db.add(UserRole(user_id=current_user_id, role="admin"))
        profile = db.query(Profile).filter(Profile.id == current_user_id).first()
        if profile:
            profile.role = "admin"
        db.commit()

        logger.info("Admin bootstrap completed", user_id=current_user_id)
        return {"message": "Admin role granted", "userId": current_user_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to set up admin", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to set up admin: {friendly_error_message(e)}"
        )


@router.get("/users", response_model=List[ProfileResponse])
async def list_users(
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    query = db.query(Profile)
    if status:
        query = query.filter(Profile.status == status)
    return query.order_by(Profile.created_at.desc(), Profile.id.asc()).limit(limit).all()


@router.put("/users/{user_id}", response_model=ProfileResponse)
async def update_user(
    user_id: str,
    user_data: AdminUserUpdate,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Suspend, reactivate or change the role of a user."""
    try:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")

        updates = user_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in updates.items():
            setattr(profile, field, value)

        role = updates.get("role")
        if role and not db.query(UserRole).filter(UserRole.user_id == user_id, UserRole.role == role).first():
            db.add(UserRole(user_id=user_id, role=role))

        db.commit()
        db.refresh(profile)

        logger.info("Admin updated user", user_id=user_id, admin_user_id=admin_user_id, **updates)
        return profile

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update user", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update user: {friendly_error_message(e)}"
        )


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft-delete a user; their rows stay for audit."""
    try:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")

        profile.status = "deleted"
        db.commit()

        logger.info("Admin deleted user", user_id=user_id, admin_user_id=admin_user_id)
        return {"message": "User deleted successfully", "userId": user_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete user", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete user: {friendly_error_message(e)}"
        )


@router.get("/videos", response_model=List[VideoResponse])
async def list_videos(
    limit: int = Query(100, ge=1, le=500),
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return db.query(Video).order_by(Video.uploaded_at.desc(), Video.id.desc()).limit(limit).all()


@router.delete("/videos/{video_id}")
async def delete_video(
    video_id: int,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        video = db.query(Video).filter(Video.id == video_id).first()
        if not video:
            raise HTTPException(status_code=404, detail="Video not found")

        file_path = video.file_path

        detach_video_references(db, video_id)
        db.delete(video)
        db.commit()

        if not StorageService().delete_file(file_path):
            logger.warning("Failed to delete stored file for video", video_id=video_id, file_path=file_path)

        logger.info("Admin deleted video", video_id=video_id, admin_user_id=admin_user_id)
        return {"message": "Video deleted successfully", "videoId": video_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete video", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete video: {friendly_error_message(e)}"
        )


@router.get("/coaches", response_model=List[CoachProfileResponse])
async def list_coaches(
    verified: Optional[bool] = None,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    query = db.query(CoachProfile)
    if verified is not None:
        query = query.filter(CoachProfile.verified == verified)
    return [coach_response(coach) for coach in query.order_by(CoachProfile.id.asc()).all()]


@router.put("/coaches/{user_id}", response_model=CoachProfileResponse)
async def verify_coach(
    user_id: str,
    coach_data: AdminCoachUpdate,
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        coach = db.query(CoachProfile).filter(CoachProfile.user_id == user_id).first()
        if not coach:
            raise HTTPException(status_code=404, detail="Coach profile not found")

        coach.verified = coach_data.verified
        db.commit()
        db.refresh(coach)

        logger.info("Admin set coach verification", user_id=user_id, verified=coach.verified, admin_user_id=admin_user_id)
        return coach_response(coach)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to verify coach", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to verify coach: {friendly_error_message(e)}"
        )


@router.get("/stats", response_model=AdminStats)
async def get_stats(
    admin_user_id: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    total_videos = db.query(Video).count()
    analyzed_videos = db.query(Video).filter(Video.analyzed.is_(True)).count()
    return AdminStats(
        totalUsers=db.query(Profile).filter(Profile.status != "deleted").count(),
        totalCoaches=db.query(Profile).filter(Profile.role == "coach", Profile.status != "deleted").count(),
        totalVideos=total_videos,
        analyzedVideos=analyzed_videos,
        pendingVideos=total_videos - analyzed_videos
    )
