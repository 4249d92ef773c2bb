from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db, SessionLocal
from app.models.profile import Profile
from app.models.video import Video, VideoCoach, VideoFeedback
from app.models.analysis import AnalysisSession
from app.models.subscription import AnalysisUsage
from app.middleware.auth import get_current_user_id, is_admin
from app.schemas.upload import UploadUrlRequest, UploadUrlResponse
from app.schemas.video import (
    VideoCreate, VideoUpdate, VideoResponse,
    VideoCoachAssign, VideoCoachResponse,
    FeedbackCreate, FeedbackResponse,
)
from app.services.storage_service import StorageService, normalized_video_key
from app.services.quota_service import QuotaService
from app.services.video_processor import VideoProcessor
from app.services.error_hints import friendly_error_message, status_for_error
import structlog
import tempfile
from pathlib import Path

logger = structlog.get_logger()
router = APIRouter(prefix="/api/videos", tags=["videos"])


def _require_upload_quota(db: Session, user_id: str) -> None:
    quota = QuotaService(db).check_upload_quota(user_id)
    if not quota.can_proceed:
        logger.info("Upload blocked by quota", user_id=user_id, used=quota.used, limit=quota.limit)
        raise HTTPException(
            status_code=403,
            detail=jsonable_encoder({"message": "Upload limit reached", **quota.as_payload()})
        )


def _get_video_or_404(db: Session, video_id: int) -> Video:
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


def _is_assigned_coach(db: Session, video_id: int, user_id: str) -> bool:
    return db.query(VideoCoach).filter(
        VideoCoach.video_id == video_id,
        VideoCoach.coach_id == user_id
    ).first() is not None


def _require_owner(db: Session, video: Video, user_id: str) -> None:
    if video.user_id != user_id and not is_admin(db, user_id):
        raise HTTPException(
            status_code=403,
            detail="Access denied: Video does not belong to current user"
        )


def detach_video_references(db: Session, video_id: int) -> None:
    """Unlink analysis sessions and usage rows so the video row can be deleted."""
    db.query(AnalysisSession).filter(AnalysisSession.video_id == video_id).update(
        {AnalysisSession.video_id: None}, synchronize_session=False
    )
    db.query(AnalysisUsage).filter(AnalysisUsage.video_id == video_id).update(
        {AnalysisUsage.video_id: None}, synchronize_session=False
    )


def _require_viewer(db: Session, video: Video, user_id: str) -> None:
    if video.user_id == user_id or _is_assigned_coach(db, video.id, user_id) or is_admin(db, user_id):
        return
    raise HTTPException(status_code=403, detail="Access denied: Video is not shared with current user")


@router.post("/upload-url", response_model=UploadUrlResponse)
async def get_upload_url(
    request: UploadUrlRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Generate a presigned POST for uploading a video to object storage.

    Args:
        request: Contains filename and content type
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        Presigned upload URL, form fields and the storage key
    """
    _require_upload_quota(db, current_user_id)

    try:
        storage = StorageService()
        upload_url, file_path, presigned_fields = storage.generate_presigned_upload_url(
            user_id=current_user_id,
            filename=request.filename,
            content_type=request.contentType
        )

        logger.info(
            "Generated upload URL",
            user_id=current_user_id,
            filename=request.filename,
            content_type=request.contentType
        )

        return UploadUrlResponse(
            uploadUrl=upload_url,
            filePath=file_path,
            contentType=request.contentType,
            contentDisposition="inline",
            uploadFields=presigned_fields
        )

    except Exception as e:
        logger.error(
            "Failed to generate upload URL",
            error=str(e),
            filename=request.filename
        )
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate upload URL: {str(e)}"
        )


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def create_video(
    video_data: VideoCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Save metadata for a video that was uploaded to storage.

    Args:
        video_data: Storage key, file name/size, title and focus area
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        The created video record
    """
    if not video_data.file_path.startswith(f"videos/{current_user_id}/"):
        raise HTTPException(status_code=400, detail="Invalid file path for current user")

    _require_upload_quota(db, current_user_id)

    try:
        video = Video(user_id=current_user_id, **video_data.model_dump())
        db.add(video)
        db.commit()
        db.refresh(video)

        logger.info(
            "Video saved successfully",
            video_id=video.id,
            user_id=current_user_id,
            file_path=video.file_path
        )
        return video

    except Exception as e:
        db.rollback()
        logger.error("Failed to save video", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to save video: {friendly_error_message(e)}"
        )


@router.get("", response_model=List[VideoResponse])
async def get_user_videos(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fetch all videos for the current user, newest first."""
    try:
        videos = (
            db.query(Video)
            .filter(Video.user_id == current_user_id)
            .order_by(Video.uploaded_at.desc(), Video.id.desc())
            .all()
        )

        logger.info("Retrieved user videos", user_id=current_user_id, video_count=len(videos))
        return videos

    except Exception as e:
        logger.error("Failed to retrieve user videos", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve videos: {friendly_error_message(e)}"
        )


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fetch a single video. Visible to its owner, assigned coaches and admins."""
    video = _get_video_or_404(db, video_id)
    _require_viewer(db, video, current_user_id)
    return video


@router.get("/{video_id}/access-url")
async def get_video_access_url(
    video_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get a presigned URL for playing a video.

    Returns:
        Video ID, access URL and storage key
    """
    video = _get_video_or_404(db, video_id)
    _require_viewer(db, video, current_user_id)

    try:
        storage = StorageService()
        access_url = storage.generate_access_url(video.file_path)

        logger.info("Generated access URL for video", video_id=video_id, user_id=current_user_id)

        return {
            "videoId": video_id,
            "accessUrl": access_url,
            "filePath": video.file_path
        }

    except Exception as e:
        logger.error("Failed to generate access URL", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate access URL: {str(e)}"
        )


@router.put("/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: int,
    video_data: VideoUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update title, description, focus area or the analyzed flag."""
    try:
        video = _get_video_or_404(db, video_id)
        _require_owner(db, video, current_user_id)

        for field, value in video_data.model_dump(exclude_unset=True).items():
            setattr(video, field, value)

        db.commit()
        db.refresh(video)

        logger.info("Video updated", video_id=video_id, user_id=current_user_id)
        return video

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update video", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update video: {friendly_error_message(e)}"
        )


@router.delete("/{video_id}")
async def delete_video(
    video_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a video record and its stored file.

    The record is deleted first; storage deletion failures are only logged.
    """
    try:
        video = _get_video_or_404(db, video_id)
        _require_owner(db, video, current_user_id)
        file_path = video.file_path

        detach_video_references(db, video_id)
        db.delete(video)
        db.commit()

        if not StorageService().delete_file(file_path):
            logger.warning("Failed to delete stored file for video", video_id=video_id, file_path=file_path)

        logger.info("Video deleted successfully", video_id=video_id, user_id=current_user_id)

        return {
            "message": "Video deleted successfully",
            "videoId": video_id
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete video", error=str(e), video_id=video_id, user_id=current_user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete video: {friendly_error_message(e)}"
        )


@router.post("/{video_id}/coaches", response_model=List[VideoCoachResponse])
async def assign_coaches(
    video_id: int,
    assignment: VideoCoachAssign,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Share a video with one or more coaches for feedback.

    Coaches already assigned are left untouched.
    """
    try:
        video = _get_video_or_404(db, video_id)
        _require_owner(db, video, current_user_id)

        coach_ids = list(dict.fromkeys(assignment.coach_ids))
        coaches = db.query(Profile).filter(Profile.id.in_(coach_ids), Profile.role == "coach").all()
        missing = set(coach_ids) - {coach.id for coach in coaches}
        if missing:
            raise HTTPException(status_code=404, detail=f"Coach not found: {', '.join(sorted(missing))}")

        already_assigned = {
            row.coach_id for row in db.query(VideoCoach).filter(VideoCoach.video_id == video_id).all()
        }
        for coach_id in coach_ids:
            if coach_id not in already_assigned:
                db.add(VideoCoach(video_id=video_id, coach_id=coach_id))
        db.commit()

        assignments = db.query(VideoCoach).filter(VideoCoach.video_id == video_id).all()

        logger.info("Assigned coaches to video", video_id=video_id, coach_ids=coach_ids)
        return assignments

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to assign coaches", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to assign coaches: {friendly_error_message(e)}"
        )


@router.get("/{video_id}/feedback", response_model=List[FeedbackResponse])
async def get_video_feedback(
    video_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List coach feedback for a video."""
    video = _get_video_or_404(db, video_id)
    _require_viewer(db, video, current_user_id)
    return (
        db.query(VideoFeedback)
        .filter(VideoFeedback.video_id == video_id)
        .order_by(VideoFeedback.id.asc())
        .all()
    )


@router.post("/{video_id}/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_video_feedback(
    video_id: int,
    feedback_data: FeedbackCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Leave feedback on a video as an assigned coach.

    Marks the video as analyzed and the coach's assignment as completed.
    """
    try:
        video = _get_video_or_404(db, video_id)

        assignment = db.query(VideoCoach).filter(
            VideoCoach.video_id == video_id,
            VideoCoach.coach_id == current_user_id
        ).first()
        if not assignment and not is_admin(db, current_user_id):
            raise HTTPException(status_code=403, detail="Access denied: Video is not assigned to current coach")

        feedback = VideoFeedback(
            video_id=video_id,
            coach_id=current_user_id,
            player_id=video.user_id,
            feedback_text=feedback_data.feedback_text,
            rating=feedback_data.rating
        )
        db.add(feedback)
        video.analyzed = True
        if assignment:
            assignment.status = "completed"
        db.commit()
        db.refresh(feedback)

        logger.info("Feedback created", video_id=video_id, coach_id=current_user_id, feedback_id=feedback.id)
        return feedback

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to create feedback", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create feedback: {friendly_error_message(e)}"
        )


@router.post("/{video_id}/process")
async def process_video(
    video_id: int,
    background_tasks: BackgroundTasks,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Normalize a video to 720p H.264/AAC in the background.

    Returns:
        Processing status
    """
    try:
        video = _get_video_or_404(db, video_id)
        _require_owner(db, video, current_user_id)

        if video.processing_status == "processing":
            return {
                "message": "Video is already being processed",
                "videoId": video_id,
                "status": "processing"
            }

        video.processing_status = "processing"
        video.processing_error = None
        db.commit()

        background_tasks.add_task(
            _process_video_background,
            video_id=video_id,
            file_path=video.file_path
        )

        logger.info("Started video processing task", video_id=video_id, user_id=current_user_id)

        return {
            "message": "Video processing started",
            "videoId": video_id,
            "status": "processing"
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to start video processing", error=str(e), video_id=video_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to start video processing: {friendly_error_message(e)}"
        )


def _process_video_background(video_id: int, file_path: str, session_factory=SessionLocal):
    """
    Background task: download, normalize, upload the normalized file and
    record the outcome on the video row.
    """
    logger.info("Starting background video processing", video_id=video_id)

    db = session_factory()
    try:
        storage = StorageService()
        processor = VideoProcessor()

        with tempfile.TemporaryDirectory() as temp_dir:
            temp_dir_path = Path(temp_dir)
            source_path = temp_dir_path / Path(file_path).name
            output_path = temp_dir_path / "normalized.mp4"

            storage.download_file(file_path, str(source_path))
            result = processor.normalize(source_path, output_path)

            video = db.query(Video).filter(Video.id == video_id).first()
            if video is None:
                logger.warning("Video disappeared during processing", video_id=video_id)
                return

            if result.success:
                normalized_key = normalized_video_key(file_path)
                storage.upload_file(str(output_path), normalized_key)
                video.file_path = normalized_key
                video.duration_seconds = result.duration
                video.processing_status = "processed"
            else:
                video.processing_status = "failed"
                video.processing_error = result.error
            db.commit()

            logger.info(
                "Finished video processing",
                video_id=video_id,
                status=video.processing_status,
                duration=video.duration_seconds
            )

    except Exception as e:
        db.rollback()
        logger.error("Background video processing failed", error=str(e), video_id=video_id)
        video = db.query(Video).filter(Video.id == video_id).first()
        if video is not None:
            video.processing_status = "failed"
            video.processing_error = str(e)
            db.commit()
    finally:
        db.close()
