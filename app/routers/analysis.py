from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.analysis import AnalysisSession, AnalysisFrame, AnalysisAnnotation
from app.models.video import Video
from app.middleware.auth import get_current_user_id, is_admin
from app.schemas.analysis import (
    AnalysisSessionCreate, AnalysisSessionUpdate, AnalysisSessionResponse,
    AnalysisResultResponse, AnalyzeRequest,
    FrameCreate, FrameResponse, AnnotationCreate, AnnotationResponse,
)
from app.services.quota_service import QuotaService
from app.services.motion_analysis import build_placeholder_result
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/analysis-sessions", tags=["analysis"])


def _get_session_or_404(db: Session, session_id: int, user_id: str) -> AnalysisSession:
    """Sessions are visible to the player who owns them, their coach and admins."""
    session = db.query(AnalysisSession).filter(AnalysisSession.id == session_id).first()
    if not session:
        raise HTTPException(status_code=404, detail="Analysis session not found")
    if user_id not in (session.user_id, session.coach_id) and not is_admin(db, user_id):
        raise HTTPException(
            status_code=403,
            detail="Access denied: Analysis session does not belong to current user"
        )
    return session


@router.post("", response_model=AnalysisSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: AnalysisSessionCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        if session_data.video_id is not None:
            video = db.query(Video).filter(Video.id == session_data.video_id).first()
            if not video:
                raise HTTPException(status_code=404, detail="Video not found")
            if video.user_id != current_user_id:
                raise HTTPException(status_code=403, detail="Access denied: Video does not belong to current user")

        session = AnalysisSession(user_id=current_user_id, **session_data.model_dump())
        db.add(session)
        db.commit()
        db.refresh(session)

        logger.info("Analysis session created", session_id=session.id, user_id=current_user_id)
        return session

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to create analysis session", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create analysis session: {friendly_error_message(e)}"
        )


@router.get("", response_model=List[AnalysisSessionResponse])
async def list_sessions(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Sessions the current user owns or coaches, newest first."""
    return (
        db.query(AnalysisSession)
        .filter((AnalysisSession.user_id == current_user_id) | (AnalysisSession.coach_id == current_user_id))
        .order_by(AnalysisSession.created_at.desc(), AnalysisSession.id.desc())
        .all()
    )


@router.get("/{session_id}", response_model=AnalysisSessionResponse)
async def get_session(
    session_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return _get_session_or_404(db, session_id, current_user_id)


@router.put("/{session_id}", response_model=AnalysisSessionResponse)
async def update_session(
    session_id: int,
    session_data: AnalysisSessionUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        session = _get_session_or_404(db, session_id, current_user_id)

        for field, value in session_data.model_dump(exclude_unset=True).items():
            setattr(session, field, value)

        db.commit()
        db.refresh(session)
        return session

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update analysis session", error=str(e), session_id=session_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update analysis session: {friendly_error_message(e)}"
        )


@router.delete("/{session_id}")
async def delete_session(
    session_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        session = _get_session_or_404(db, session_id, current_user_id)
        if session.user_id != current_user_id and not is_admin(db, current_user_id):
            raise HTTPException(status_code=403, detail="Only the session owner can delete it")

        db.delete(session)
        db.commit()

        logger.info("Analysis session deleted", session_id=session_id, user_id=current_user_id)
        return {"message": "Analysis session deleted successfully", "sessionId": session_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to delete analysis session", error=str(e), session_id=session_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete analysis session: {friendly_error_message(e)}"
        )


@router.post("/{session_id}/analyze", response_model=AnalysisResultResponse, status_code=status.HTTP_201_CREATED)
async def analyze_session(
    session_id: int,
    request: AnalyzeRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Run automated analysis for a session.

    Checks the analysis quota first, records one usage on success and
    marks the session completed.

    Returns:
        The stored analysis result
    """
    session = _get_session_or_404(db, session_id, current_user_id)

    quota_service = QuotaService(db)
    quota = quota_service.check_analysis_quota(current_user_id)
    if not quota.can_proceed:
        raise HTTPException(
            status_code=403,
            detail=jsonable_encoder({"message": "Analysis limit reached", **quota.as_payload()})
        )

    try:
        result = build_placeholder_result(session, request.analysis_type)
        db.add(result)
        session.analysis_status = "completed"
        db.commit()
        db.refresh(result)

        if not quota_service.record_analysis_usage(current_user_id, session.video_id):
            logger.warning("Analysis usage was not recorded", session_id=session_id, user_id=current_user_id)

        logger.info("Analysis completed", session_id=session_id, result_id=result.id)
        return result

    except Exception as e:
        db.rollback()
        logger.error("Failed to analyze session", error=str(e), session_id=session_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to analyze session: {friendly_error_message(e)}"
        )


@router.get("/{session_id}/frames", response_model=List[FrameResponse])
async def list_frames(
    session_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    _get_session_or_404(db, session_id, current_user_id)
    return (
        db.query(AnalysisFrame)
        .filter(AnalysisFrame.session_id == session_id)
        .order_by(AnalysisFrame.frame_number.asc())
        .all()
    )


@router.post("/{session_id}/frames", response_model=FrameResponse, status_code=status.HTTP_201_CREATED)
async def create_frame(
    session_id: int,
    frame_data: FrameCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        _get_session_or_404(db, session_id, current_user_id)

        frame = AnalysisFrame(session_id=session_id, **frame_data.model_dump())
        db.add(frame)
        db.commit()
        db.refresh(frame)
        return frame

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to save frame", error=str(e), session_id=session_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to save frame: {friendly_error_message(e)}"
        )


@router.get("/{session_id}/annotations", response_model=List[AnnotationResponse])
async def list_annotations(
    session_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    _get_session_or_404(db, session_id, current_user_id)
    return (
        db.query(AnalysisAnnotation)
        .filter(AnalysisAnnotation.session_id == session_id)
        .order_by(AnalysisAnnotation.id.asc())
        .all()
    )


@router.post("/{session_id}/annotations", response_model=AnnotationResponse, status_code=status.HTTP_201_CREATED)
async def create_annotation(
    session_id: int,
    annotation_data: AnnotationCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        _get_session_or_404(db, session_id, current_user_id)

        if annotation_data.frame_id is not None:
            frame = db.query(AnalysisFrame).filter(
                AnalysisFrame.id == annotation_data.frame_id,
                AnalysisFrame.session_id == session_id
            ).first()
            if not frame:
                raise HTTPException(status_code=404, detail="Frame not found in this session")

        annotation = AnalysisAnnotation(session_id=session_id, **annotation_data.model_dump())
        db.add(annotation)
        db.commit()
        db.refresh(annotation)
        return annotation

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to save annotation", error=str(e), session_id=session_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to save annotation: {friendly_error_message(e)}"
        )
