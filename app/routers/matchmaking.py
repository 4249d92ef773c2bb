from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.profile import Profile
from app.middleware.auth import get_current_user_id
from app.schemas.matchmaking import MatchRequest, MatchResultResponse, ConnectionCreate, ConnectionResponse
from app.services.matchmaking import MatchmakingService
from app.services.quota_service import QuotaService
from app.services.membership import membership_for_plan, can_connect_with_players
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/matchmaking", tags=["matchmaking"])


@router.post("/coaches", response_model=List[MatchResultResponse])
async def match_coaches(
    request: MatchRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Rank coaches against a player's questionnaire answers.

    Args:
        request: Free-text answers keyed by question, plus the score threshold
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        Coaches scoring at or above the threshold, best first
    """
    try:
        matches = MatchmakingService(db).find_matching_coaches(
            current_user_id, request.answers, request.threshold
        )
        return [match.to_dict() for match in matches]

    except Exception as e:
        logger.error("Failed to match coaches", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to match coaches: {friendly_error_message(e)}"
        )


@router.post("/students", response_model=List[MatchResultResponse])
async def match_students(
    request: MatchRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Rank players against a coach's teaching-style fields."""
    try:
        matches = MatchmakingService(db).find_matching_students(
            current_user_id, request.answers, request.threshold
        )
        return [match.to_dict() for match in matches]

    except Exception as e:
        logger.error("Failed to match students", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to match students: {friendly_error_message(e)}"
        )


@router.get("/recommendations", response_model=List[MatchResultResponse])
async def get_recommendations(
    limit: int = Query(5, ge=1, le=50),
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    profile = db.query(Profile).filter(Profile.id == current_user_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    role = "coach" if profile.role == "coach" else "player"
    matches = MatchmakingService(db).get_recommendations(current_user_id, role, limit)
    return [match.to_dict() for match in matches]


@router.post("/connections", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED)
async def create_connection(
    connection: ConnectionCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Request a coach/student connection.

    The caller must be one side of the pair. Coaches reaching out to players
    need an Advanced or Pro membership.
    """
    if current_user_id not in (connection.coach_id, connection.student_id):
        raise HTTPException(status_code=403, detail="Access denied: Connection must include current user")

    coach = db.query(Profile).filter(Profile.id == connection.coach_id, Profile.role == "coach").first()
    if not coach:
        raise HTTPException(status_code=404, detail=f"Coach not found: {connection.coach_id}")
    student = db.query(Profile).filter(Profile.id == connection.student_id, Profile.role == "player").first()
    if not student:
        raise HTTPException(status_code=404, detail=f"Player not found: {connection.student_id}")

    if current_user_id == connection.coach_id:
        subscription = QuotaService(db).get_active_subscription(current_user_id)
        membership = membership_for_plan(subscription.plan.name if subscription else "")
        if not can_connect_with_players(membership):
            raise HTTPException(
                status_code=403,
                detail="Connecting with players requires an Advanced or Pro membership"
            )

    try:
        relationship = MatchmakingService(db).create_connection(connection.coach_id, connection.student_id)
        return relationship

    except Exception as e:
        db.rollback()
        logger.error(
            "Failed to create connection",
            error=str(e),
            coach_id=connection.coach_id,
            student_id=connection.student_id
        )
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create connection: {friendly_error_message(e)}"
        )
