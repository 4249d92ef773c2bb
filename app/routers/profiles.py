from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.profile import Profile, UserRole
from app.middleware.auth import get_current_user_id, is_admin
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse
from app.services.error_hints import friendly_error_message, status_for_error
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def get_profile_or_404(db: Session, user_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile or profile.status == "deleted":
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_data: ProfileCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create the profile for the signed-in user at signup.

    Args:
        profile_data: Username, display name, bio, role and sport details
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        The created profile
    """
    try:
        if db.query(Profile).filter(Profile.id == current_user_id).first():
            raise HTTPException(status_code=409, detail="Profile already exists")

        profile = Profile(id=current_user_id, **profile_data.model_dump())
        db.add(profile)
        db.add(UserRole(user_id=current_user_id, role=profile_data.role))
        db.commit()
        db.refresh(profile)

        logger.info(
            "Profile created",
            user_id=current_user_id,
            username=profile.username,
            role=profile.role
        )
        return profile

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to create profile", error=str(e), user_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create profile: {friendly_error_message(e)}"
        )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fetch the signed-in user's profile."""
    return get_profile_or_404(db, current_user_id)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: str, db: Session = Depends(get_db)):
    """Fetch a public profile by user ID."""
    return get_profile_or_404(db, user_id)


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_profile(
    user_id: str,
    profile_data: ProfileUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Update a profile. Owners edit their own; admins may edit anyone's.

    Args:
        user_id: Profile to update
        profile_data: Fields to change; omitted fields are left as-is
        current_user_id: Current user ID from JWT token
        db: Database session

    Returns:
        The updated profile
    """
    try:
        profile = get_profile_or_404(db, user_id)

        if user_id != current_user_id and not is_admin(db, current_user_id):
            raise HTTPException(
                status_code=403,
                detail="Access denied: Profile does not belong to current user"
            )

        for field, value in profile_data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)

        db.commit()
        db.refresh(profile)

        logger.info("Profile updated", user_id=user_id, updated_by=current_user_id)
        return profile

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error("Failed to update profile", error=str(e), user_id=user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to update profile: {friendly_error_message(e)}"
        )
