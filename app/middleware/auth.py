from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt
from typing import Dict, Any
from app.config import settings
from app.database import get_db
from app.models.profile import UserRole
import structlog

logger = structlog.get_logger()

security = HTTPBearer()


async def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """
    Verify a bearer JWT and return the caller's identity.

    Args:
        credentials: HTTP Bearer token from Authorization header

    Returns:
        Dict containing the user id, email and the raw payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": True, "verify_aud": False}
        )

        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID"
            )

        logger.info("Token verified successfully", user_id=user_id)

        return {
            "user_id": user_id,
            "email": payload.get("email"),
            "display_name": payload.get("name"),
            "full_payload": payload
        }

    except HTTPException:
        raise
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )


async def get_current_user_id(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Get the current user ID from the JWT token."""
    user_data = await verify_token(credentials)
    return user_data["user_id"]


def is_admin(db: Session, user_id: str) -> bool:
    return db.query(UserRole).filter(
        UserRole.user_id == user_id,
        UserRole.role == "admin"
    ).first() is not None


async def require_admin(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> str:
    """
    Dependency that only lets administrators through.

    Returns:
        The admin's user ID
    """
    if not is_admin(db, current_user_id):
        logger.warning("Admin access denied", user_id=current_user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user_id
