"""
Dependencies for engine access and role-guarded endpoints.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from civicsense.models.db.enums import UserRole
from civicsense.models.schemas.auth import Session
from civicsense.services.access_gate import AccessDeniedError
from civicsense.services.engine import CivicEngine
from civicsense.utils import get_logger

logger = get_logger(__name__)

def get_engine(request: Request) -> CivicEngine:
    """
    Engine dependency.
    The engine is built once in the application lifespan and kept on app.state.

    Raises:
        HTTPException: If the lifespan has not initialized the engine
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        logger.error("Engine requested before initialization")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Engine not initialized"
        )
    return engine

def get_current_session(engine: CivicEngine = Depends(get_engine)) -> Optional[Session]:
    return engine.gate.session

def require_role(role: UserRole):
    """
    Factory function to create a dependency that requires a signed-in role.

    Anonymous callers get 401; signed-in callers with another role get 403.
    """
    def role_dependency(engine: CivicEngine = Depends(get_engine)) -> Session:
        try:
            return engine.gate.require(role)
        except AccessDeniedError:
            current = engine.gate.session
            if current is None:
                logger.warning("Access denied: sign-in required", required_role=role.value)
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=f"Sign in as {role.value} to continue",
                )
            logger.warning(
                "Access denied: insufficient role",
                user_email=current.email,
                user_role=current.role.value,
                required_role=role.value
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {role.value}"
            )

    return role_dependency

require_citizen = require_role(UserRole.USER)
require_municipal = require_role(UserRole.MUNICIPAL)
