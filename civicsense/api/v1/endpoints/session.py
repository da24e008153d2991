"""
Session endpoints: sign-in, registration and sign-out through the access gate.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from civicsense.api.deps import get_engine
from civicsense.models.schemas.auth import GateRead, RegisterRequest, SignInRequest
from civicsense.services.auth import AuthenticationError
from civicsense.services.engine import CivicEngine
from civicsense.utils import get_logger

router = APIRouter()
logger = get_logger(__name__)

@router.get("/", response_model=GateRead, summary="Current gate state")
async def read_session(engine: CivicEngine = Depends(get_engine)) -> GateRead:
    return engine.gate.snapshot()

@router.post("/login", response_model=GateRead, summary="Sign in")
async def login(credentials: SignInRequest, engine: CivicEngine = Depends(get_engine)) -> GateRead:
    try:
        session = await engine.authenticator.sign_in(credentials)
    except AuthenticationError as e:
        logger.warning("Sign-in failed", email=credentials.email, reason=e.message)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    engine.gate.sign_in(session)
    return engine.gate.snapshot()

@router.post(
    "/register",
    response_model=GateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register and sign in"
)
async def register(registration: RegisterRequest, engine: CivicEngine = Depends(get_engine)) -> GateRead:
    try:
        session = await engine.authenticator.register(registration)
    except AuthenticationError as e:
        logger.warning("Registration failed", email=registration.email, reason=e.message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    engine.gate.sign_in(session)
    return engine.gate.snapshot()

@router.delete("/", response_model=GateRead, summary="Sign out")
async def logout(engine: CivicEngine = Depends(get_engine)) -> GateRead:
    engine.gate.sign_out()
    return engine.gate.snapshot()
