"""
FastAPI application main module.
Serves the report triage engine to the civic front-end: feed, submission,
leaderboard, guarded navigation and municipal management.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
from contextlib import asynccontextmanager
from civicsense.api.v1 import api_router
from civicsense.config import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from civicsense.database import Base, engine as db_engine
from civicsense.services.authority import build_authority
from civicsense.services.engine import build_engine
from civicsense.services.session_store import SqlSessionStore
from civicsense.utils import setup_logging, get_logger
from civicsense.utils.circuit_breaker import GLOBAL_CIRCUIT_BREAKER
from civicsense.utils.observability import ensure_request_id, REQUEST_ID_HEADER

# Setup logging before creating the app
setup_logging(
    log_level=LOG_LEVEL,
    log_file=LOG_FILE,
    enable_console=True
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Creates the session table, wires the engine and performs the initial refresh.
    """
    logger.info("Application startup initiated")
    try:
        Base.metadata.create_all(bind=db_engine)

        authority = build_authority()
        if authority is None:
            logger.info("No remote authority configured; running in offline mode")
        else:
            logger.info("Remote authority configured", base_url=authority.base_url)

        app.state.engine = build_engine(SqlSessionStore(), authority)
        await app.state.engine.workspace.refresh()
        logger.info("Application startup completed successfully")
        yield
    except Exception as e:  # pragma: no cover
        logger.error("Application startup failed", error=str(e), exc_info=True)
        raise
    finally:
        logger.info("Application shutdown completed")

app = FastAPI(
    title="Civic-Sense Report Engine",
    description="""
    Citizen infrastructure reporting with automatic triage.

    ## Features
    * **Automatic triage** - category, risk tier, fraud flag and civic points
    * **Dual submission path** - remote authority first, local triage fallback
    * **Leaderboard** - recomputed from the live report collection
    * **Municipal tools** - status management, deletion, retention cleanup
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID and request/response logging middleware
@app.middleware("http")
async def add_request_context_and_logging(request: Request, call_next):
    request_id = ensure_request_id(request.headers)
    request.state.request_id = request_id
    start_time = time.time()

    logger.info(
        "Request started",
        method=request.method,
        url=str(request.url),
        request_id=request_id
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))

    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        process_time_ms=round(process_time * 1000, 2),
        request_id=request_id
    )

    return response

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "Request validation failed",
        errors=exc.errors(),
        request_id=request_id,
        url=str(request.url),
        method=request.method
    )

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
            "request_id": request_id
        }
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        url=str(request.url),
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "request_id": request_id
        },
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        request_id=request_id,
        url=str(request.url),
        method=request.method,
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "request_id": request_id
        }
    )

@app.get("/health", tags=["health"], summary="Basic health check")
async def health_check(request: Request):
    """Health check including authority mode and breaker state."""
    engine = getattr(request.app.state, "engine", None)
    authority = engine.authority if engine is not None else None
    return {
        "status": "healthy",
        "service": "civicsense-report-engine",
        "version": "1.0.0",
        "timestamp": time.time(),
        "mode": "remote" if authority is not None else "offline",
        "reports": len(engine.workspace) if engine is not None else 0,
        "circuit_breaker": GLOBAL_CIRCUIT_BREAKER.snapshot(),
    }

@app.get("/", tags=["root"])
async def root():
    """API root endpoint with basic information."""
    return {
        "message": "Civic-Sense Report Engine API",
        "version": "1.0.0",
        "documentation": "/docs",
        "health_check": "/health",
        "api_base": "/api/v1"
    }

app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting development server")

    uvicorn.run(
        "civicsense.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=["civicsense"],
        log_level="info",
        access_log=True
    )
