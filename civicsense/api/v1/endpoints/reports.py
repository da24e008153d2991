"""
Report endpoints: feed, submission and municipal management.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from civicsense.api.deps import get_engine, require_citizen, require_municipal
from civicsense.config import RETENTION_SETTINGS
from civicsense.models.db.enums import ReportCategory, ReportStatus
from civicsense.models.schemas.auth import Session
from civicsense.models.schemas.base import ResponseBase
from civicsense.models.schemas.reports import (
    CleanupResult, MapMarker, Report, ReportDraft, StatusUpdate, SubmissionRead,
)
from civicsense.services.classifier import classify_category
from civicsense.services.engine import CivicEngine
from civicsense.services.feed import categories_present, filter_reports, map_markers
from civicsense.services.lifecycle import InvalidTransitionError
from civicsense.services.workspace import ManagementActionError, ReportNotFoundError
from civicsense.utils import get_logger

router = APIRouter()
logger = get_logger(__name__)

@router.get(
    "/",
    response_model=List[Report],
    summary="Report feed",
    description="Most-recent-first reports, optionally filtered by text, status and category"
)
async def list_reports(
    q: Optional[str] = Query(None, description="Matches description or address"),
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    category: Optional[ReportCategory] = Query(None),
    engine: CivicEngine = Depends(get_engine),
) -> List[Report]:
    return filter_reports(engine.workspace.snapshot(), q, status_filter, category)

@router.get("/categories", response_model=List[ReportCategory], summary="Categories present in the feed")
async def list_categories(engine: CivicEngine = Depends(get_engine)) -> List[ReportCategory]:
    return categories_present(engine.workspace.snapshot())

@router.get("/markers", response_model=List[MapMarker], summary="Map markers for located reports")
async def list_markers(engine: CivicEngine = Depends(get_engine)) -> List[MapMarker]:
    return map_markers(engine.workspace.snapshot())

@router.get("/category-preview", summary="Live category detection for a draft description")
async def preview_category(description: str = Query("", max_length=5000)) -> dict:
    return {"category": classify_category(description).value}

@router.post(
    "/",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a new report",
    description="Creates the report through the remote authority, or triages it locally when the authority is unavailable"
)
async def submit_report(
    draft: ReportDraft,
    request: Request,
    citizen: Session = Depends(require_citizen),
    engine: CivicEngine = Depends(get_engine),
) -> SubmissionRead:
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(
        "Report submission started",
        user_email=citizen.email,
        category_hint=draft.category.value if draft.category else None,
        request_id=request_id
    )
    outcome = await engine.coordinator.submit(draft, citizen)
    engine.gate.navigate(outcome.next_destination)
    logger.info(
        "Report submission completed",
        report_id=outcome.report.id,
        source=outcome.source.value,
        fallback_reason=outcome.fallback_reason,
        request_id=request_id
    )
    return SubmissionRead(
        report=outcome.report,
        source=outcome.source,
        next_destination=outcome.next_destination,
        stored=outcome.stored,
    )

@router.post("/refresh", response_model=ResponseBase, summary="Reload reports from the authority")
async def refresh_reports(engine: CivicEngine = Depends(get_engine)) -> ResponseBase:
    refreshed = await engine.workspace.refresh()
    return ResponseBase(
        success=refreshed,
        message="Reports refreshed" if refreshed else "Authority unavailable; keeping current reports",
        data={"count": len(engine.workspace)},
    )

@router.post("/cleanup", response_model=CleanupResult, summary="Remove aged-out resolved reports")
async def cleanup_reports(
    days: int = Query(RETENTION_SETTINGS["max_age_days"], ge=0),
    municipal: Session = Depends(require_municipal),
    engine: CivicEngine = Depends(get_engine),
) -> CleanupResult:
    removed = engine.workspace.cleanup(municipal, days)
    return CleanupResult(removed=removed, remaining=len(engine.workspace), max_age_days=days)

@router.patch("/{report_id}", response_model=Report, summary="Update report status")
async def update_report_status(
    report_id: str,
    body: StatusUpdate,
    municipal: Session = Depends(require_municipal),
    engine: CivicEngine = Depends(get_engine),
) -> Report:
    try:
        return await engine.workspace.change_status(report_id, body.status, municipal)
    except ReportNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTransitionError as e:
        logger.warning(
            "Status update rejected: invalid transition",
            report_id=report_id,
            from_status=e.current.value,
            to_status=e.target.value,
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ManagementActionError as e:
        logger.warning("Status update failed at authority", report_id=report_id, error_code=e.error_code)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

@router.delete("/{report_id}", response_model=ResponseBase, summary="Delete a report")
async def delete_report(
    report_id: str,
    municipal: Session = Depends(require_municipal),
    engine: CivicEngine = Depends(get_engine),
) -> ResponseBase:
    try:
        removed = await engine.workspace.remove(report_id, municipal)
    except ManagementActionError as e:
        logger.warning("Delete failed at authority", report_id=report_id, error_code=e.error_code)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return ResponseBase(
        message="Report removed" if removed else "Report not found; nothing removed",
        data={"report_id": report_id, "removed": removed},
    )
