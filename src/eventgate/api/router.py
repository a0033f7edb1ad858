"""REST API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from eventgate import __version__
from eventgate.api.deps import (
    get_current_principal,
    get_engine,
    require_moderator_principal,
    require_principal,
)
from eventgate.api.schemas import (
    ApproveEventRequest,
    FileReportRequest,
    HealthResponse,
    ListEventsResponse,
    MetricsResponse,
    RejectEventRequest,
    RemoveEventRequest,
    RemoveEventResponse,
    ReportedEventsResponse,
    SubmitEventRequest,
    TransparencyLogResponse,
)
from eventgate.auth.identity import AuthError
from eventgate.config import settings
from eventgate.engine import (
    EventGateError,
    InvalidState,
    InvalidTransition,
    ModerationEngine,
    NotFound,
    PermissionDenied,
    StoreUnavailable,
    ValidationError,
)
from eventgate.models import (
    Event,
    EventFilters,
    ModerationQueue,
    Principal,
    Report,
    TransparencyLogEntry,
    VisitCount,
)
from eventgate.observability.metrics import metrics

router = APIRouter(prefix="/v1")

ALREADY_HANDLED = "This item was already handled or no longer exists."
TRY_AGAIN = "Please try again."


def _http_error(e: EventGateError) -> HTTPException:
    """Map engine errors to HTTP responses."""
    if isinstance(e, ValidationError):
        return HTTPException(
            status_code=422,
            detail={"code": e.code, "message": e.message, "errors": e.errors},
        )
    if isinstance(e, AuthError):
        return HTTPException(
            status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"}
        )
    if isinstance(e, PermissionDenied):
        return HTTPException(status_code=403, detail=e.message)
    if isinstance(e, NotFound):
        return HTTPException(
            status_code=404,
            detail={"code": e.code, "message": ALREADY_HANDLED},
        )
    if isinstance(e, (InvalidTransition, InvalidState)):
        return HTTPException(status_code=409, detail={"code": e.code, "message": e.message})
    if isinstance(e, StoreUnavailable):
        return HTTPException(
            status_code=503,
            detail={"code": e.code, "message": TRY_AGAIN},
            headers={"Retry-After": str(e.retry_after)},
        )
    return HTTPException(status_code=500, detail={"code": e.code, "message": e.message})


# ============================================================================
# Health, identity & metrics
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        store_backend=settings.store_backend.value,
    )


@router.get("/me", response_model=Principal)
async def whoami(principal: Principal = Depends(require_principal)):
    """The authenticated caller and the role the server assigned."""
    return principal


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(_: Principal = Depends(require_moderator_principal)):
    """In-process counters and store latency."""
    return MetricsResponse(**metrics.snapshot())


# ============================================================================
# Public events
# ============================================================================


@router.get("/events", response_model=ListEventsResponse)
async def list_events(
    search: Optional[str] = Query(None, description="Matches title, description, city, country"),
    location: Optional[str] = Query(None, description="Matches city or country"),
    category: Optional[str] = Query(None, description="Exact category, or 'all'"),
    engine: ModerationEngine = Depends(get_engine),
):
    """Published events ordered by date."""
    try:
        events = await engine.list_approved(
            EventFilters(search=search, location=location, category=category)
        )
    except EventGateError as e:
        raise _http_error(e)
    return ListEventsResponse(events=events)


@router.get("/events/{event_id}", response_model=Event)
async def get_event(
    event_id: str,
    viewer: Optional[Principal] = Depends(get_current_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """One event; unpublished events are only visible to moderators and their submitter."""
    try:
        return await engine.get_event(event_id, viewer)
    except EventGateError as e:
        raise _http_error(e)


@router.post("/events", response_model=Event, status_code=status.HTTP_201_CREATED)
async def submit_event(
    request: SubmitEventRequest,
    submitter: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Submit an event for review. It stays pending until a moderator acts."""
    try:
        return await engine.submit(request.to_draft(), submitter)
    except EventGateError as e:
        raise _http_error(e)


@router.post(
    "/events/{event_id}/reports",
    response_model=Report,
    status_code=status.HTTP_201_CREATED,
)
async def file_report(
    event_id: str,
    request: FileReportRequest,
    reporter: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Flag a published event for moderator attention."""
    try:
        return await engine.file_report(event_id, reporter, request.reason)
    except EventGateError as e:
        raise _http_error(e)


# ============================================================================
# Moderation
# ============================================================================


@router.get("/moderation/queue", response_model=ModerationQueue)
async def moderation_queue(
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Pending, reported and approved partitions."""
    try:
        return await engine.moderation_queue(actor)
    except EventGateError as e:
        raise _http_error(e)


@router.get("/moderation/pending", response_model=ListEventsResponse)
async def list_pending(
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Submissions awaiting review, newest first."""
    try:
        events = await engine.list_pending(actor)
    except EventGateError as e:
        raise _http_error(e)
    return ListEventsResponse(events=events)


@router.get("/moderation/reported", response_model=ReportedEventsResponse)
async def list_reported(
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Published events with outstanding reports."""
    try:
        reported = await engine.list_reported_events(actor)
    except EventGateError as e:
        raise _http_error(e)
    return ReportedEventsResponse(reported=reported)


@router.post("/moderation/events/{event_id}/approve", response_model=Event)
async def approve_event(
    event_id: str,
    request: ApproveEventRequest,
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Publish a pending event."""
    try:
        return await engine.approve(event_id, request.verified, actor)
    except EventGateError as e:
        raise _http_error(e)


@router.post("/moderation/events/{event_id}/reject", response_model=TransparencyLogEntry)
async def reject_event(
    event_id: str,
    request: RejectEventRequest,
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Reject a pending event. Returns the transparency entry."""
    try:
        return await engine.reject(event_id, request.reason or "", actor)
    except EventGateError as e:
        raise _http_error(e)


@router.post("/moderation/events/{event_id}/remove", response_model=RemoveEventResponse)
async def remove_event(
    event_id: str,
    request: RemoveEventRequest,
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """
    Take down a published event and its reports.

    `orphaned_report_ids` lists reports the cascade could not delete; the
    removal itself has already happened and been recorded.
    """
    try:
        outcome = await engine.remove(event_id, request.reason, actor)
    except EventGateError as e:
        raise _http_error(e)
    return RemoveEventResponse(
        entry=outcome.entry,
        reports_deleted=outcome.cascade.deleted,
        orphaned_report_ids=outcome.cascade.failed_report_ids,
        cascade_complete=outcome.cascade.complete,
    )


@router.delete("/moderation/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_report(
    report_id: str,
    actor: Principal = Depends(require_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Dismiss one report; the event stays published."""
    try:
        await engine.dismiss_report(report_id, actor)
    except EventGateError as e:
        raise _http_error(e)


# ============================================================================
# Transparency log
# ============================================================================


@router.get("/transparency-log", response_model=TransparencyLogResponse)
async def transparency_log(
    viewer: Optional[Principal] = Depends(get_current_principal),
    engine: ModerationEngine = Depends(get_engine),
):
    """Moderation decisions visible to the caller, newest first."""
    try:
        entries = await engine.get_transparency_log(viewer)
    except EventGateError as e:
        raise _http_error(e)
    return TransparencyLogResponse(entries=entries)


# ============================================================================
# Site analytics
# ============================================================================


@router.post("/analytics/visits", response_model=VisitCount)
async def record_visit(engine: ModerationEngine = Depends(get_engine)):
    """Count a site visit. Clients call this once per browsing session."""
    try:
        return await engine.record_visit()
    except EventGateError as e:
        raise _http_error(e)


@router.get("/analytics/visits", response_model=VisitCount)
async def visit_count(engine: ModerationEngine = Depends(get_engine)):
    """Current visit total."""
    try:
        return await engine.visit_count()
    except EventGateError as e:
        raise _http_error(e)
