from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sofinity_api.backfill import MissingEventsWorkflow, elapsed_ms
from sofinity_api.config import Settings, configure_logging, get_settings
from sofinity_api.coverage import RECENT_EVENTS_LIMIT, event_coverage
from sofinity_api.errors import StoreError, WorkflowError
from sofinity_api.store import SupabaseStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "Sofinity API"
FIX_MISSING_EVENTS_PATH = "/v1/fix-missing-events"

security = HTTPBearer(auto_error=False)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def cors_headers(settings: Settings) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.allow_origin,
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    }


def get_store_factory() -> Callable[[Settings], Any]:
    return SupabaseStore.from_settings


def get_random() -> random.Random:
    return random.Random()


def _authorized(settings: Settings, creds: Optional[HTTPAuthorizationCredentials]) -> bool:
    # API_TOKEN unset means the endpoints are open (local/dev)
    if not settings.api_token:
        return True
    return bool(creds and creds.credentials and creds.credentials == settings.api_token)


def _failure(settings: Settings, details: str, started: float) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "details": details,
            "execution_time_ms": elapsed_ms(started),
        },
        headers=cors_headers(settings),
    )


app = FastAPI(title=SERVICE_NAME)


@app.on_event("startup")
def _startup():
    configure_logging(get_settings().log_level)


@app.get("/v1/health")
def health_root(settings: Settings = Depends(get_settings)):
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "time": now_iso(),
        "store_configured": settings.store_configured,
    }


@app.api_route(FIX_MISSING_EVENTS_PATH, methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"])
def fix_missing_events(
    request: Request,
    settings: Settings = Depends(get_settings),
    store_factory: Callable[[Settings], Any] = Depends(get_store_factory),
    rng: random.Random = Depends(get_random),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Backfill a week of synthetic OneMil events and validate what was stored.

    OPTIONS answers CORS preflight, POST runs the workflow, anything else is 405.
    """
    headers = cors_headers(settings)
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=headers)
    if request.method != "POST":
        return Response(content="Method not allowed", status_code=405, headers=headers)
    if not _authorized(settings, creds):
        return JSONResponse(status_code=401, content={"detail": "Unauthorized"}, headers=headers)

    started = time.time()
    try:
        settings.require_store()
        store = store_factory(settings)
        report = MissingEventsWorkflow(settings, store, rng=rng).run(started=started)
    except WorkflowError as e:
        logger.exception("Error in fix-missing-events")
        return _failure(settings, str(e), started)
    except Exception as e:
        logger.exception("Unexpected error in fix-missing-events")
        return _failure(settings, str(e) or type(e).__name__, started)

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Missing events workflow completed successfully",
            "results": report.model_dump(mode="json"),
        },
        headers=headers,
    )


@app.get("/v1/event-coverage")
def get_event_coverage(
    settings: Settings = Depends(get_settings),
    store_factory: Callable[[Settings], Any] = Depends(get_store_factory),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Counts per OneMil event type over the last 7 days / 24 hours."""
    headers = cors_headers(settings)
    if not _authorized(settings, creds):
        return JSONResponse(status_code=401, content={"detail": "Unauthorized"}, headers=headers)

    started = time.time()
    try:
        settings.require_store()
        events = store_factory(settings).fetch_recent_events(limit=RECENT_EVENTS_LIMIT)
    except (WorkflowError, StoreError) as e:
        logger.exception("Error reading event coverage")
        return _failure(settings, str(e), started)

    return JSONResponse(status_code=200, content=event_coverage(events), headers=headers)
