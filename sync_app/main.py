"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sync_app.exceptions import SyncAppError
from sync_app.logging_config import configure_logging
from sync_app.routers import analytics, assistant, health, speech, workout_plans


configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Sync API")


@app.exception_handler(SyncAppError)
async def sync_app_error_handler(request: Request, exc: SyncAppError) -> JSONResponse:
    """Render application errors as ``{"error": ..., "detail": ...}``."""
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(analytics.router)
app.include_router(workout_plans.router)
app.include_router(speech.router)
app.include_router(assistant.router)
