import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from ats_engine.api.v1.ats import router as ats_router
from ats_engine.api.v1.health import router as health_router
from ats_engine.api.v1.metrics import router as metrics_router
from ats_engine.api.v1.suggestions import router as suggestions_router
from ats_engine.core.config import settings
from ats_engine.core.errors import (
    ExtractionError,
    GenerationError,
    JudgeError,
    LLMError,
    PipelineError,
    ValidationError,
    is_timeout,
)
from ats_engine.core.lifespan import lifespan
from ats_engine.core.rate_limit import limiter

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="ATS Engine API", version="2.1.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


def error_status(exc: PipelineError) -> int:
    if is_timeout(exc):
        return 504
    if exc.code == "SCHEMA_MISMATCH":
        return 502
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, (LLMError, ExtractionError, GenerationError, JudgeError)):
        return 502
    return 500


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    status_code = error_status(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log("pipeline_error path=%s status=%s code=%s message=%s", request.url.path, status_code, exc.code, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("unhandled_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred."}},
    )


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(ats_router, prefix="/v1", tags=["ATS"])
app.include_router(suggestions_router, prefix="/v1", tags=["Suggestions"])
app.include_router(metrics_router, prefix="/v1", tags=["Metrics"])
