from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clicktrip.adapters.api.controllers.geo import router as geo_router
from clicktrip.adapters.api.controllers.settings import router as settings_router
from clicktrip.adapters.api.controllers.transit import router as transit_router
from clicktrip.adapters.runtime import RuntimeConfig
from clicktrip.domain.exceptions import (
    ConfigurationError,
    FeedError,
    NoResultsFound,
    UpstreamError,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="ClickTrip")
app.include_router(transit_router)
app.include_router(geo_router)
app.include_router(settings_router)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc) or exc.__class__.__name__,
            "error": exc.__class__.__name__,
        },
    )


@app.exception_handler(NoResultsFound)
async def no_results_handler(request: Request, exc: NoResultsFound) -> JSONResponse:
    return _error(404, exc)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logging.getLogger("uvicorn.error").warning(
        "Upstream failure on %s: %s", request.url.path, exc
    )
    return _error(502, exc)


@app.exception_handler(FeedError)
async def feed_error_handler(request: Request, exc: FeedError) -> JSONResponse:
    logging.getLogger("uvicorn.error").error(
        "Feed failure on %s: %s", request.url.path, exc
    )
    return _error(502, exc)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    return _error(500, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so clients can display them.

    Starlette's default 500 handler returns plain text.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    if RuntimeConfig.from_env().reveal_errors or isinstance(
        exc, (RuntimeError, ValueError)
    ):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(
        status_code=500, content={"detail": detail, "error": exc.__class__.__name__}
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
