"""
keycolors Service
FastAPI application exposing palette analysis over HTTP.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from keycolors import __version__
from keycolors.api.observability import router as observability_router
from keycolors.api.v1 import router as v1_router
from keycolors.errors import DecodeError
from keycolors.schemas import HealthResponse
from keycolors.utils.logging import get_logger

log = get_logger()

app = FastAPI(
    title="keycolors",
    description="Background color and key-color palette extraction",
    version=__version__,
)

app.include_router(v1_router)
app.include_router(observability_router)


@app.exception_handler(DecodeError)
async def decode_error_handler(request: Request, exc: DecodeError):
    log.warning(f"Image decode failed: {exc}", extra={"path": request.url.path})
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Service liveness check."""
    return HealthResponse(ok=True, version=__version__)
