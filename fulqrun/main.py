"""FastAPI application entry point."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fulqrun.api import router as api_router
from fulqrun.core.logging import get_logger
from fulqrun.core.qualification import ConfigurationError

logger = get_logger(__name__)

app = FastAPI(
    title="FulQrun Qualification Engine",
    description="MEDDPICC qualification scoring and PEAK stage-gate service",
    version="0.1.0",
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Invalid qualification configurations are client errors."""
    logger.info(f"Rejected configuration on {request.url.path}: {'; '.join(exc.errors)}")
    return JSONResponse(
        status_code=400,
        content={"detail": {"errors": exc.errors, "warnings": exc.warnings}},
    )


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


app.include_router(api_router, prefix="/v1")
