"""
PaletteSnap API application.
"""
from fastapi import FastAPI, HTTPException

from palettesnap import __version__
from palettesnap.api.v1 import router as v1_router
from palettesnap.schemas import HealthResponse
from palettesnap.utils.logging import configure_logging
from palettesnap.utils.metrics import get_metrics

configure_logging()

app = FastAPI(
    title="PaletteSnap",
    description="Representative color palette extraction",
    version=__version__
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def healthz():
    """Service health check."""
    return HealthResponse(ok=True, version=__version__)


@app.get("/metrics")
def palette_metrics():
    """Get palette extraction metrics."""
    try:
        return get_metrics().get_summary()
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get metrics: {str(e)}")
