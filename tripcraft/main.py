"""FastAPI application."""

from fastapi import FastAPI

from tripcraft.api.errors import register_exception_handlers
from tripcraft.api.routes.health import router as health_router
from tripcraft.api.routes.metrics import router as metrics_router
from tripcraft.api.routes.segments import router as segments_router
from tripcraft.api.routes.segments import version_router as version_segments_router
from tripcraft.api.routes.share import router as share_router
from tripcraft.api.routes.trips import router as trips_router
from tripcraft.api.routes.variants import router as variants_router
from tripcraft.api.routes.variants import segment_router as segment_variants_router
from tripcraft.api.routes.versions import router as versions_router
from tripcraft.config import get_settings
from tripcraft.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="Tripcraft Itinerary API", version="0.1.0")
register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router)
app.include_router(versions_router)
app.include_router(version_segments_router)
app.include_router(segments_router)
app.include_router(segment_variants_router)
app.include_router(variants_router)
app.include_router(share_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Tripcraft Itinerary API", "version": "0.1.0"}
