"""
app/api/routers package marker.
"""

from app.api.routers.analytics import router as analytics_router
from app.api.routers.enrichment import router as enrichment_router
from app.api.routers.sessions import router as sessions_router

__all__ = [
    "analytics_router",
    "enrichment_router",
    "sessions_router",
]
