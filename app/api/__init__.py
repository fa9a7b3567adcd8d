"""API routers for trip planner."""
from .routes import router
from .sharing import router as sharing_router
from .integrations import router as integrations_router

__all__ = [
    "router",
    "sharing_router",
    "integrations_router",
]
