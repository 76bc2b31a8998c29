from spatialexistence.api.admin import router as admin_router
from spatialexistence.api.collection import router as collection_router
from spatialexistence.api.events import router as events_router
from spatialexistence.api.health import router as health_router
from spatialexistence.api.tokens import router as tokens_router

__all__ = [
    "admin_router",
    "collection_router",
    "events_router",
    "health_router",
    "tokens_router",
]
