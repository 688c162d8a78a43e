"""API routers."""

from casework.routers.alerts import router as alerts_router
from casework.routers.clients import router as clients_router
from casework.routers.self_service import router as self_service_router
from casework.routers.tasks import router as tasks_router
from casework.routers.users import router as users_router

__all__ = [
    "alerts_router",
    "clients_router",
    "self_service_router",
    "tasks_router",
    "users_router",
]
