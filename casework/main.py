"""ASGI entry point: `uvicorn casework.main:app`."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from casework.core.config import settings
from casework.db.session import engine
from casework.routers import (
    alerts_router,
    clients_router,
    self_service_router,
    tasks_router,
    users_router,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="Casework Intake API",
    description="Client intake and case management API",
    version=settings.VERSION,
    docs_url="/docs" if settings.is_dev else None,
    redoc_url=None,
)

# Session cookie auth: credentials must be allowed for the frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

app.include_router(clients_router, prefix="/clients", tags=["clients"])
app.include_router(tasks_router, prefix="/tasks", tags=["tasks"])
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(alerts_router, prefix="/alerts", tags=["alerts"])
# Public: no session required
app.include_router(self_service_router, prefix="/self-service", tags=["self-service"])


@app.get("/health")
def health():
    """Liveness plus database reachability."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
