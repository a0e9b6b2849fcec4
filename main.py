"""
Club Table Reservations - FastAPI Backend
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from clubhouse.core.config import settings
from clubhouse.api import routes_access, routes_admin, routes_booking, routes_public, views
from clubhouse.services.access_gate import SessionRegistry
from clubhouse.services.data_service import get_data_service, use_firestore
from clubhouse.services.member_store import MemberStore
from clubhouse.services.reservation_store import ReservationStore

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    if not use_firestore():
        from clubhouse.core.db import engine, Base
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")

    data_service = get_data_service()
    app.state.reservation_store = ReservationStore(data_service)
    app.state.member_store = MemberStore(data_service)
    app.state.session_registry = SessionRegistry(data_service)
    logger.info(f"Loaded {app.state.session_registry.load()} sessions")

    # Eager first load; failures are logged and retried on next use
    app.state.reservation_store.refresh()
    app.state.member_store.refresh()
    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Club Table Reservations",
    description="Table booking for club members with access-code login",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Member photos stored locally are served from here
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_access.router, prefix="/api", tags=["access"])
app.include_router(routes_booking.router, prefix="/api/booking", tags=["booking"])
app.include_router(routes_admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(views.router, include_in_schema=False)

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
