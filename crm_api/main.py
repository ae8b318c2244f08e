"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_api.api import prospects, reminders
from crm_api.config import get_settings
from crm_api.database import get_database
from crm_api.exceptions import AppException, app_exception_handler
from crm_api.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    setup_logging(settings.log_level)
    logger.info(f"Starting Agent CRM API ({settings.environment})")
    yield
    await get_database().dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title="Agent CRM API",
    description="Reminders and prospect pipeline for insurance agents",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppException, app_exception_handler)

# Register routers
app.include_router(reminders.router)
app.include_router(prospects.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}


@app.get("/")
async def root():
    return {"message": "Agent CRM API is running"}
