"""
FastAPI application factory for the form rule engine.

Creates and configures the FastAPI app and mounts the stateless
validation routes.

Run with:
    uvicorn formrules.api.app:app --reload
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formrules.api.routes import router

# Load environment variables from .env
load_dotenv()

# Logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    application = FastAPI(
        title="Form Rules",
        description="Branching and validation engine for structured questionnaires",
        version="0.1.0",
    )

    # CORS: allow all origins unless restricted
    allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router, prefix="/api")
    logger.info("Form rules API configured (CORS origins: %s)", ", ".join(allowed_origins))

    return application


# Create the app instance (used by uvicorn)
app = create_app()
