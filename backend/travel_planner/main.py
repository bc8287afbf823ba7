"""Travel Planner FastAPI Application.

Main entry point for the search API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from travel_planner.api import router
from travel_planner.config import Settings, get_settings
from travel_planner.dependencies import ServiceContainer
from travel_planner.errors import TravelPlannerError
from travel_planner.models import ErrorCode

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Defaults to settings read from the environment.
        services: Prebuilt service container; built from ``settings`` at
            startup when not given.
    """
    settings = settings or (services.settings if services else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        container = services or ServiceContainer.build(settings)
        app.state.services = container
        await container.startup()
        logger.info("[APP] Search services started")
        yield
        await container.shutdown()
        logger.info("[APP] Search services stopped")

    app = FastAPI(
        title="Travel Planner Search API",
        description="Cached restaurant, attraction, hotel and flight search",
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

    @app.exception_handler(TravelPlannerError)
    async def travel_planner_exception_handler(request: Request, exc: TravelPlannerError):
        """Map search errors onto their status code and error body."""
        if exc.status_code >= 500:
            logger.warning(f"[API] {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.to_app_error().model_dump(mode="json")},
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors."""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": str(exc),
                    "user_message": "Invalid request format. Please check your input.",
                },
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"[API] Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.API_ERROR.value,
                    "message": str(exc),
                    "user_message": "Something went wrong. Please try again.",
                },
            },
        )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
