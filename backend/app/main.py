"""
Exam Practice Coach - FastAPI Application
Main application entry point with middleware and route configuration
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.ai.core.llm import ModelClient, build_model_client
from app.api.v1 import api_router
from app.core.config import Settings, get_settings
from app.core.errors import ValidationError, describe_validation_errors
from app.services.practice import PracticeService
from app.services.session_store import PracticeSessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "[Startup] %s ready (model generation: %s, model evaluation: %s)",
        app.title,
        app.state.practice_service.uses_model_generation,
        app.state.practice_service.uses_model_evaluation,
    )

    yield

    # Shutdown
    if app.state.model_client is not None:
        await app.state.model_client.aclose()


def register_exception_handlers(app: FastAPI) -> None:
    """Map request validation failures to HTTP 400."""

    @app.exception_handler(ValidationError)
    async def practice_validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": describe_validation_errors(exc.errors())},
        )


def create_app(
    settings: Optional[Settings] = None,
    model_client: Optional[ModelClient] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment settings.
        model_client: Model client to inject; built from settings when omitted.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    if model_client is None:
        model_client = build_model_client(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Practice exam questions with AI-assisted answer evaluation",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Services created once per process and injected through dependencies
    store = PracticeSessionStore(max_sessions=settings.SESSION_STORE_MAX_SESSIONS)
    app.state.settings = settings
    app.state.model_client = model_client
    app.state.session_store = store
    app.state.practice_service = PracticeService(settings, model_client, store)

    if settings.OTEL_ENABLED:
        from app.ai.core.telemetry import init_telemetry
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        init_telemetry(settings)
        FastAPIInstrumentor.instrument_app(app)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    @app.get(f"{settings.API_V1_PREFIX}/health", tags=["Health"])
    async def api_v1_health_check():
        """API V1 Health check."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG,
    )
