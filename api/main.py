"""
FastAPI Application
===================

Main FastAPI application for the employee SQL chat service.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.middleware.telemetry import TelemetryMiddleware
from api.routes.chat import router as chat_router
from api.routes.health import router as health_router
from api.schemas import ErrorResponse
from observability.logging_config import get_logger, setup_logging
from observability.metrics import metrics_endpoint, setup_metrics
from observability.tracing import setup_tracing
from sql_chat.config import Settings
from sql_chat.executor import SmartExecutor
from sql_chat.llm.ollama import OllamaLLM
from sql_chat.store import EmployeeStore
from sql_chat.transcript import TranscriptLog


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    # Startup
    setup_logging()
    logger = get_logger(__name__)
    logger.info("Starting SQL chat API", version=__version__, environment=settings.environment)

    store = EmployeeStore(settings.database_path, timeout=settings.store_timeout_seconds)
    store.initialize()
    transcript = TranscriptLog(settings.transcript_path, timeout=settings.store_timeout_seconds)
    transcript.initialize()

    app.state.store = store
    app.state.transcript = transcript
    app.state.executor = SmartExecutor(store)
    app.state.llm = OllamaLLM(
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
        temperature=settings.llm_temperature,
    )

    yield

    # Shutdown
    app.state.llm.close()
    logger.info("Shutting down SQL chat API")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="Employee SQL Chat API",
        description=(
            "Ask questions about the employee table in plain language. "
            "Generated SQL is checked against the caller's privileges before it runs."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(chat_router)

    setup_tracing(app, version=__version__, environment=settings.environment)

    setup_metrics(app, version=__version__, environment=settings.environment)
    app.add_route("/metrics", metrics_endpoint)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        request_id = getattr(request.state, "request_id", None)
        get_logger(__name__).exception("unhandled_exception", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="InternalServerError",
                message="An unexpected error occurred",
                request_id=request_id,
            ).model_dump(),
        )

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
