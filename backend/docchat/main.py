"""FastAPI application - document-grounded chat."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.docchat.api.routes.accounts import router as accounts_router
from backend.docchat.api.routes.chat import router as chat_router
from backend.docchat.api.routes.documents import router as documents_router
from backend.docchat.api.routes.health import router as health_router
from backend.docchat.api.routes.metrics import router as metrics_router
from backend.docchat.config import Settings, get_settings
from backend.docchat.docs.extract import TextExtractor
from backend.docchat.errors import DocChatError
from backend.docchat.llm.client import InferenceClient
from backend.docchat.services import build_services

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


async def handle_docchat_error(request: Request, exc: DocChatError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"message": "Invalid request body"}
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"[{request.method} {request.url.path}] unhandled error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def create_app(
    settings: Settings | None = None,
    *,
    inference: InferenceClient | None = None,
    extractor: TextExtractor | None = None,
) -> FastAPI:
    """Build the application with all components wired from one settings object."""
    settings = settings or get_settings()
    services = build_services(settings, inference=inference, extractor=extractor)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await services.startup()
        yield
        await services.shutdown()

    app = FastAPI(title="Document Chat API", version=VERSION, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DocChatError, handle_docchat_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(accounts_router)
    app.include_router(documents_router)
    app.include_router(chat_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Document Chat API", "version": VERSION}

    return app


app = create_app()
