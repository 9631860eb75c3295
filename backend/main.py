"""
Lobby Chat API
FastAPI app for lobby creation, message history and live lobby chat.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.v1.routers import api_router
from backend.lobby import SessionCoordinator
from lobbychat.assistant import CompletionProvider, OpenAICompletionProvider
from lobbychat.config import Settings
from lobbychat.errors import NotFoundError, StorageError, ValidationError
from lobbychat.store import MessageStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[CompletionProvider] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    provider = provider or OpenAICompletionProvider(
        model=settings.openai_model,
        timeout=settings.assistant_timeout,
    )
    coordinator = SessionCoordinator(
        store=MessageStore(settings.db_path),
        provider=provider,
        default_credential=settings.default_credential,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        coordinator.store.open()
        try:
            yield
        finally:
            if coordinator.pending_replies:
                logger.info("Waiting for %d pending assistant replies", coordinator.pending_replies)
            await coordinator.drain()
            coordinator.store.close()

    app = FastAPI(
        title="Lobby Chat API",
        description="Lobby chat relay with an automated DM reply.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc), "details": exc.details})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid payload"})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"error": "Message history unavailable"})

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", tags=["Root"])
    async def read_root():
        return {"message": "Lobby chat relay is running."}

    return app


app = create_app()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
