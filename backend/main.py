"""
ChatGPT clone API server.

Streams chat completions, titles and code reviews, describes uploaded
files, transcribes voice input and stores per-user memories and chats.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from chatclone.core.config import Settings, get_settings
from chatclone.core.exceptions import (
    AuthenticationError,
    ChatCloneError,
    NotFoundError,
    ValidationError,
)
from chatclone.core.logger import logger

VERSION = "0.1.0"

_ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(f"Starting chat server ({settings.ENVIRONMENT}, LLM provider: {settings.LLM_PROVIDER})")

    from chatclone.infrastructure.local.database import init_db

    await init_db()
    yield
    logger.info("Chat server stopped")


async def chatclone_error_handler(request: Request, exc: ChatCloneError) -> JSONResponse:
    """Errors that escape a route: known kinds map to 4xx, the rest are upstream failures."""
    code = next(
        (code for kind, code in _ERROR_STATUS.items() if isinstance(exc, kind)),
        status.HTTP_502_BAD_GATEWAY,
    )
    if code == status.HTTP_502_BAD_GATEWAY:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=code, content={"detail": exc.message})


def _storage_dir(settings: Settings) -> Path:
    path = Path(settings.STORAGE_BASE_PATH)
    if not path.is_absolute():
        path = Path.cwd() / path
    path.mkdir(parents=True, exist_ok=True)
    return path


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="ChatGPT Clone",
        description="Streaming chat backend with memory, transcription and file descriptions",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ChatCloneError, chatclone_error_handler)

    from chatclone.api import chat, chats, files, memory

    for prefix, module in (
        ("/api/chat", chat),
        ("/api/files", files),
        ("/api/memory", memory),
        ("/api/chats", chats),
    ):
        app.include_router(module.router, prefix=prefix, tags=[prefix.rsplit("/", 1)[-1]])

    # Uploads are fetched back by URL when attachments are described.
    app.mount("/storage", StaticFiles(directory=_storage_dir(settings)), name="storage")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT, "version": VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
