import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from flashdeck.apis.auth import router as auth_router
from flashdeck.apis.decks.main import router as decks_router
from flashdeck.apis.documents.main import router as documents_router
from flashdeck.apis.errors import install_error_handlers
from flashdeck.apis.study.main import router as study_router
from flashdeck.core.config import settings
from flashdeck.core.db.base import create_all, engine
from flashdeck.core.logging import get_logger, request_id_var, setup_logging


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not settings.app.is_production:
        # Migrations own the schema in production
        await create_all()
    logger.info(f"{settings.app.name} {settings.app.version} started (mode={settings.app.mode})")
    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    install_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(decks_router)
    app.include_router(study_router)
    app.include_router(documents_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")
