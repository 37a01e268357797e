import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from config import Settings, settings as default_settings
from database import Database
from api.onboarding import router as onboarding_router
from services.errors import OnboardingError, StorageUnavailable, ValidationFailed
from services.storage import FileStorage
from services.validation import format_error_details
from utils.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        app.state.db = Database(settings)
        await app.state.db.init()
        logger.info("%s started", settings.app_name)
        try:
            yield
        finally:
            await app.state.db.dispose()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-step agency onboarding application API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = FileStorage(settings.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(OnboardingError)
    async def onboarding_error_handler(request: Request, exc: OnboardingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationFailed("Validation error", details=format_error_details(exc.errors()))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
        error = StorageUnavailable("Database connection pool exhausted, retry later")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    app.include_router(onboarding_router)

    @app.get("/health")
    async def health(request: Request):
        if await request.app.state.db.ping():
            return {"success": True, "database": "Connected"}
        return JSONResponse(status_code=503, content={"success": False, "database": "Disconnected"})

    return app


app = create_app()
