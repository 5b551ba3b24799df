from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upload_service.upload_route import router as statements_router
from db.postgres import init_postgres, close_postgres
import logging
from settings.config import settings
from settings.logging_config import configure_logging

logger = logging.getLogger(__name__)


def get_app(init_db: bool = True) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting bank statement API")
    app = FastAPI(title="Bank Statement API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Client-Info", "Apikey", "X-User-ID"],
    )

    # DB lifecycle
    if init_db:
        @app.on_event("startup")
        async def on_startup() -> None:
            logger.info("Initializing database")
            await init_postgres()

        @app.on_event("shutdown")
        async def on_shutdown() -> None:
            logger.info("Closing database")
            await close_postgres()

    app.include_router(statements_router)
    logger.info("Routers initialized successfully")

    # Health
    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "ok"}

    return app


# ASGI app instance
app = get_app()
