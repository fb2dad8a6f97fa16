import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from backend.config import Settings, load_settings
from backend.database import Database
from backend.errors import register_error_handlers
from backend.routes import auth_routes, budget_routes, transaction_routes

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or load_settings()
    database = database or Database(settings.database_url)

    app = FastAPI(title="Budget Tracker API")
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins,
        allow_origin_regex=settings.frontend_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.on_event("startup")
    def init_db() -> None:
        database.init()

    @app.on_event("shutdown")
    def close_db() -> None:
        database.dispose()

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Budget Tracker API is running..."

    app.include_router(auth_routes.router, prefix="/api/auth", tags=["auth"])
    app.include_router(transaction_routes.router, prefix="/api/transactions", tags=["transactions"])
    app.include_router(budget_routes.router, prefix="/api/budget", tags=["budget"])
    return app


_settings = load_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)


def serve() -> None:
    logger.info("API server running on port %s", _settings.port)
    uvicorn.run(app, host=_settings.host, port=_settings.port, log_level=_settings.log_level.lower())

