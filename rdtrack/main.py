import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import structlog

from .config import settings
from .db import Base, engine
from .logging import setup_logging, RequestIdMiddleware
from .routes.assets import router as assets_router
from .routes.asset_health import router as asset_health_router
from .routes.reports import router as reports_router
from .routes.projects import router as projects_router
from .routes.tasks import router as tasks_router
from .routes.engineers import router as engineers_router
from .routes.labor_costs import router as labor_costs_router
from .routes.stakeholders import router as stakeholders_router


def create_app() -> FastAPI:
    setup_logging()
    logger = structlog.get_logger("rdtrack.startup")
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Routers
    app.include_router(assets_router)
    app.include_router(asset_health_router)
    app.include_router(reports_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(engineers_router)
    app.include_router(labor_costs_router)
    app.include_router(stakeholders_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        logger.info("startup", environment=settings.environment)
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        if settings.auto_create_db:
            Base.metadata.create_all(bind=engine)
            logger.info("tables_verified", count=len(Base.metadata.tables))

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
