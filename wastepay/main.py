# wastepay/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import Settings, get_settings
from .core.exceptions import WastePayError
from .db.engine import build_engine, build_session_maker, create_db_and_tables

# API Routers
from .api import health
from .api.locations import main as locations_api
from .api.plots import main as plots_api
from .api.schedules import main as schedules_api

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WastePayError)
    async def domain_error_handler(request: Request, exc: WastePayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "message": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": error, "message": str(exc.detail)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "server_error", "message": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- Database Initialization ---
        engine = build_engine(settings.database_url, echo=settings.sql_echo)
        app.state.engine = engine
        app.state.session_maker = build_session_maker(engine)
        await create_db_and_tables(engine)
        logger.info("Database tables initialized")
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(title="WastePay", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    # --- CORS for the dashboard ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    register_exception_handlers(app)

    # --- Domain API Routers ---
    app.include_router(health.router, prefix="/api")
    app.include_router(locations_api.router, prefix="/api", tags=["Locations"])
    app.include_router(plots_api.router, prefix="/api", tags=["Plots"])
    app.include_router(schedules_api.router, prefix="/api", tags=["Schedules"])

    return app


app = create_app()
