from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docexplain.config.settings import Settings
from docexplain.database.connection import close_pool, init_pool
from docexplain.logging.logger import Log
from docexplain.web.dependencies import Services, build_services
from docexplain.web.routes import analyze, responses
from docexplain.web.schemas import HealthResponse


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Composition root: wire settings and services into a FastAPI app.

    When ``services`` is given (tests, embedding) the app neither opens the
    database pool nor closes the agent client; the caller owns both.
    """
    settings = settings or Settings()
    owns_services = services is None
    if services is None:
        services = build_services(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if owns_services:
            init_pool(settings)
        Log.info("Service started", env=settings.app_env, provider=settings.agent_provider)
        try:
            yield
        finally:
            if owns_services:
                services.pipeline.close()
                close_pool()

    app = FastAPI(title="docexplain", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    app.include_router(analyze.router)
    app.include_router(responses.router)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            provider=settings.agent_provider,
            limits={
                "max_single_request_bytes": settings.max_single_request_bytes,
                "daily_summary_limit": settings.daily_summary_limit,
            },
        )

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        Log.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
