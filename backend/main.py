import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api._resp import fail
from api.directions_routes import router as directions_router
from api.geocode_routes import router as geocode_router
from api.metrics_routes import router as metrics_router
from api.status import router as status_router
from config import Settings, get_settings
from core.exceptions import AppError
from core.logging_config import setup_logging
from services.bootstrap import Services, build_services

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None, services: Optional[Services] = None
) -> FastAPI:
    settings = settings or (services.settings if services else get_settings())
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.services = services or build_services(settings)
        logger.info("Route metrics backend started", extra={"env": settings.APP_ENV})
        yield

    app = FastAPI(title="Route Metrics Backend", lifespan=lifespan)

    # CORS (adjust for your frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["x-request-id"] = rid
        logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                "request_id": rid,
            },
        )
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.error(
            "API error",
            extra={"code": exc.code, "status_code": exc.status_code, "error": exc.message},
        )
        return JSONResponse(
            status_code=exc.status_code, content=fail(request, exc.code, exc.message)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content=fail(request, "VALIDATION_ERROR", f"Validation failed: {message}"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error")
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(
            status_code=500, content=fail(request, "INTERNAL_SERVER_ERROR", message)
        )

    # Register API routes
    app.include_router(status_router)
    app.include_router(metrics_router)
    app.include_router(geocode_router)
    app.include_router(directions_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
