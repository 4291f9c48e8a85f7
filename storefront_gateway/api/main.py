"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from storefront_gateway.api.errors import register_error_handlers
from storefront_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from storefront_gateway.api.v1 import ai, payments, repair, reports, users
from storefront_gateway.infrastructure.observability.logging import setup_logging
from storefront_gateway.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Storefront Gateway",
        description="Back-office reports, payments, AI content and repair notifications",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(reports.router, prefix="/api", tags=["reports"])
    app.include_router(users.router, prefix="/api", tags=["admin"])
    app.include_router(payments.router, prefix="/api", tags=["payments"])
    app.include_router(ai.router, prefix="/api", tags=["ai"])
    app.include_router(repair.router, prefix="/api", tags=["repair"])

    return app


app = create_app()
