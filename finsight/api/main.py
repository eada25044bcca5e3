"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finsight.api.errors import register_exception_handlers
from finsight.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finsight.api.routes import auth, dashboard, fraud_alerts, subscriptions, transactions
from finsight.infrastructure.observability.logging import setup_logging
from finsight.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinSight Analytics",
        description="Transaction ingestion, fraud scoring, subscriptions and dashboards",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(transactions.router, tags=["transactions"])
    app.include_router(dashboard.router, tags=["dashboard"])
    app.include_router(fraud_alerts.router, tags=["fraud"])
    app.include_router(subscriptions.router, tags=["subscriptions"])

    return app


app = create_app()
