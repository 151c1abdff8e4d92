"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from barber_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from barber_ledger.api.v1 import credit_sales, installments, transactions, expenses, ledger
from barber_ledger.infrastructure.observability.logging import setup_logging
from barber_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Barber Ledger",
        description="Credit sales, installments and profit/loss ledger for the barbershop back office",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(credit_sales.router, prefix="/v1", tags=["credit-sales"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])

    return app


app = create_app()
