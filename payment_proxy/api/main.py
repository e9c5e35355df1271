"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from payment_proxy.api.middleware import MetricsMiddleware, RequestIDMiddleware
from payment_proxy.api.v1 import payments, subscription_transactions, subscriptions, transactions
from payment_proxy.config import Settings, settings
from payment_proxy.infrastructure.observability.logging import setup_logging
from payment_proxy.services.gateway import PaymentGateway, build_gateway

# Setup structured logging
setup_logging(settings.log_level)


def create_app(config: Settings | None = None, gateway: PaymentGateway | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    config = config or settings
    gateway = gateway or build_gateway(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        gateway.start()
        try:
            yield
        finally:
            await gateway.shutdown()

    app = FastAPI(
        title="Payment Proxy",
        description="Fraud-aware payment routing and recurring donation billing simulator",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.gateway = gateway

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": config.service_name,
            "environment": config.environment,
            "scheduler_running": gateway.scheduler.is_running,
            "features": {
                "llm": config.enable_llm,
                "openai": bool(config.openai_api_key),
            },
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(subscriptions.router, prefix="/v1", tags=["subscriptions"])
    app.include_router(subscription_transactions.router, prefix="/v1", tags=["subscription-transactions"])

    return app


app = create_app()
