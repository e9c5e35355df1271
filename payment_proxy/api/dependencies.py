"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from payment_proxy.config import Settings
from payment_proxy.services.gateway import PaymentGateway


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_gateway(request: Request) -> PaymentGateway:
    """Provide the process-wide gateway built at startup"""
    return request.app.state.gateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
