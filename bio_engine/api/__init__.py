"""API package exposing FastAPI routers and schemas."""

from .routes import ServiceRegistry, configure_services, get_services, router

__all__ = ["ServiceRegistry", "configure_services", "get_services", "router"]
