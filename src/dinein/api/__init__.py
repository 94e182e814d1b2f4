"""Dine-in domain API package."""

from dinein.api.routes import order_router, register_dinein_exception_handlers, table_router

__all__ = ["order_router", "table_router", "register_dinein_exception_handlers"]
