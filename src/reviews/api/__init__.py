"""Reviews domain API package."""

from reviews.api.handlers import register_error_handlers
from reviews.api.routes import review_router, store_router

__all__ = ["review_router", "store_router", "register_error_handlers"]
