"""API v1: routers and composition-root dependencies."""

from workhub.api.v1.router import api_router

__all__ = ["api_router"]
