"""
Backend exports: the public rating service and its HTTP server.
"""

from .service import InteractionService, create_service

__all__ = [
    "InteractionService",
    "create_service",
]
