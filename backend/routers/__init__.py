"""FastAPI routers for modular endpoint organization."""

from . import status, webhook

__all__ = [
    "status",
    "webhook",
]
