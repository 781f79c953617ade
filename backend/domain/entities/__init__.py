"""
Domain entities - core data models for business logic.
"""

from .digest import BatchOutcome, DigestEntry, DigestRunResult

__all__ = [
    "DigestEntry",
    "BatchOutcome",
    "DigestRunResult",
]
