"""Template fallback generators and artifact sanity checks."""

from .sanity import check_slot, SANITY_MESSAGES
from .templates import TemplateFallback, DATABASE_SERVICES, DOCKERIGNORE_PATTERNS

__all__ = [
    "check_slot",
    "SANITY_MESSAGES",
    "TemplateFallback",
    "DATABASE_SERVICES",
    "DOCKERIGNORE_PATTERNS",
]
