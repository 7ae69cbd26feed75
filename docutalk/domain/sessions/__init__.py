"""Session domain models."""

from .models import Session

__all__ = ["Session"]
