"""HTTP boundary of the screening service."""

from .server import app

__all__ = ["app"]
