"""HTTP adapter package.

This package contains the aiohttp JSON API for the Tourney API service.
"""

from .app import create_app, create_handlers
from .handlers import TourneyAPIHandlers

__all__ = ["create_app", "create_handlers", "TourneyAPIHandlers"]
