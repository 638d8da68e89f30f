"""Database adapter package."""

from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
