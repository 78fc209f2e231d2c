"""Accounts domain - joined account listings and user profiles"""

from .router import router

__all__ = ["router"]
