"""Visits domain - scheduling and the check-in/check-out lifecycle"""

from .router import router

__all__ = ["router"]
