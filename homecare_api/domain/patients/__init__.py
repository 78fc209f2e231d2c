"""Patients domain - patient records and their lifecycle"""

from .router import router

__all__ = ["router"]
