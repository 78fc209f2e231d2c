"""Assignments domain - which caregivers serve which patients"""

from .router import router

__all__ = ["router"]
