"""Addresses domain - street addresses, coordinates and nearby search"""

from .router import router

__all__ = ["router"]
