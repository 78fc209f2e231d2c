"""Auth domain - registration, login, session tokens and account status"""

from .router import router

__all__ = ["router"]
