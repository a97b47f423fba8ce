from .health import router as health_router
from .auth import router as auth_router
from .settings import router as settings_router

__all__ = ["health_router", "auth_router", "settings_router"]
