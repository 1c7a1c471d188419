# Routers package
from . import profiles_router
from . import doctors_router
from . import appointments_router
from . import chat_router
from . import admin_router

__all__ = [
    "profiles_router",
    "doctors_router",
    "appointments_router",
    "chat_router",
    "admin_router",
]
