"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .climate import router as climate_router
from .users import router as users_router
from .dependencies import set_repositories

__all__ = [
    "climate_router",
    "users_router",
    "set_repositories",
]
