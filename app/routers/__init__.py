"""
API route handlers for the HomeSphere Real Estate API.
"""

from .properties import router as properties_router
from .inquiries import router as inquiries_router
from .favorites import router as favorites_router
from .admin import router as admin_router
from .contact import router as contact_router
from .files import router as files_router

__all__ = [
    "properties_router",
    "inquiries_router",
    "favorites_router",
    "admin_router",
    "contact_router",
    "files_router"
]
