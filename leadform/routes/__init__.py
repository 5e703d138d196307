# leadform/routes/__init__.py
"""
API route handlers organized by domain.
"""

from leadform.routes.health import router as health_router
from leadform.routes.submissions import router as submissions_router

__all__ = [
    "health_router",
    "submissions_router",
]
