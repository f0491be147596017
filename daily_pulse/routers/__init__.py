# daily_pulse/routers/__init__.py
"""
API routers.
"""

from daily_pulse.routers.cleanup import router as cleanup_router
from daily_pulse.routers.newsletter import router as newsletter_router

__all__ = [
    "newsletter_router",
    "cleanup_router",
]
