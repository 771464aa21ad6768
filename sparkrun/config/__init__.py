"""
sparkrun Configuration

Run configuration records and resolver settings.
"""

from .schemas import ResolverSettings, RunConfiguration
from .settings import get_settings

__all__ = [
    "ResolverSettings",
    "RunConfiguration",
    "get_settings",
]
