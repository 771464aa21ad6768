"""
Settings access for sparkrun.

Provides a cached ResolverSettings instance built from the environment.
"""

from __future__ import annotations

import os
from functools import lru_cache

from sparkrun import keys

from .schemas import ResolverSettings


@lru_cache()
def get_settings() -> ResolverSettings:
    """
    Get resolver settings from environment.

    Uses lru_cache for singleton pattern; call get_settings.cache_clear()
    after changing the environment.
    """
    return ResolverSettings(
        default_protocol=os.getenv("SPARKRUN_DEFAULT_PROTOCOL", keys.DEFAULT_PROTOCOL),
        default_host=os.getenv("SPARKRUN_DEFAULT_HOST", keys.DEFAULT_HOST),
        default_zookeeper_port=os.getenv(
            "SPARKRUN_DEFAULT_ZOOKEEPER_PORT", keys.DEFAULT_ZOOKEEPER_PORT
        ),
        default_websocket_port=os.getenv(
            "SPARKRUN_DEFAULT_WEBSOCKET_PORT", keys.DEFAULT_WEBSOCKET_PORT
        ),
        default_daemon_version=os.getenv(
            "SPARKRUN_DEFAULT_DAEMON_VERSION", keys.DEFAULT_DAEMON_VERSION
        ),
        strict_endpoints=os.getenv("SPARKRUN_STRICT_ENDPOINTS", "false").lower() == "true",
    )
