"""
Pytest configuration and fixtures for sparkrun tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from sparkrun.runtime import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from sparkrun.config import ResolverSettings, RunConfiguration, get_settings  # noqa: E402
from sparkrun.keys import (  # noqa: E402
    AEL_SECURITY_CAPABILITY_ID,
    DAEMON_VERSION_VARIABLE,
    DISCOVERY_CONFIG_KEY,
    JAAS_CAPABILITY_ID,
    PENTAHO_SERVER_CAPABILITY_ID,
)
from sparkrun.runtime import (  # noqa: E402
    ConfigurationResolver,
    MemoryCapabilityProvider,
    MemoryDiscoveryConfigProvider,
    MemoryVariableSink,
)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Keep environment-driven settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Default resolver settings."""
    return ResolverSettings()


@pytest.fixture
def spark_run_config():
    """Run configuration pointing at a websocket daemon."""
    return RunConfiguration(name="cluster", schema="http://", url="myhost:53000")


@pytest.fixture
def empty_run_config():
    """Run configuration with no URL at all."""
    return RunConfiguration(name="empty")


@pytest.fixture
def server_capabilities():
    """Capabilities of a managed server deployment."""
    provider = MemoryCapabilityProvider()
    provider.add(PENTAHO_SERVER_CAPABILITY_ID)
    return provider


@pytest.fixture
def standalone_capabilities():
    """Capabilities of a standalone deployment (no server capability)."""
    return MemoryCapabilityProvider()


@pytest.fixture
def secured_capabilities():
    """AEL security installed, JAAS present but not installed."""
    provider = MemoryCapabilityProvider()
    provider.add(AEL_SECURITY_CAPABILITY_ID, installed=True)
    provider.add(JAAS_CAPABILITY_ID, installed=False)
    return provider


@pytest.fixture
def discovery_admin():
    """Configuration admin holding an (empty) discovery configuration."""
    return MemoryDiscoveryConfigProvider({DISCOVERY_CONFIG_KEY: {}})


@pytest.fixture
def v1_variables():
    """Variable space selecting the ZooKeeper (v1) daemon."""
    return MemoryVariableSink({DAEMON_VERSION_VARIABLE: "1.0"})


@pytest.fixture
def v2_variables():
    """Variable space selecting the websocket (v2) daemon."""
    return MemoryVariableSink({DAEMON_VERSION_VARIABLE: "2.0"})


@pytest.fixture
def resolver(settings):
    """Resolver with default settings and no injected collaborators."""
    return ConfigurationResolver(settings=settings)
