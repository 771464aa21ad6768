"""
Platform capabilities.

Deployment-mode detection and security provisioning, both driven by
capability lookups, plus an in-memory capability provider for tests
and embedded use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sparkrun import keys

if TYPE_CHECKING:
    from .base import Capability, CapabilityProvider

logger = logging.getLogger(__name__)


class DeploymentMode(str, Enum):
    """Where the resolver is running."""

    SERVER = "server"  # Inside the managed platform, which handles discovery
    STANDALONE = "standalone"  # Unmanaged; discovery is configured directly


def detect_deployment_mode(provider: CapabilityProvider) -> DeploymentMode:
    """
    Detect the deployment mode.

    The server capability only has to exist; whether it is installed
    does not matter.
    """
    if provider.get_capability_by_id(keys.PENTAHO_SERVER_CAPABILITY_ID) is not None:
        return DeploymentMode.SERVER
    return DeploymentMode.STANDALONE


def ensure_security_capabilities(provider: CapabilityProvider) -> bool:
    """
    Install Kerberos JAAS support when AEL security is installed.

    Missing capabilities are not errors; there is simply nothing to do.

    Args:
        provider: Capability lookup

    Returns:
        True if an install of the JAAS capability was requested
    """
    security = provider.get_capability_by_id(keys.AEL_SECURITY_CAPABILITY_ID)
    if security is None or not security.is_installed():
        return False

    jaas = provider.get_capability_by_id(keys.JAAS_CAPABILITY_ID)
    if jaas is None or jaas.is_installed():
        return False

    logger.info(f"[capabilities] Installing '{keys.JAAS_CAPABILITY_ID}' for AEL security")
    jaas.install()
    return True


# =============================================================================
# In-memory implementation
# =============================================================================


@dataclass
class StaticCapability:
    """
    A capability whose state is held in memory.

    install() marks the capability installed and counts the calls.
    """

    id: str
    installed: bool = False
    install_calls: int = 0

    def is_installed(self) -> bool:
        return self.installed

    def install(self) -> None:
        self.install_calls += 1
        self.installed = True


class MemoryCapabilityProvider:
    """
    In-memory capability registry.

    Usage:
        provider = MemoryCapabilityProvider()
        provider.add("ael-security", installed=True)
        provider.add("pentaho-kerberos-jaas")

        ensure_security_capabilities(provider)  # installs jaas
    """

    def __init__(self, capabilities: list[Capability] | None = None):
        self._capabilities: dict[str, Capability] = {}
        for capability in capabilities or []:
            self.register(capability)

    def register(self, capability: Capability) -> None:
        """Register a capability, replacing any with the same id."""
        self._capabilities[capability.id] = capability

    def add(self, capability_id: str, installed: bool = False) -> StaticCapability:
        """Register a StaticCapability and return it."""
        capability = StaticCapability(id=capability_id, installed=installed)
        self.register(capability)
        return capability

    def remove(self, capability_id: str) -> None:
        self._capabilities.pop(capability_id, None)

    def get_capability_by_id(self, capability_id: str) -> Capability | None:
        return self._capabilities.get(capability_id)

    def __contains__(self, capability_id: str) -> bool:
        return capability_id in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)
