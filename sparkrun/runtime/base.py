"""
Collaborator Protocols.

Contracts for everything the resolver talks to but does not own:
the capability registry, the variable space of the running job,
the configuration admin that stores discovery settings, and the
storage that holds run configurations.

Design Principle:
    Protocols define WHAT, implementations define HOW.
    The resolver never reaches for a global registry; every
    collaborator is passed in, so hosts can plug in their own
    platform bindings and tests can use the in-memory versions.

Protocols:
    - Capability / CapabilityProvider: Optional platform features
    - VariableSink: Execution-scoped variables
    - ConfigHandle / DiscoveryConfigProvider: Configuration admin
    - RunConfigurationLoader: Where run configurations come from

In-memory implementations live next to the code that uses them:
    - MemoryCapabilityProvider (capabilities.py)
    - MemoryVariableSink (variables.py)
    - MemoryDiscoveryConfigProvider, FileDiscoveryConfigProvider (discovery.py)
    - MemoryRunConfigurationLoader, FileRunConfigurationLoader (loaders.py)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sparkrun.config.schemas import RunConfiguration


# =============================================================================
# Capabilities
# =============================================================================


@runtime_checkable
class Capability(Protocol):
    """
    An optional, independently installable platform feature.

    A capability that can be looked up exists; whether it is
    installed is a separate question.
    """

    @property
    def id(self) -> str:
        """Capability identifier (e.g., 'ael-security')."""
        ...

    def is_installed(self) -> bool:
        """Whether the feature is currently installed."""
        ...

    def install(self) -> None:
        """
        Request installation.

        Fire-and-forget: no completion signal is consumed.
        """
        ...


@runtime_checkable
class CapabilityProvider(Protocol):
    """
    Looks up capabilities by id.

    Example:
        security = provider.get_capability_by_id("ael-security")
        if security is not None and security.is_installed():
            ...
    """

    def get_capability_by_id(self, capability_id: str) -> Capability | None:
        """
        Find a capability.

        Args:
            capability_id: Capability identifier

        Returns:
            The capability, or None if the platform does not know it
        """
        ...


# =============================================================================
# Variables
# =============================================================================


@runtime_checkable
class VariableSink(Protocol):
    """
    Variable space of the current execution context.

    Setting a variable to None clears it.
    """

    def get_variable(self, name: str, default: str | None = None) -> str | None:
        """Get a variable, or the default if it is not set."""
        ...

    def set_variable(self, name: str, value: str | None) -> None:
        """Set (or, with None, clear) a variable."""
        ...


# =============================================================================
# Configuration Admin
# =============================================================================


@runtime_checkable
class ConfigHandle(Protocol):
    """
    Handle to one configuration stored in the configuration admin.

    The properties dictionary returned by get_properties() is a
    working copy; changes only take effect after update().
    """

    def get_properties(self) -> dict[str, Any] | None:
        """
        Get the configuration properties.

        Returns:
            Mutable dictionary, or None if the configuration has
            never been written
        """
        ...

    def update(self, properties: dict[str, Any]) -> None:
        """
        Persist properties.

        Raises:
            OSError: If the backing store cannot be written
        """
        ...


@runtime_checkable
class DiscoveryConfigProvider(Protocol):
    """
    Configuration admin holding the service-discovery settings.

    Shared, process-wide state: a fetch-modify-update sequence is not
    atomic, and concurrent writers to the same key can interleave.
    Callers that need consistency must serialize their updates.
    """

    def get_configuration(self, key: str) -> ConfigHandle:
        """
        Get (or create) the configuration for a key.

        Raises:
            OSError: If the configuration store is unreachable
        """
        ...


# =============================================================================
# Run Configuration Loader
# =============================================================================


@runtime_checkable
class RunConfigurationLoader(Protocol):
    """
    Protocol for loading run configurations from storage.

    Implementations:
        - FileRunConfigurationLoader: JSON/YAML files in a directory
        - MemoryRunConfigurationLoader: In-memory (testing)
    """

    def get_run_configuration(self, name: str) -> RunConfiguration | None:
        """
        Get a run configuration by name.

        Returns:
            RunConfiguration or None if not found
        """
        ...

    def list_run_configurations(self) -> list[RunConfiguration]:
        """List all run configurations, sorted by name."""
        ...
