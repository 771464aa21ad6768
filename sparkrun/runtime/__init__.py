"""
sparkrun Runtime Layer.

Applies a Spark run configuration to a job's execution context.

Design Principle:
    "Configuration flows down, nothing is looked up globally."

    1. A loader reads the run configuration from storage
    2. The resolver derives the engine endpoint and protocol version
    3. Variables are set on the job; discovery settings on the admin

Components:
    - ConfigurationResolver: Applies a run configuration
    - parse_endpoint / parse_daemon_version: Pure parsing helpers
    - Capability, variable and discovery collaborators (protocols + in-memory)
    - RunConfigurationLoader implementations (File, Memory)

Usage:
    resolver = ConfigurationResolver(capabilities=..., discovery=...)
    result = resolver.execute(run_config, variables)
"""

from .base import (
    Capability,
    CapabilityProvider,
    ConfigHandle,
    DiscoveryConfigProvider,
    RunConfigurationLoader,
    VariableSink,
)
from .capabilities import (
    DeploymentMode,
    MemoryCapabilityProvider,
    StaticCapability,
    detect_deployment_mode,
    ensure_security_capabilities,
)
from .discovery import (
    DiscoveryAction,
    DiscoveryOutcome,
    FileDiscoveryConfigProvider,
    MemoryDiscoveryConfigProvider,
    apply_discovery_settings,
)
from .endpoint import ConnectionEndpoint, parse_endpoint
from .loaders import FileRunConfigurationLoader, MemoryRunConfigurationLoader
from .resolver import ConfigurationResolver, ResolutionResult, create_resolver
from .variables import MemoryVariableSink
from .version import DaemonVersion, ProtocolVersion, parse_daemon_version

__all__ = [
    # Protocols
    "Capability",
    "CapabilityProvider",
    "ConfigHandle",
    "DiscoveryConfigProvider",
    "RunConfigurationLoader",
    "VariableSink",
    # Resolver
    "ConfigurationResolver",
    "ResolutionResult",
    "create_resolver",
    # Decisions
    "ConnectionEndpoint",
    "DaemonVersion",
    "DeploymentMode",
    "ProtocolVersion",
    "detect_deployment_mode",
    "ensure_security_capabilities",
    "parse_daemon_version",
    "parse_endpoint",
    # Discovery
    "DiscoveryAction",
    "DiscoveryOutcome",
    "FileDiscoveryConfigProvider",
    "MemoryDiscoveryConfigProvider",
    "apply_discovery_settings",
    # In-memory collaborators
    "MemoryCapabilityProvider",
    "MemoryVariableSink",
    "StaticCapability",
    # Loaders
    "FileRunConfigurationLoader",
    "MemoryRunConfigurationLoader",
]
