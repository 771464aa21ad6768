"""
sparkrun - Run configuration resolution for the remote Spark engine.

sparkrun takes a stored Spark run configuration and applies it to a job:

- **Engine Variables**: engine, engine.remote, engine.protocol/host/port
- **Protocol Versions**: websocket daemon (v2) or ZooKeeper-registered daemon (v1)
- **Discovery Settings**: ZooKeeper host/port in standalone deployments
- **Security Provisioning**: Kerberos JAAS when AEL security is installed

Quick Start:
    >>> from sparkrun import ConfigurationResolver, MemoryVariableSink, RunConfiguration
    >>>
    >>> run_config = RunConfiguration(name="cluster", schema="http://", url="spark:53000")
    >>> variables = MemoryVariableSink()
    >>> result = ConfigurationResolver().execute(run_config, variables)
    >>> variables.get_variable("engine.host")
    'spark'
"""

__version__ = "0.1.0"

# Core exports for convenient imports
from sparkrun.runtime import (
    ConfigurationResolver,
    MemoryVariableSink,
    ResolutionResult,
    create_resolver,
)
from sparkrun.config import ResolverSettings, RunConfiguration, get_settings
from sparkrun.errors import (
    DiscoveryConfigError,
    EndpointValidationError,
    ErrorKind,
    SparkRunError,
)

__all__ = [
    # Version info
    "__version__",
    # Resolver
    "ConfigurationResolver",
    "ResolutionResult",
    "create_resolver",
    "MemoryVariableSink",
    # Configuration
    "ResolverSettings",
    "RunConfiguration",
    "get_settings",
    # Errors
    "DiscoveryConfigError",
    "EndpointValidationError",
    "ErrorKind",
    "SparkRunError",
]
