"""
Run Configuration Resolver.

Turns a Spark run configuration into the variables the remote engine
reads at execution time and, outside the server, into ZooKeeper
discovery settings.

Flow:
    1. Install Kerberos JAAS support if AEL security is installed
    2. Parse schema + url into protocol/host/port
    3. Read the daemon protocol version (V1 or V2)
    4. Detect server vs. standalone deployment
    5. V2: set engine.protocol/host/port
    6. Standalone: V1 writes zookeeper.host/port and clears engine.*,
       V2 removes stale zookeeper.host/port
    7. Always: engine=remote, engine.remote=spark

Outcomes:
    | V2  | server | engine.* set | zookeeper.*              |
    | yes | yes    | yes          | untouched                |
    | yes | no     | yes          | host/port removed        |
    | no  | yes    | no           | untouched                |
    | no  | no     | cleared      | host/port written        |

Usage:
    resolver = ConfigurationResolver(
        capabilities=platform_capabilities,
        discovery=config_admin,
    )

    result = resolver.execute(run_config, job_variables)
    if result.errors:
        ...  # already logged; configuration was still applied
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sparkrun import keys
from sparkrun.config import ResolverSettings, get_settings
from sparkrun.errors import EndpointValidationError, SparkRunError

from .capabilities import (
    DeploymentMode,
    MemoryCapabilityProvider,
    detect_deployment_mode,
    ensure_security_capabilities,
)
from .discovery import DiscoveryOutcome, apply_discovery_settings
from .endpoint import ConnectionEndpoint, parse_endpoint
from .version import DaemonVersion, parse_daemon_version

if TYPE_CHECKING:
    from sparkrun.config.schemas import RunConfiguration

    from .base import CapabilityProvider, DiscoveryConfigProvider, VariableSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """
    What one execute() call decided and did.

    Attributes:
        endpoint: Endpoint derived from the run configuration
        version: Parsed daemon version
        mode: Detected deployment mode
        security_install_requested: Whether the JAAS capability install was requested
        assignments: Variable assignments, in order (None = cleared)
        discovery: Discovery outcome; None when skipped (server mode or no admin)
        errors: Non-fatal errors, already logged
    """

    endpoint: ConnectionEndpoint
    version: DaemonVersion
    mode: DeploymentMode
    security_install_requested: bool = False
    assignments: tuple[tuple[str, str | None], ...] = ()
    discovery: DiscoveryOutcome | None = None
    errors: tuple[SparkRunError, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def variables(self) -> dict[str, str | None]:
        """Final value of each assigned variable."""
        return dict(self.assignments)

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint.to_dict(),
            "version": {
                "raw": self.version.raw,
                "value": self.version.value,
                "protocol": self.version.protocol.value,
            },
            "mode": self.mode.value,
            "security_install_requested": self.security_install_requested,
            "variables": self.variables,
            "discovery": self.discovery.to_dict() if self.discovery else None,
            "errors": [e.to_dict() for e in self.errors],
        }


class _RecordingSink:
    """Forwards to a VariableSink and remembers what was set."""

    def __init__(self, target: VariableSink):
        self._target = target
        self.assignments: list[tuple[str, str | None]] = []

    def get_variable(self, name: str, default: str | None = None) -> str | None:
        return self._target.get_variable(name, default)

    def set_variable(self, name: str, value: str | None) -> None:
        self._target.set_variable(name, value)
        self.assignments.append((name, value))


class ConfigurationResolver:
    """
    Applies a Spark run configuration to an execution context.

    Collaborators are injected, not looked up globally. Those given to
    execute() override the ones given to the constructor.

    Without a capability provider the platform looks empty: no security
    capabilities and standalone mode. Without a discovery provider the
    discovery update is skipped.

    The discovery update is a non-atomic read-modify-write of shared
    configuration; callers running resolvers concurrently against the
    same admin must serialize them.
    """

    def __init__(
        self,
        *,
        capabilities: CapabilityProvider | None = None,
        discovery: DiscoveryConfigProvider | None = None,
        settings: ResolverSettings | None = None,
    ):
        """
        Initialize resolver.

        Args:
            capabilities: Platform capability lookup
            discovery: Configuration admin for ZooKeeper settings
            settings: Defaults and strictness (get_settings() if None)
        """
        self._capabilities = capabilities
        self._discovery = discovery
        self._settings = settings if settings is not None else get_settings()

    @property
    def settings(self) -> ResolverSettings:
        return self._settings

    def execute(
        self,
        run_config: RunConfiguration,
        variables: VariableSink,
        capabilities: CapabilityProvider | None = None,
        discovery: DiscoveryConfigProvider | None = None,
    ) -> ResolutionResult:
        """
        Resolve a run configuration into engine variables.

        Args:
            run_config: Spark run configuration
            variables: Variable space of the execution context
            capabilities: Overrides the constructor's capability provider
            discovery: Overrides the constructor's discovery provider

        Returns:
            ResolutionResult describing what was applied

        Raises:
            EndpointValidationError: Only in strict mode, for a malformed URL
        """
        settings = self._settings
        # Explicit None checks: an empty provider is falsy
        if capabilities is None:
            capabilities = self._capabilities
        if capabilities is None:
            capabilities = MemoryCapabilityProvider()
        if discovery is None:
            discovery = self._discovery
        sink = _RecordingSink(variables)
        errors: list[SparkRunError] = []

        security_install_requested = ensure_security_capabilities(capabilities)

        try:
            endpoint = parse_endpoint(run_config.schema_, run_config.url)
        except EndpointValidationError as e:
            if settings.strict_endpoints:
                raise
            logger.warning(f"[resolver] {e}; using default endpoint")
            endpoint = ConnectionEndpoint()
            errors.append(e)

        version = parse_daemon_version(
            sink.get_variable(keys.DAEMON_VERSION_VARIABLE, settings.default_daemon_version)
        )
        mode = detect_deployment_mode(capabilities)

        logger.debug(
            f"[resolver] Decisions | "
            f"config={run_config.name!r} | "
            f"endpoint={endpoint.to_dict()} | "
            f"protocol={version.protocol.value} | "
            f"mode={mode.value}"
        )

        if version.is_v2:
            sink.set_variable(keys.ENGINE_PROTOCOL, endpoint.protocol or settings.default_protocol)
            sink.set_variable(keys.ENGINE_HOST, endpoint.host or settings.default_host)
            sink.set_variable(keys.ENGINE_PORT, endpoint.port or settings.default_websocket_port)

        outcome = None
        if mode is DeploymentMode.STANDALONE and discovery is not None:
            outcome = apply_discovery_settings(discovery, endpoint, version.protocol, settings)

            if outcome.properties_found and not version.is_v2:
                # Websocket settings must not linger next to ZooKeeper ones
                sink.set_variable(keys.ENGINE_PROTOCOL, None)
                sink.set_variable(keys.ENGINE_HOST, None)
                sink.set_variable(keys.ENGINE_PORT, None)

            if outcome.error is not None:
                logger.error(f"[resolver] {outcome.error} ({outcome.error.kind.value})")
                errors.append(outcome.error)
        elif mode is DeploymentMode.STANDALONE:
            logger.debug("[resolver] No discovery provider, skipping discovery settings")

        sink.set_variable(keys.ENGINE, keys.ENGINE_REMOTE_VALUE)
        sink.set_variable(keys.ENGINE_REMOTE, keys.ENGINE_SPARK_VALUE)

        result = ResolutionResult(
            endpoint=endpoint,
            version=version,
            mode=mode,
            security_install_requested=security_install_requested,
            assignments=tuple(sink.assignments),
            discovery=outcome,
            errors=tuple(errors),
        )

        logger.info(
            f"[resolver] Resolved run configuration | "
            f"config={run_config.name!r} | "
            f"protocol={version.protocol.value} | "
            f"mode={mode.value} | "
            f"discovery={outcome.action.value if outcome else 'skipped'} | "
            f"errors={len(errors)}"
        )

        return result


# =============================================================================
# Convenience: Create resolver with common setup
# =============================================================================


def create_resolver(
    *,
    capabilities: CapabilityProvider | None = None,
    discovery: DiscoveryConfigProvider | None = None,
    config_dir: str | None = None,
    settings: ResolverSettings | None = None,
) -> ConfigurationResolver:
    """
    Create a ConfigurationResolver with common setup.

    Args:
        capabilities: Capability provider (empty in-memory provider if None)
        discovery: Custom discovery provider
        config_dir: Directory of .cfg files (used when discovery is None)
        settings: Resolver settings (get_settings() if None)

    Returns:
        Configured ConfigurationResolver
    """
    from .discovery import FileDiscoveryConfigProvider

    if discovery is None and config_dir:
        discovery = FileDiscoveryConfigProvider(config_dir)

    return ConfigurationResolver(
        capabilities=capabilities if capabilities is not None else MemoryCapabilityProvider(),
        discovery=discovery,
        settings=settings,
    )
