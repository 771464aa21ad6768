"""
ConfigurationResolver Usage Examples.

This module demonstrates how a host wires the resolver into job
execution: load a run configuration, hand it the job's variables and
the platform collaborators, and inspect what was applied.

Architecture:
    ┌─────────────────┐      ┌───────────────────────┐      ┌─────────────────┐
    │ Run config      │ ──▶  │ ConfigurationResolver │ ──▶  │ Job variables   │
    │ (File/Memory)   │      │ (decide + apply)      │      │ engine.*        │
    └─────────────────┘      └───────────────────────┘      └─────────────────┘
                                        │
                                        ▼ (standalone only)
                               ┌──────────────────┐
                               │ Config admin     │
                               │ zookeeper.*      │
                               └──────────────────┘
"""

import json
import logging
import tempfile
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


# =============================================================================
# Example 1: Websocket Daemon Inside the Server
# =============================================================================


def example_server_mode():
    """
    Version 2 daemon, managed server: only job variables change.
    """
    from sparkrun.config import ResolverSettings, RunConfiguration
    from sparkrun.runtime import (
        ConfigurationResolver,
        MemoryCapabilityProvider,
        MemoryVariableSink,
    )

    # 1. The platform reports its capabilities
    capabilities = MemoryCapabilityProvider()
    capabilities.add("pentaho-server", installed=True)

    # 2. Create resolver
    resolver = ConfigurationResolver(capabilities=capabilities, settings=ResolverSettings())

    # 3. Apply a run configuration to the job's variables
    run_config = RunConfiguration(name="cluster", schema="http://", url="myhost:53000")
    variables = MemoryVariableSink()
    result = resolver.execute(run_config, variables)

    print(f"Mode: {result.mode.value}, protocol: {result.version.protocol.value}")
    print(f"Variables: {variables.as_dict()}")

    return result


# =============================================================================
# Example 2: ZooKeeper Daemon, Standalone, File-Backed Config Admin
# =============================================================================


def example_standalone_zookeeper():
    """
    Version 1 daemon outside the server: ZooKeeper settings are written
    to etc/org.apache.aries.rsa.discovery.zookeeper.cfg.
    """
    from sparkrun.config import ResolverSettings
    from sparkrun.keys import DAEMON_VERSION_VARIABLE, DISCOVERY_CONFIG_KEY
    from sparkrun.runtime import (
        FileRunConfigurationLoader,
        MemoryVariableSink,
        create_resolver,
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        base_dir = Path(tmpdir)

        # 1. Run configurations on disk
        configs_dir = base_dir / "run-configurations"
        configs_dir.mkdir()
        with open(configs_dir / "zk-cluster.json", "w") as f:
            json.dump({"schema": "http://", "url": "zk-host:2181"}, f)

        # 2. A Karaf-style etc/ directory with the discovery configuration
        etc_dir = base_dir / "etc"
        etc_dir.mkdir()
        (etc_dir / f"{DISCOVERY_CONFIG_KEY}.cfg").write_text("zookeeper.timeout = 3000\n")

        # 3. Resolve
        loader = FileRunConfigurationLoader(configs_dir)
        resolver = create_resolver(config_dir=str(etc_dir), settings=ResolverSettings())

        run_config = loader.get_run_configuration("zk-cluster")
        variables = MemoryVariableSink({DAEMON_VERSION_VARIABLE: "1.0"})
        result = resolver.execute(run_config, variables)

        print(f"Discovery: {result.discovery.action.value}")
        print((etc_dir / f"{DISCOVERY_CONFIG_KEY}.cfg").read_text())
        print(json.dumps(result.to_dict(), indent=2))

        return result


# =============================================================================
# Example 3: Strict Endpoint Validation
# =============================================================================


def example_strict_validation():
    """
    By default a malformed URL falls back to defaults and is reported in
    result.errors. Strict mode raises instead.
    """
    from sparkrun.config import ResolverSettings, RunConfiguration
    from sparkrun.errors import EndpointValidationError
    from sparkrun.runtime import ConfigurationResolver, MemoryVariableSink

    run_config = RunConfiguration(name="typo", schema="http://", url="my host:53000")

    lenient = ConfigurationResolver(settings=ResolverSettings())
    result = lenient.execute(run_config, MemoryVariableSink())
    print(f"Lenient errors: {[e.to_dict() for e in result.errors]}")

    strict = ConfigurationResolver(settings=ResolverSettings(strict_endpoints=True))
    try:
        strict.execute(run_config, MemoryVariableSink())
    except EndpointValidationError as e:
        print(f"Strict: {e.reason}")


# =============================================================================
# Main: Run Examples
# =============================================================================


def main():
    """Run examples."""
    print("=" * 60)
    print("Example 1: Server Mode")
    print("=" * 60)
    example_server_mode()

    print("\n" + "=" * 60)
    print("Example 2: Standalone ZooKeeper")
    print("=" * 60)
    example_standalone_zookeeper()

    print("\n" + "=" * 60)
    print("Example 3: Strict Validation")
    print("=" * 60)
    example_strict_validation()


if __name__ == "__main__":
    main()
