"""
Tests for ZooKeeper discovery settings.

Tests for:
- apply_discovery_settings (V1 register, V2 cleanup, failures)
- MemoryDiscoveryConfigProvider
- FileDiscoveryConfigProvider
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sparkrun.errors import DiscoveryConfigError, ErrorKind
from sparkrun.keys import DISCOVERY_CONFIG_KEY, ZOOKEEPER_HOST, ZOOKEEPER_PORT
from sparkrun.runtime import (
    ConnectionEndpoint,
    DiscoveryAction,
    DiscoveryConfigProvider,
    FileDiscoveryConfigProvider,
    MemoryDiscoveryConfigProvider,
    ProtocolVersion,
    apply_discovery_settings,
)

# =============================================================================
# apply_discovery_settings Tests
# =============================================================================


class TestApplyDiscoverySettings:
    """Tests for apply_discovery_settings."""

    def test_v1_writes_defaults(self, discovery_admin, settings):
        outcome = apply_discovery_settings(
            discovery_admin, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        assert outcome.success
        assert outcome.action is DiscoveryAction.REGISTERED
        assert outcome.properties_found
        stored = discovery_admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties()
        assert stored == {ZOOKEEPER_HOST: "127.0.0.1", ZOOKEEPER_PORT: "2181"}

    def test_v1_uses_endpoint(self, discovery_admin, settings):
        endpoint = ConnectionEndpoint(protocol="http", host="zk-host", port="2999")

        outcome = apply_discovery_settings(
            discovery_admin, endpoint, ProtocolVersion.V1, settings
        )

        assert outcome.properties[ZOOKEEPER_HOST] == "zk-host"
        assert outcome.properties[ZOOKEEPER_PORT] == "2999"

    def test_v1_keeps_other_properties(self, settings):
        admin = MemoryDiscoveryConfigProvider({DISCOVERY_CONFIG_KEY: {"timeout": "30"}})

        apply_discovery_settings(admin, ConnectionEndpoint(), ProtocolVersion.V1, settings)

        stored = admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties()
        assert stored["timeout"] == "30"
        assert ZOOKEEPER_HOST in stored

    def test_v2_removes_stale_keys(self, settings):
        admin = MemoryDiscoveryConfigProvider(
            {
                DISCOVERY_CONFIG_KEY: {
                    ZOOKEEPER_HOST: "old-host",
                    ZOOKEEPER_PORT: "2181",
                    "timeout": "30",
                }
            }
        )

        outcome = apply_discovery_settings(
            admin, ConnectionEndpoint(host="myhost"), ProtocolVersion.V2, settings
        )

        assert outcome.action is DiscoveryAction.CLEANED
        stored = admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties()
        assert stored == {"timeout": "30"}

    def test_v2_without_stale_keys(self, discovery_admin, settings):
        outcome = apply_discovery_settings(
            discovery_admin, ConnectionEndpoint(), ProtocolVersion.V2, settings
        )

        assert outcome.action is DiscoveryAction.CLEANED
        assert discovery_admin.get_configuration(DISCOVERY_CONFIG_KEY).update_count == 1

    def test_no_properties_left_alone(self, settings):
        admin = MemoryDiscoveryConfigProvider()

        outcome = apply_discovery_settings(
            admin, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        assert outcome.action is DiscoveryAction.NO_PROPERTIES
        assert not outcome.properties_found
        handle = admin.get_configuration(DISCOVERY_CONFIG_KEY)
        assert handle.get_properties() is None
        assert handle.update_count == 0

    def test_fetch_failure(self, settings):
        provider = MagicMock()
        cause = OSError("connection refused")
        provider.get_configuration.side_effect = cause

        outcome = apply_discovery_settings(
            provider, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        assert not outcome.success
        assert outcome.action is DiscoveryAction.FAILED
        assert not outcome.properties_found
        assert isinstance(outcome.error, DiscoveryConfigError)
        assert outcome.error.kind == ErrorKind.DISCOVERY_FETCH_FAILED
        assert outcome.error.key == DISCOVERY_CONFIG_KEY
        assert outcome.error.__cause__ is cause

    def test_persist_failure(self, settings):
        handle = MagicMock()
        handle.get_properties.return_value = {}
        handle.update.side_effect = OSError("disk full")
        provider = MagicMock()
        provider.get_configuration.return_value = handle

        outcome = apply_discovery_settings(
            provider, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        assert outcome.action is DiscoveryAction.FAILED
        assert outcome.error.kind == ErrorKind.DISCOVERY_PERSIST_FAILED
        assert outcome.properties_found
        assert outcome.properties[ZOOKEEPER_PORT] == "2181"
        assert "disk full" in str(outcome.error)

    def test_other_exceptions_propagate(self, settings):
        provider = MagicMock()
        provider.get_configuration.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            apply_discovery_settings(provider, ConnectionEndpoint(), ProtocolVersion.V1, settings)

    def test_to_dict(self, discovery_admin, settings):
        outcome = apply_discovery_settings(
            discovery_admin, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        d = outcome.to_dict()
        assert d["key"] == DISCOVERY_CONFIG_KEY
        assert d["action"] == "registered"
        assert d["error"] is None


# =============================================================================
# MemoryDiscoveryConfigProvider Tests
# =============================================================================


class TestMemoryDiscoveryConfigProvider:
    """Tests for MemoryDiscoveryConfigProvider."""

    def test_satisfies_protocol(self):
        assert isinstance(MemoryDiscoveryConfigProvider(), DiscoveryConfigProvider)

    def test_new_configuration_has_no_properties(self):
        admin = MemoryDiscoveryConfigProvider()

        assert admin.get_configuration("any.key").get_properties() is None

    def test_properties_are_copies(self):
        admin = MemoryDiscoveryConfigProvider({"k": {"a": "1"}})

        props = admin.get_configuration("k").get_properties()
        props["a"] = "changed"

        assert admin.get_configuration("k").get_properties() == {"a": "1"}

    def test_update_persists(self):
        admin = MemoryDiscoveryConfigProvider()
        handle = admin.get_configuration("k")

        handle.update({"a": "1"})

        assert admin.get_configuration("k").get_properties() == {"a": "1"}

    def test_clear(self):
        admin = MemoryDiscoveryConfigProvider({"k": {"a": "1"}})
        admin.clear()

        assert admin.get_configuration("k").get_properties() is None


# =============================================================================
# FileDiscoveryConfigProvider Tests
# =============================================================================


class TestFileDiscoveryConfigProvider:
    """Tests for FileDiscoveryConfigProvider."""

    def test_missing_file_has_no_properties(self, tmp_path):
        admin = FileDiscoveryConfigProvider(tmp_path)

        assert admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties() is None

    def test_reads_properties_file(self, tmp_path):
        (tmp_path / f"{DISCOVERY_CONFIG_KEY}.cfg").write_text(
            "# ZooKeeper discovery\n"
            "! legacy comment\n"
            "\n"
            "zookeeper.host = zk1\n"
            "zookeeper.port:2181\n"
            "zookeeper.timeout=3000\n"
        )
        admin = FileDiscoveryConfigProvider(tmp_path)

        props = admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties()

        assert props == {
            "zookeeper.host": "zk1",
            "zookeeper.port": "2181",
            "zookeeper.timeout": "3000",
        }

    def test_update_writes_file(self, tmp_path):
        admin = FileDiscoveryConfigProvider(tmp_path)
        handle = admin.get_configuration("my.config")

        handle.update({"a": "1", "b": "two"})

        assert (tmp_path / "my.config.cfg").read_text() == "a = 1\nb = two\n"
        assert handle.get_properties() == {"a": "1", "b": "two"}

    def test_missing_directory_raises_oserror(self, tmp_path):
        admin = FileDiscoveryConfigProvider(tmp_path / "missing")

        with pytest.raises(OSError):
            admin.get_configuration(DISCOVERY_CONFIG_KEY)

    def test_missing_directory_reported_as_fetch_failure(self, tmp_path, settings):
        admin = FileDiscoveryConfigProvider(tmp_path / "missing")

        outcome = apply_discovery_settings(
            admin, ConnectionEndpoint(), ProtocolVersion.V1, settings
        )

        assert outcome.error.kind == ErrorKind.DISCOVERY_FETCH_FAILED

    def test_v1_round_trip(self, tmp_path, settings):
        cfg = tmp_path / f"{DISCOVERY_CONFIG_KEY}.cfg"
        cfg.write_text("zookeeper.timeout = 3000\n")
        admin = FileDiscoveryConfigProvider(tmp_path)

        apply_discovery_settings(
            admin, ConnectionEndpoint(host="zk-host"), ProtocolVersion.V1, settings
        )

        props = admin.get_configuration(DISCOVERY_CONFIG_KEY).get_properties()
        assert props == {
            "zookeeper.timeout": "3000",
            "zookeeper.host": "zk-host",
            "zookeeper.port": "2181",
        }

    def test_reads_escapes_and_continuations(self, tmp_path):
        (tmp_path / "my.config.cfg").write_text(
            "zookeeper.connect = zk1:2181,\\\n"
            "    zk2:2181\n"
            "# comment ending in a backslash \\\n"
            "path\\ with\\ spaces = a\\tb\n"
            "unicode = caf\\u00e9\n"
            "zookeeper.host zk1\n"
            "empty\n"
        )
        handle = FileDiscoveryConfigProvider(tmp_path).get_configuration("my.config")

        assert handle.get_properties() == {
            "zookeeper.connect": "zk1:2181,zk2:2181",
            "path with spaces": "a\tb",
            "unicode": "café",
            "zookeeper.host": "zk1",
            "empty": "",
        }

    def test_update_escapes_special_characters(self, tmp_path):
        handle = FileDiscoveryConfigProvider(tmp_path).get_configuration("my.config")
        properties = {
            "a key": "  leading spaces",
            "k=v": "line1\nline2",
            "path": "C:\\dir",
        }

        handle.update(properties)

        assert handle.get_properties() == properties
        assert "k\\=v = line1\\nline2\n" in (tmp_path / "my.config.cfg").read_text()

    def test_update_leaves_no_temporary_file(self, tmp_path):
        handle = FileDiscoveryConfigProvider(tmp_path).get_configuration("my.config")

        handle.update({"a": "1"})

        assert [p.name for p in tmp_path.iterdir()] == ["my.config.cfg"]

    def test_failed_update_keeps_previous_file(self, tmp_path, monkeypatch):
        cfg = tmp_path / "my.config.cfg"
        cfg.write_text("a = 1\n")
        handle = FileDiscoveryConfigProvider(tmp_path).get_configuration("my.config")

        def fail_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail_replace)

        with pytest.raises(OSError):
            handle.update({"a": "2"})

        assert cfg.read_text() == "a = 1\n"
        assert [p.name for p in tmp_path.iterdir()] == ["my.config.cfg"]
