"""
ZooKeeper discovery settings.

In standalone deployments nothing else tells the version 1 daemon's
workers where ZooKeeper lives, so the resolver writes the host and port
into the configuration admin itself. Version 2 does not use ZooKeeper;
any host/port left behind by an earlier version 1 run is removed.

Error Policy:
    A fetch or persist failure is not raised. It comes back as
    DiscoveryOutcome.error with an ErrorKind, and the caller logs it
    and carries on. Partially applied configuration is acceptable.

Concurrency:
    apply_discovery_settings() is a fetch-modify-update sequence on
    shared state with no locking. Two resolvers writing the same key
    at the same time can interleave; serialize them if that matters.

Providers:
    - MemoryDiscoveryConfigProvider: in-process (testing, embedding)
    - FileDiscoveryConfigProvider: Karaf-style etc/<key>.cfg files
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sparkrun import keys
from sparkrun.errors import DiscoveryConfigError, ErrorKind

from .version import ProtocolVersion

if TYPE_CHECKING:
    from sparkrun.config.schemas import ResolverSettings

    from .base import DiscoveryConfigProvider
    from .endpoint import ConnectionEndpoint

logger = logging.getLogger(__name__)


class DiscoveryAction(str, Enum):
    """What apply_discovery_settings() did to the properties."""

    REGISTERED = "registered"  # zookeeper.host/port written (V1)
    CLEANED = "cleaned"  # stale zookeeper.host/port removed (V2)
    NO_PROPERTIES = "no_properties"  # configuration has no properties; untouched
    FAILED = "failed"


@dataclass(frozen=True)
class DiscoveryOutcome:
    """
    Result of one discovery update.

    Attributes:
        key: Configuration admin key
        action: What was done
        properties: Properties as persisted (or as far as they got)
        error: Set when action is FAILED
    """

    key: str
    action: DiscoveryAction
    properties: dict[str, Any] = field(default_factory=dict)
    error: DiscoveryConfigError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def properties_found(self) -> bool:
        """
        True if the configuration had properties to work on.

        A persist failure still counts: the properties were found and
        modified, they just were not saved.
        """
        if self.action in (DiscoveryAction.REGISTERED, DiscoveryAction.CLEANED):
            return True
        return bool(
            self.error is not None and self.error.kind == ErrorKind.DISCOVERY_PERSIST_FAILED
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "action": self.action.value,
            "properties": dict(self.properties),
            "error": self.error.to_dict() if self.error else None,
        }


def apply_discovery_settings(
    provider: DiscoveryConfigProvider,
    endpoint: ConnectionEndpoint,
    protocol: ProtocolVersion,
    settings: ResolverSettings,
    *,
    key: str = keys.DISCOVERY_CONFIG_KEY,
) -> DiscoveryOutcome:
    """
    Update (V1) or clean up (V2) the ZooKeeper discovery settings.

    Args:
        provider: Configuration admin
        endpoint: Endpoint derived from the run configuration
        protocol: Daemon protocol version
        settings: Supplies the default host and ZooKeeper port
        key: Configuration admin key

    Returns:
        DiscoveryOutcome; never raises on I/O failure
    """
    try:
        handle = provider.get_configuration(key)
        properties = handle.get_properties()
    except OSError as e:
        error = DiscoveryConfigError(key, ErrorKind.DISCOVERY_FETCH_FAILED, str(e))
        error.__cause__ = e
        return DiscoveryOutcome(key=key, action=DiscoveryAction.FAILED, error=error)

    if properties is None:
        logger.debug(f"[discovery] No properties for '{key}', leaving it alone")
        return DiscoveryOutcome(key=key, action=DiscoveryAction.NO_PROPERTIES)

    if protocol is ProtocolVersion.V1:
        properties[keys.ZOOKEEPER_HOST] = endpoint.host or settings.default_host
        properties[keys.ZOOKEEPER_PORT] = endpoint.port or settings.default_zookeeper_port
        action = DiscoveryAction.REGISTERED
    else:
        properties.pop(keys.ZOOKEEPER_HOST, None)
        properties.pop(keys.ZOOKEEPER_PORT, None)
        action = DiscoveryAction.CLEANED

    try:
        handle.update(properties)
    except OSError as e:
        error = DiscoveryConfigError(key, ErrorKind.DISCOVERY_PERSIST_FAILED, str(e))
        error.__cause__ = e
        return DiscoveryOutcome(
            key=key,
            action=DiscoveryAction.FAILED,
            properties=dict(properties),
            error=error,
        )

    logger.debug(f"[discovery] {action.value} '{key}': {properties}")
    return DiscoveryOutcome(key=key, action=action, properties=dict(properties))


# =============================================================================
# In-memory configuration admin
# =============================================================================


class MemoryConfigHandle:
    """
    One configuration held by MemoryDiscoveryConfigProvider.

    get_properties() hands out a copy; update() stores a copy.
    """

    def __init__(self, key: str, properties: dict[str, Any] | None = None):
        self.key = key
        self._properties = dict(properties) if properties is not None else None
        self.update_count = 0

    def get_properties(self) -> dict[str, Any] | None:
        if self._properties is None:
            return None
        return dict(self._properties)

    def update(self, properties: dict[str, Any]) -> None:
        self._properties = dict(properties)
        self.update_count += 1


class MemoryDiscoveryConfigProvider:
    """
    In-memory configuration admin.

    A configuration that was never given properties behaves like a
    freshly created one: get_properties() returns None.

    Usage:
        admin = MemoryDiscoveryConfigProvider()
        admin.set_properties("org.apache.aries.rsa.discovery.zookeeper", {})

        resolver.execute(run_config, variables, discovery=admin)
        admin.get_configuration(key).get_properties()
    """

    def __init__(self, configurations: dict[str, dict[str, Any] | None] | None = None):
        self._handles: dict[str, MemoryConfigHandle] = {}
        for key, properties in (configurations or {}).items():
            self.set_properties(key, properties)

    def set_properties(self, key: str, properties: dict[str, Any] | None) -> None:
        self._handles[key] = MemoryConfigHandle(key, properties)

    def get_configuration(self, key: str) -> MemoryConfigHandle:
        if key not in self._handles:
            self._handles[key] = MemoryConfigHandle(key)
        return self._handles[key]

    def clear(self) -> None:
        self._handles.clear()


# =============================================================================
# File-backed configuration admin
# =============================================================================


class FileConfigHandle:
    """
    A configuration stored as a Java-properties style .cfg file.

    Format:
        # comment
        zookeeper.host = 127.0.0.1
        zookeeper.port = 2181

    Backslash escapes (\\t, \\n, \\uXXXX, ...) and lines continued with
    a trailing backslash are understood on read; update() escapes what
    it writes so the file reads back the same.
    """

    def __init__(self, path: Path):
        self.path = path

    def get_properties(self) -> dict[str, Any] | None:
        """
        Read the file.

        Returns:
            Properties, or None if the file does not exist

        Raises:
            OSError: If the file exists but cannot be read
        """
        if not self.path.exists():
            return None

        properties: dict[str, Any] = {}
        with self.path.open(encoding="utf-8") as f:
            for line in _logical_lines(f.read()):
                name, value = _split_property(line)
                properties[name] = value
        return properties

    def update(self, properties: dict[str, Any]) -> None:
        """
        Rewrite the file with the given properties.

        The new content goes to a sibling temporary file that then
        replaces the .cfg, so a failed write leaves the old file intact.

        Raises:
            OSError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lines = [
            f"{_escape(str(name), key=True)} = {_escape(str(value))}\n"
            for name, value in properties.items()
        ]
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                f.writelines(lines)
            tmp_path.replace(self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"[discovery] Wrote {len(lines)} properties to {self.path}")


class FileDiscoveryConfigProvider:
    """
    Configuration admin backed by a directory of .cfg files.

    Mirrors a Karaf etc/ directory: the configuration for key K lives
    in K.cfg. A key without a file has no properties yet, so the
    resolver leaves it alone until something else creates it.

    Usage:
        admin = FileDiscoveryConfigProvider("/opt/pentaho/etc")
        resolver = ConfigurationResolver(capabilities=..., discovery=admin)
    """

    def __init__(self, base_dir: str | Path, *, suffix: str = ".cfg"):
        self._base_dir = Path(base_dir)
        self._suffix = suffix

    def get_configuration(self, key: str) -> FileConfigHandle:
        if not self._base_dir.is_dir():
            raise FileNotFoundError(f"Configuration directory not found: {self._base_dir}")
        return FileConfigHandle(self._base_dir / f"{key}{self._suffix}")


# =============================================================================
# Properties format
# =============================================================================

_WHITESPACE = " \t\f"
_ESCAPE_CHARS = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPED_CHARS = {char: name for name, char in _ESCAPE_CHARS.items()}
_LINE_BREAK = re.compile(r"\r\n?|\n")
_ESCAPE_SEQUENCE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def _logical_lines(text: str) -> Iterator[str]:
    """Join continued lines, skipping blanks and comments."""
    pending: str | None = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if pending is None:
            if not line or line[0] in "#!":
                continue
            pending = ""
        backslashes = len(line) - len(line.rstrip("\\"))
        if backslashes % 2:
            pending += line[:-1]
            continue
        yield pending + line
        pending = None
    if pending:
        yield pending


def _split_property(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped '=', ':' or whitespace."""
    end = 0
    while end < len(line):
        c = line[end]
        if c == "\\":
            end += 2
            continue
        if c in "=:" or c in _WHITESPACE:
            break
        end += 1

    rest = line[end:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(line[:end]), _unescape(rest)


def _unescape(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        seq = match.group(1)
        if len(seq) == 5:
            return chr(int(seq[1:], 16))
        return _ESCAPE_CHARS.get(seq, seq)

    return _ESCAPE_SEQUENCE.sub(replace, text)


def _escape(text: str, *, key: bool = False) -> str:
    """Escape a name or value so _split_property() reads it back unchanged."""
    out = []
    for i, c in enumerate(text):
        if c == "\\":
            out.append("\\\\")
        elif c in _ESCAPED_CHARS:
            out.append("\\" + _ESCAPED_CHARS[c])
        elif c == " " and (key or i == 0):
            out.append("\\ ")
        elif key and c in "=:#!":
            out.append("\\" + c)
        else:
            out.append(c)
    return "".join(out)
