"""
Daemon protocol version.

The AEL daemon speaks one of two protocols: version 1 registers workers
through ZooKeeper, version 2 talks to a websocket daemon directly. The
version comes from a free-form job variable, so parsing never fails;
anything that is not a number counts as version 1.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from sparkrun import keys

logger = logging.getLogger(__name__)

# Number forms accepted by Java's Double.parseDouble
_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[dDfF]?$")
_HEX = re.compile(r"^[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?\d+[dDfF]?$")
_SPECIAL = re.compile(r"^[+-]?(?:NaN|Infinity)$")


class ProtocolVersion(str, Enum):
    """Daemon protocol generation."""

    V1 = "v1"
    V2 = "v2"


@dataclass(frozen=True)
class DaemonVersion:
    """
    Parsed daemon version.

    Attributes:
        raw: Text as read from the variable
        value: Numeric value (the fallback when raw is not a number)
        parsed: False when the fallback was used
    """

    raw: str | None
    value: float
    parsed: bool = True

    @property
    def protocol(self) -> ProtocolVersion:
        return ProtocolVersion.V2 if self.value >= 2 else ProtocolVersion.V1

    @property
    def is_v2(self) -> bool:
        return self.protocol is ProtocolVersion.V2


def parse_daemon_version(
    raw: str | None,
    fallback: float = keys.FALLBACK_DAEMON_VERSION,
) -> DaemonVersion:
    """
    Parse a daemon version string.

    Args:
        raw: Version text, e.g. "2.0" (surrounding whitespace ignored)
        fallback: Value used when raw is missing or not a number

    Returns:
        DaemonVersion; never raises
    """
    text = raw.strip() if raw is not None else ""

    if _DECIMAL.match(text) or _SPECIAL.match(text):
        return DaemonVersion(raw=raw, value=float(text.rstrip("dDfF")))
    if _HEX.match(text):
        return DaemonVersion(raw=raw, value=float.fromhex(text.rstrip("dDfF")))

    logger.debug(f"[version] Unparsable daemon version {raw!r}, using {fallback}")
    return DaemonVersion(raw=raw, value=fallback, parsed=False)
