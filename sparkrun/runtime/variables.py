"""
In-memory variable space.
"""

from __future__ import annotations


class MemoryVariableSink:
    """
    Ordered variable store for one execution context.

    A variable set to None counts as cleared: get_variable() returns
    the default for it, but the name stays in the store so callers can
    see it was cleared rather than never set.

    Every assignment is appended to `history` in call order.

    Usage:
        variables = MemoryVariableSink({"KETTLE_AEL_PDI_DAEMON_VERSION": "1.0"})
        resolver.execute(run_config, variables)
        variables.get_variable("engine")  # "remote"
    """

    def __init__(self, initial: dict[str, str | None] | None = None):
        self._values: dict[str, str | None] = dict(initial or {})
        self.history: list[tuple[str, str | None]] = []

    def get_variable(self, name: str, default: str | None = None) -> str | None:
        value = self._values.get(name)
        return default if value is None else value

    def set_variable(self, name: str, value: str | None) -> None:
        self._values[name] = value
        self.history.append((name, value))

    def is_cleared(self, name: str) -> bool:
        """True if the variable was explicitly set to None."""
        return name in self._values and self._values[name] is None

    def as_dict(self) -> dict[str, str | None]:
        """Snapshot of all variables, including cleared ones."""
        return dict(self._values)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)
