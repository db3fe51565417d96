"""Error hierarchy for the graph model, serializer and renderer."""

from __future__ import annotations

from collections.abc import Sequence


class DotGraphError(Exception):
    """Base error for all dotgraph errors."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


# --- Structural errors (raised while building or emitting a graph) ---


class GroupCycleError(DotGraphError):
    """Cluster/subgraph nesting loops back on itself."""

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__("group nesting cycle: " + " -> ".join(self.path))


class GroupConflictError(DotGraphError):
    """Group id already registered as the other kind of group."""

    def __init__(self, group_id: str, existing: str):
        self.group_id = group_id
        self.existing = existing
        super().__init__(f"group {group_id!r} is already registered as a {existing}")


# --- Collaborator errors ---


class PersistenceError(DotGraphError):
    """Graph blob could not be read or written."""


class ConfigurationError(DotGraphError):
    """Invalid renderer configuration."""


class RenderError(DotGraphError):
    """External renderer failed to produce output."""

    def __init__(
        self,
        message: str,
        *,
        command: str,
        exit_code: int | None = None,
        output: str = "",
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.command = command
        self.exit_code = exit_code
        self.output = output
