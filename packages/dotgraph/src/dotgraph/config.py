"""Renderer configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotgraph.errors import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RendererConfig:
    """Where the Graphviz executables live and how failures are reported."""

    bin_path: str = ""
    dot_command: str = "dot"
    neato_command: str = "neato"
    verbose_errors: bool = False
    timeout_s: float | None = None

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> RendererConfig:
        env = environ if environ is not None else os.environ

        timeout_s = None
        raw_timeout = env.get("DOTGRAPH_TIMEOUT")
        if raw_timeout:
            try:
                timeout_s = float(raw_timeout)
            except ValueError as exc:
                raise ConfigurationError(
                    f"DOTGRAPH_TIMEOUT must be a number of seconds, got {raw_timeout!r}",
                    cause=exc,
                ) from exc
            if timeout_s <= 0:
                raise ConfigurationError("DOTGRAPH_TIMEOUT must be positive")

        return cls(
            bin_path=env.get("DOTGRAPH_BIN_PATH", ""),
            dot_command=env.get("DOTGRAPH_DOT_COMMAND") or "dot",
            neato_command=env.get("DOTGRAPH_NEATO_COMMAND") or "neato",
            verbose_errors=env.get("DOTGRAPH_VERBOSE_ERRORS", "").strip().lower() in _TRUTHY,
            timeout_s=timeout_s,
        )

    def executable(self, command: str) -> str:
        name = self.dot_command if command == "dot" else self.neato_command
        return self.bin_path + name
