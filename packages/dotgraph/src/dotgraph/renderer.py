"""Hand serialized graphs to the Graphviz ``dot``/``neato`` executables."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from dotgraph.config import RendererConfig
from dotgraph.errors import DotGraphError, RenderError
from dotgraph.model import Graph
from dotgraph.serializer import serialize

logger = logging.getLogger(__name__)

COMMANDS = ("dot", "neato")


def save_dot(graph: Graph, path: str | Path | None = None) -> Path:
    """Write the graph's DOT text to ``path``, or to a fresh temporary file."""
    text = serialize(graph)
    if not text:
        raise DotGraphError("could not save graph: serializer produced no output")

    output_path = Path(path) if path else _temp_path(".dot")
    output_path.write_text(text, encoding="utf-8")
    return output_path


def select_command(command: str | None, directed: bool) -> str:
    if command in COMMANDS:
        return command
    return "dot" if directed else "neato"


class Renderer:
    """Runs Graphviz on DOT files.

    Failures come back as ``False`` (or ``None`` from ``fetch``) unless the
    config asks for verbose errors, in which case a ``RenderError`` carrying
    the process output is raised.
    """

    def __init__(self, config: RendererConfig | None = None):
        self.config = config or RendererConfig()

    def render_dot_file(
        self,
        dot_file: str | Path,
        output_file: str | Path,
        format: str = "svg",
        command: str | None = None,
        directed: bool = True,
    ) -> bool:
        dot_path = Path(dot_file)
        if not dot_path.exists():
            raise DotGraphError(f"could not find dot file: {dot_path}")

        output_path = Path(output_file)
        old_mtime = output_path.stat().st_mtime_ns if output_path.exists() else 0

        command = select_command(command, directed)
        argv = [
            self.config.executable(command),
            f"-T{format}",
            f"-o{output_path}",
            str(dot_path),
        ]
        logger.debug("running %s", argv)

        exit_code: int | None
        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.config.timeout_s,
            )
            exit_code, output = completed.returncode, completed.stdout or ""
        except OSError as exc:
            exit_code, output = None, str(exc)
        except subprocess.TimeoutExpired as exc:
            exit_code, output = None, f"timed out after {exc.timeout}s"

        if (
            exit_code == 0
            and output_path.exists()
            and output_path.stat().st_mtime_ns > old_mtime
        ):
            logger.debug("%s wrote %s", command, output_path)
            return True

        logger.debug("%s failed with exit code %s: %s", command, exit_code, output)
        if self.config.verbose_errors:
            raise RenderError(
                f"{command} command failed: {output}",
                command=command,
                exit_code=exit_code,
                output=output,
            )
        return False

    def render(
        self,
        graph: Graph,
        output_file: str | Path,
        format: str = "svg",
        command: str | None = None,
    ) -> bool:
        dot_path = save_dot(graph)
        try:
            return self.render_dot_file(
                dot_path, output_file, format, command, directed=graph.directed
            )
        finally:
            dot_path.unlink(missing_ok=True)

    def fetch(self, graph: Graph, format: str = "svg", command: str | None = None) -> bytes | None:
        """Render ``graph`` and return the produced file's bytes."""
        dot_path = save_dot(graph)
        output_path = dot_path.with_name(f"{dot_path.name}.{format}")
        try:
            if not self.render_dot_file(
                dot_path, output_path, format, command, directed=graph.directed
            ):
                return None
            try:
                return output_path.read_bytes()
            except OSError as exc:
                if self.config.verbose_errors:
                    raise RenderError(
                        f"could not read rendered file: {output_path}",
                        command=select_command(command, graph.directed),
                        cause=exc,
                    ) from exc
                return None
        finally:
            dot_path.unlink(missing_ok=True)
            output_path.unlink(missing_ok=True)


def _temp_path(suffix: str) -> Path:
    with tempfile.NamedTemporaryFile(prefix="dotgraph-", suffix=suffix, delete=False) as handle:
        return Path(handle.name)
