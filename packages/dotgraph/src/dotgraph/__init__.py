"""Build graphs in memory and emit them as Graphviz DOT text."""

from dotgraph.config import RendererConfig
from dotgraph.errors import (
    ConfigurationError,
    DotGraphError,
    GroupConflictError,
    GroupCycleError,
    PersistenceError,
    RenderError,
)
from dotgraph.escape import escape, escape_attributes
from dotgraph.model import EdgeRecord, Graph, GroupInfo
from dotgraph.persistence import load_graph, save_graph
from dotgraph.renderer import Renderer, save_dot
from dotgraph.serializer import serialize

__all__ = [
    "ConfigurationError",
    "DotGraphError",
    "EdgeRecord",
    "Graph",
    "GroupConflictError",
    "GroupCycleError",
    "GroupInfo",
    "PersistenceError",
    "RenderError",
    "Renderer",
    "RendererConfig",
    "escape",
    "escape_attributes",
    "load_graph",
    "save_dot",
    "save_graph",
    "serialize",
]
