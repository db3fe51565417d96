"""In-memory graph model: nodes grouped by cluster/subgraph, edges with multiplicity."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from dotgraph.errors import GroupConflictError
from dotgraph.escape import AttrValue

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"

Attributes = dict[str, AttrValue]
EdgeSpec = Mapping[str, str] | tuple[str, str]


@dataclass(slots=True)
class EdgeRecord:
    port_from: str | None = None
    port_to: str | None = None
    attributes: Attributes = field(default_factory=dict)

    def merge(self, other: EdgeRecord) -> None:
        """Fold a later record for the same node pair into this one."""
        if other.port_from is not None:
            self.port_from = other.port_from
        if other.port_to is not None:
            self.port_to = other.port_to
        self.attributes.update(other.attributes)


@dataclass(slots=True)
class GroupInfo:
    title: str
    attributes: Attributes = field(default_factory=dict)
    embed_in: str = DEFAULT_GROUP


def edge_endpoints(edge: Any) -> tuple[str, str] | None:
    """Unpack ``{from: to}`` or ``(from, to)``; ``None`` when the shape is wrong."""
    if isinstance(edge, Mapping):
        if len(edge) != 1:
            return None
        ((source, target),) = edge.items()
        return source, target
    if isinstance(edge, tuple) and len(edge) == 2:
        return edge[0], edge[1]
    return None


class Graph:
    """A directed or undirected graph that can be emitted as DOT text.

    Nodes live in per-group buckets; ``"default"`` holds everything not placed
    in a cluster or subgraph. Edges are kept per ``(from, to)`` pair keyed by
    the edge ids handed back by ``add_edge``; an id keeps pointing at the same
    edge when other edges of the pair are removed. In strict mode a pair only
    ever holds id 0: repeated edges are merged into it instead.
    """

    def __init__(
        self,
        directed: bool = True,
        attributes: Mapping[str, AttrValue] | None = None,
        name: str = "G",
        strict: bool = True,
    ):
        self.directed = True
        self.strict = bool(strict)
        self.name = name
        self.attributes: Attributes = {}
        self.nodes: dict[str, dict[str, Attributes]] = {}
        self.edges_from: dict[str, dict[str, dict[int, EdgeRecord]]] = {}
        self.clusters: dict[str, GroupInfo] = {}
        self.subgraphs: dict[str, GroupInfo] = {}
        self._next_edge_ids: dict[tuple[str, str], int] = {}

        self.set_directed(directed)
        if attributes is not None:
            self.set_attributes(attributes)

    # --- Graph-level settings ---

    def set_directed(self, directed: bool) -> bool:
        if not isinstance(directed, bool):
            logger.warning("ignoring non-boolean directed flag: %r", directed)
            return False
        self.directed = directed
        return True

    def set_attributes(self, attributes: Mapping[str, AttrValue]) -> bool:
        if not isinstance(attributes, Mapping):
            logger.warning("ignoring non-mapping graph attributes: %r", attributes)
            return False
        self.attributes = dict(attributes)
        return True

    def add_attributes(self, attributes: Mapping[str, AttrValue]) -> bool:
        if not isinstance(attributes, Mapping):
            logger.warning("ignoring non-mapping graph attributes: %r", attributes)
            return False
        self.attributes.update(attributes)
        return True

    # --- Nodes ---

    def add_node(
        self,
        name: str,
        attributes: Mapping[str, AttrValue] | None = None,
        group: str = DEFAULT_GROUP,
    ) -> None:
        self.nodes.setdefault(group, {})[name] = dict(attributes or {})

    def remove_node(self, name: str, group: str = DEFAULT_GROUP) -> None:
        """Remove a node. Edges that reference it are kept."""
        bucket = self.nodes.get(group)
        if bucket is not None:
            bucket.pop(name, None)

    # --- Edges ---

    def add_edge(
        self,
        edge: EdgeSpec,
        attributes: Mapping[str, AttrValue] | None = None,
        ports: Mapping[str, str] | None = None,
    ) -> int | None:
        """Add an edge and return its id within its ``(from, to)`` pair.

        ``ports`` maps a node id to the port the edge attaches to, e.g.
        ``{"a": "out"}``. Returns ``None`` if ``edge`` is not a single
        ``{from: to}`` entry or a ``(from, to)`` pair.
        """
        endpoints = edge_endpoints(edge)
        if endpoints is None:
            logger.warning("ignoring malformed edge: %r", edge)
            return None
        source, target = endpoints

        ports = ports or {}
        record = EdgeRecord(
            port_from=ports.get(source),
            port_to=ports.get(target),
            attributes=dict(attributes or {}),
        )

        records = self.edges_from.setdefault(source, {}).setdefault(target, {})
        if not self.strict:
            # Removed ids are never handed out again.
            edge_id = max(self._next_edge_ids.get(endpoints, 0), max(records, default=-1) + 1)
            records[edge_id] = record
            self._next_edge_ids[endpoints] = edge_id + 1
            return edge_id

        if 0 in records:
            records[0].merge(record)
        else:
            records[0] = record
        return 0

    def remove_edge(self, edge: EdgeSpec, edge_id: int | None = None) -> None:
        """Remove one edge by id, or every edge between the pair when no id is given."""
        endpoints = edge_endpoints(edge)
        if endpoints is None:
            logger.warning("ignoring malformed edge: %r", edge)
            return
        source, target = endpoints

        targets = self.edges_from.get(source)
        if targets is None or target not in targets:
            return

        if edge_id is None:
            del targets[target]
            return

        records = targets[target]
        if records.pop(edge_id, None) is not None and not records:
            del targets[target]

    # --- Groups ---

    def add_cluster(
        self,
        group_id: str,
        title: str,
        attributes: Mapping[str, AttrValue] | None = None,
        group: str = DEFAULT_GROUP,
    ) -> None:
        """Add or replace a cluster, i.e. a subgraph drawn inside a box."""
        if group_id in self.subgraphs:
            raise GroupConflictError(group_id, "subgraph")
        self.clusters[group_id] = GroupInfo(title, dict(attributes or {}), group)
        self.nodes.setdefault(group_id, {})

    def add_subgraph(
        self,
        group_id: str,
        title: str,
        attributes: Mapping[str, AttrValue] | None = None,
        group: str = DEFAULT_GROUP,
    ) -> None:
        if group_id in self.clusters:
            raise GroupConflictError(group_id, "cluster")
        self.subgraphs[group_id] = GroupInfo(title, dict(attributes or {}), group)
        self.nodes.setdefault(group_id, {})

    def to_dot(self) -> str:
        from dotgraph.serializer import serialize

        return serialize(self)
