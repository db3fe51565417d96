"""Save and load the graph model as a JSON blob."""

from __future__ import annotations

import json
import logging
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotgraph.errors import PersistenceError
from dotgraph.model import EdgeRecord, Graph, GroupInfo

logger = logging.getLogger(__name__)

_DEFAULTS: dict[str, Any] = {
    "edgesFrom": {},
    "nodes": {},
    "attributes": {},
    "directed": True,
    "clusters": {},
    "subgraphs": {},
    "name": "G",
    "strict": True,
}


class BlobShapeError(ValueError):
    """A JSON object whose fields do not describe a graph."""


def to_payload(graph: Graph) -> dict[str, Any]:
    return {
        "edgesFrom": {
            source: {
                target: {
                    str(edge_id): _record_to_payload(record)
                    for edge_id, record in records.items()
                }
                for target, records in targets.items()
            }
            for source, targets in graph.edges_from.items()
        },
        "nodes": {
            group: {node: dict(attributes) for node, attributes in nodes.items()}
            for group, nodes in graph.nodes.items()
        },
        "attributes": dict(graph.attributes),
        "directed": graph.directed,
        "clusters": {gid: _group_to_payload(info) for gid, info in graph.clusters.items()},
        "subgraphs": {gid: _group_to_payload(info) for gid, info in graph.subgraphs.items()},
        "name": graph.name,
        "strict": graph.strict,
    }


def build_graph(payload: Mapping[str, Any]) -> Graph:
    """Build a new graph from ``payload`` merged over the defaults.

    Blobs written before edges were grouped per node pair carry a flat
    ``edges`` collection of ``{from: to}`` entries and a parallel
    ``edgeAttributes`` collection. Those are replayed through
    ``Graph.add_edge`` so strict-mode merging still applies.

    Raises ``BlobShapeError`` when a field has the wrong shape.
    """
    data = {**_DEFAULTS, **payload}

    name = data["name"]
    if not isinstance(name, str):
        raise BlobShapeError("name must be a string")

    graph = Graph(name=name, strict=bool(data["strict"]))
    graph.directed = bool(data["directed"])
    graph.attributes = dict(_mapping(data["attributes"], "attributes"))
    graph.nodes = {
        group: {
            node: dict(_mapping(attributes or {}, f"nodes.{group}.{node}"))
            for node, attributes in _mapping(nodes, f"nodes.{group}").items()
        }
        for group, nodes in _mapping(data["nodes"], "nodes").items()
    }
    graph.clusters = {
        gid: _group_from_payload(_mapping(info, f"clusters.{gid}"))
        for gid, info in _mapping(data["clusters"], "clusters").items()
    }
    graph.subgraphs = {
        gid: _group_from_payload(_mapping(info, f"subgraphs.{gid}"))
        for gid, info in _mapping(data["subgraphs"], "subgraphs").items()
    }
    graph.edges_from = {
        source: {
            target: _records_from_payload(records, f"edgesFrom.{source}.{target}")
            for target, records in _mapping(targets, f"edgesFrom.{source}").items()
        }
        for source, targets in _mapping(data["edgesFrom"], "edgesFrom").items()
    }

    legacy_edges = data.get("edges")
    if legacy_edges is not None:
        legacy_attributes = data.get("edgeAttributes") or {}
        for key, edge in _indexed(legacy_edges, "edges"):
            if isinstance(edge, list):
                edge = tuple(edge)
            graph.add_edge(edge, _legacy_attributes(legacy_attributes, key))
    return graph


def apply_payload(graph: Graph, payload: Mapping[str, Any]) -> Graph:
    """Replace the state of ``graph`` with ``payload``.

    The graph is only touched once the whole payload has been read, so a
    ``BlobShapeError`` leaves it as it was.
    """
    loaded = build_graph(payload)
    graph.directed = loaded.directed
    graph.strict = loaded.strict
    graph.name = loaded.name
    graph.attributes = loaded.attributes
    graph.nodes = loaded.nodes
    graph.edges_from = loaded.edges_from
    graph.clusters = loaded.clusters
    graph.subgraphs = loaded.subgraphs
    return graph


def dumps(graph: Graph) -> str:
    return json.dumps(to_payload(graph), indent=2)


def loads(text: str, graph: Graph | None = None) -> Graph:
    """Load a blob into ``graph`` (a new one by default).

    Text that does not decode to a JSON object describing a graph leaves the
    graph untouched.
    """
    graph = graph if graph is not None else Graph()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("ignoring graph blob that is not valid JSON")
        return graph
    if not isinstance(payload, dict):
        logger.warning("ignoring graph blob that is not a JSON object")
        return graph
    try:
        return apply_payload(graph, payload)
    except BlobShapeError as exc:
        logger.warning("ignoring malformed graph blob: %s", exc)
        return graph


def save_graph(graph: Graph, path: str | Path | None = None) -> Path:
    """Write the graph blob to ``path``, or to a fresh temporary file."""
    output_path = Path(path) if path else _temp_path()
    try:
        output_path.write_text(dumps(graph), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"could not save graph to {output_path}", cause=exc) from exc
    return output_path


def load_graph(path: str | Path, graph: Graph | None = None) -> Graph:
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise PersistenceError(f"could not read graph from {path}", cause=exc) from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("ignoring graph blob in %s that is not UTF-8 text", path)
        return graph if graph is not None else Graph()
    return loads(text, graph)


def _temp_path() -> Path:
    with tempfile.NamedTemporaryFile(prefix="dotgraph-", suffix=".json", delete=False) as handle:
        return Path(handle.name)


def _mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise BlobShapeError(f"{field} must be an object, got {type(value).__name__}")
    return value


def _indexed(value: Any, field: str) -> list[tuple[Any, Any]]:
    # PHP writes non-contiguous arrays as objects keyed by index.
    if isinstance(value, list):
        return list(enumerate(value))
    if isinstance(value, Mapping):
        return list(value.items())
    raise BlobShapeError(f"{field} must be a list or an object, got {type(value).__name__}")


def _records_from_payload(records: Any, field: str) -> dict[int, EdgeRecord]:
    loaded: dict[int, EdgeRecord] = {}
    for key, record in _indexed(records, field):
        try:
            edge_id = int(key)
        except ValueError as exc:
            raise BlobShapeError(f"{field} has non-numeric edge id {key!r}") from exc
        loaded[edge_id] = _record_from_payload(_mapping(record, f"{field}.{key}"))
    return loaded


def _record_to_payload(record: EdgeRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if record.port_from is not None:
        payload["portFrom"] = record.port_from
    if record.port_to is not None:
        payload["portTo"] = record.port_to
    payload["attributes"] = dict(record.attributes)
    return payload


def _record_from_payload(payload: Mapping[str, Any]) -> EdgeRecord:
    return EdgeRecord(
        port_from=payload.get("portFrom"),
        port_to=payload.get("portTo"),
        attributes=dict(_mapping(payload.get("attributes") or {}, "attributes")),
    )


def _group_to_payload(info: GroupInfo) -> dict[str, Any]:
    return {"title": info.title, "attributes": dict(info.attributes), "embedIn": info.embed_in}


def _group_from_payload(payload: Mapping[str, Any]) -> GroupInfo:
    return GroupInfo(
        title=payload.get("title", ""),
        attributes=dict(_mapping(payload.get("attributes") or {}, "attributes")),
        embed_in=payload.get("embedIn", "default"),
    )


def _legacy_attributes(attributes: Any, key: Any) -> dict[str, Any]:
    # A missing or null entry means the edge had no attributes.
    if isinstance(attributes, list):
        index = int(key) if str(key).isdigit() else -1
        found = attributes[index] if 0 <= index < len(attributes) else None
    elif isinstance(attributes, Mapping):
        found = attributes.get(str(key), attributes.get(key))
    else:
        found = None
    return dict(_mapping(found or {}, f"edgeAttributes.{key}"))
