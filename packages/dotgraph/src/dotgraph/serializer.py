"""Emit a Graph as DOT text."""

from __future__ import annotations

from collections.abc import Mapping

from dotgraph.escape import AttrValue, escape, escape_attributes
from dotgraph.groups import children_of, descend, group_info, groups, top_groups
from dotgraph.model import DEFAULT_GROUP, EdgeRecord, Graph

INDENT = "    "
CLUSTER_PREFIX = "cluster_"
CLUSTER_REFERENCE_KEYS = frozenset({"lhead", "ltail"})


def serialize(graph: Graph) -> str:
    """Render ``graph`` as DOT text.

    Output depends only on the graph's current state, so serializing twice
    without mutating in between yields identical text.
    """
    lines: list[str] = []
    header = "strict " if graph.strict else ""
    header += "digraph " if graph.directed else "graph "
    lines.append(f"{header}{escape(graph.name)} {{\n")

    for key, value in escape_attributes(graph.attributes).items():
        lines.append(f"{INDENT}{key}={value};\n")

    group_ids = set(groups(graph))
    for group_id, nodes in graph.nodes.items():
        if group_id not in group_ids:
            lines.extend(_node_lines(nodes, depth=1))

    for group_id in top_groups(graph):
        lines.extend(_group_lines(graph, group_id, depth=1, ancestors=()))

    separator = " -> " if graph.directed else " -- "
    for source, targets in graph.edges_from.items():
        for target, records in targets.items():
            for record in records.values():
                lines.append(_edge_line(source, target, record, separator))

    lines.append("}\n")
    return "".join(lines)


def cluster_name(name: str) -> str:
    """Prefix ``cluster_`` unless the name already starts with ``cluster`` (any case)."""
    if name[:7].lower() == "cluster":
        return name
    return CLUSTER_PREFIX + name


def _attribute_list(attributes: Mapping[str, AttrValue]) -> str:
    return ",".join(f"{key}={value}" for key, value in escape_attributes(attributes).items())


def _node_lines(nodes: Mapping[str, Mapping[str, AttrValue]], depth: int) -> list[str]:
    indent = INDENT * depth
    lines = []
    for node_id, attributes in nodes.items():
        attribute_list = _attribute_list(attributes)
        clause = f" [ {attribute_list} ]" if attribute_list else ""
        lines.append(f"{indent}{escape(node_id)}{clause};\n")
    return lines


def _group_lines(
    graph: Graph, group_id: str, depth: int, ancestors: tuple[str, ...]
) -> list[str]:
    ancestors = descend(ancestors, group_id)
    lines: list[str] = []
    # "default" is the root scope: never wrapped, but its children still nest here.
    wrapped = group_id != DEFAULT_GROUP
    inner = depth + 1 if wrapped else depth

    if wrapped:
        resolved = group_info(graph, group_id)
        name = group_id
        if resolved is not None and resolved[0] == "cluster":
            name = cluster_name(group_id)
        lines.append(f"{INDENT * depth}subgraph {escape(name)} {{\n")

        if resolved is not None:
            info = resolved[1]
            attribute_list = [f"{k}={v}" for k, v in escape_attributes(info.attributes).items()]
            if info.title:
                attribute_list.append("label=" + escape(info.title, html=True))
            if attribute_list:
                lines.append(f"{INDENT * inner}graph [ {','.join(attribute_list)} ];\n")

    lines.extend(_node_lines(graph.nodes.get(group_id, {}), inner))

    for child in children_of(graph, group_id):
        lines.extend(_group_lines(graph, child, inner, ancestors))

    if wrapped:
        lines.append(f"{INDENT * depth}}}\n")
    return lines


def _edge_line(source: str, target: str, record: EdgeRecord, separator: str) -> str:
    head = escape(source)
    if record.port_from is not None:
        head += ":" + escape(record.port_from)
    tail = escape(target)
    if record.port_to is not None:
        tail += ":" + escape(record.port_to)

    line = f"{INDENT}{head}{separator}{tail}"
    if record.attributes:
        attributes = {
            key: cluster_name(str(value)) if key in CLUSTER_REFERENCE_KEYS else value
            for key, value in record.attributes.items()
        }
        line += f" [ {_attribute_list(attributes)} ]"
    return line + ";\n"
