"""Resolve the cluster/subgraph nesting tree from each group's ``embed_in`` parent."""

from __future__ import annotations

from dotgraph.errors import GroupCycleError
from dotgraph.model import DEFAULT_GROUP, Graph, GroupInfo


def groups(graph: Graph) -> list[str]:
    """Cluster ids followed by subgraph ids, without duplicates."""
    return list(dict.fromkeys([*graph.clusters, *graph.subgraphs]))


def group_info(graph: Graph, group_id: str) -> tuple[str, GroupInfo] | None:
    """Return ``(kind, info)`` for a group id; clusters win if both registries hold it."""
    if group_id in graph.clusters:
        return "cluster", graph.clusters[group_id]
    if group_id in graph.subgraphs:
        return "subgraph", graph.subgraphs[group_id]
    return None


def top_groups(graph: Graph) -> list[str]:
    top: list[str] = []
    for group_id in groups(graph):
        cluster = graph.clusters.get(group_id)
        subgraph = graph.subgraphs.get(group_id)
        if (
            group_id == DEFAULT_GROUP
            or (cluster is not None and cluster.embed_in == DEFAULT_GROUP)
            or (subgraph is not None and subgraph.embed_in == DEFAULT_GROUP)
        ):
            top.append(group_id)
    return top


def children_of(graph: Graph, parent: str) -> list[str]:
    children = [group_id for group_id, info in graph.clusters.items() if info.embed_in == parent]
    children.extend(
        group_id for group_id, info in graph.subgraphs.items() if info.embed_in == parent
    )
    return children


def descend(ancestors: tuple[str, ...], group_id: str) -> tuple[str, ...]:
    """Extend the chain of open groups with ``group_id``, rejecting cycles."""
    if group_id in ancestors:
        start = ancestors.index(group_id)
        raise GroupCycleError([*ancestors[start:], group_id])
    return (*ancestors, group_id)
