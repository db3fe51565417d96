import pytest

from dotgraph.errors import GroupCycleError
from dotgraph.model import Graph
from dotgraph.serializer import cluster_name, serialize


def test_strict_digraph_end_to_end():
    graph = Graph(directed=True, strict=True, name="G")
    graph.add_node("A", {"shape": "box"})
    graph.add_node("B")
    graph.add_edge({"A": "B"}, {"label": "Edge Label"})

    assert serialize(graph) == (
        "strict digraph G {\n"
        "    A [ shape=box ];\n"
        "    B;\n"
        '    A -> B [ label="Edge Label" ];\n'
        "}\n"
    )
    assert graph.to_dot() == serialize(graph)


def test_empty_undirected_graph():
    assert serialize(Graph(directed=False)) == "strict graph G {\n}\n"


def test_header_escapes_name_and_attributes():
    graph = Graph(directed=False, strict=False, name="my graph")
    graph.set_attributes({"rankdir": "LR", "label": "Title\nline", "font name": "Sans"})
    graph.add_edge({"a": "b"})

    assert serialize(graph) == (
        'graph "my graph" {\n'
        "    rankdir=LR;\n"
        '    label="Title\\nline";\n'
        '    "font name"=Sans;\n'
        "    a -- b;\n"
        "}\n"
    )


def test_reserved_graph_name_is_quoted():
    assert serialize(Graph(name="graph")).startswith('strict digraph "graph" {\n')


def test_nested_groups_and_edges():
    graph = Graph(strict=False, name="Nested", attributes={"rankdir": "LR"})
    graph.add_cluster("web", "Web Tier", {"color": "blue"})
    graph.add_node("lb", group="web")
    graph.add_cluster("app", "", group="web")
    graph.add_node("api", group="app")
    graph.add_subgraph("same", "", {"rank": "same"})
    graph.add_node("x", group="same")
    graph.add_node("db")
    graph.add_edge({"lb": "api"}, {"lhead": "app"})
    graph.add_edge({"api": "db"}, {"ltail": "clusterApp"}, ports={"api": "s"})

    assert serialize(graph) == (
        "digraph Nested {\n"
        "    rankdir=LR;\n"
        "    db;\n"
        "    subgraph cluster_web {\n"
        '        graph [ color=blue,label="Web Tier" ];\n'
        "        lb;\n"
        "        subgraph cluster_app {\n"
        "            api;\n"
        "        }\n"
        "    }\n"
        "    subgraph same {\n"
        "        graph [ rank=same ];\n"
        "        x;\n"
        "    }\n"
        "    lb -> api [ lhead=cluster_app ];\n"
        "    api:s -> db [ ltail=clusterApp ];\n"
        "}\n"
    )


@pytest.mark.parametrize(
    ("name", "expected"),
    [("foo", "cluster_foo"), ("clusterFoo", "clusterFoo"), ("CLUSTER_x", "CLUSTER_x"), ("clust", "cluster_clust")],
)
def test_cluster_name(name, expected):
    assert cluster_name(name) == expected


def test_cluster_block_names():
    graph = Graph()
    graph.add_cluster("foo", "")
    graph.add_cluster("clusterFoo", "")
    graph.add_cluster("my box", "")

    text = serialize(graph)

    assert "    subgraph cluster_foo {\n    }\n" in text
    assert "    subgraph clusterFoo {\n    }\n" in text
    assert '    subgraph "cluster_my box" {\n    }\n' in text


def test_html_title_and_boolean_attributes():
    graph = Graph()
    graph.add_cluster("c", "<b>Title</b>")
    graph.add_node("n", {"fixedsize": True, "width": 1.5}, group="c")

    assert serialize(graph) == (
        "strict digraph G {\n"
        "    subgraph cluster_c {\n"
        "        graph [ label=<<b>Title</b>> ];\n"
        "        n [ fixedsize=true,width=1.5 ];\n"
        "    }\n"
        "}\n"
    )


def test_nodes_in_unregistered_groups_are_emitted_at_top_level():
    graph = Graph()
    graph.add_node("loose", group="not-a-cluster")

    assert "    loose;\n" in serialize(graph)


def test_edge_ports_and_multiplicity():
    graph = Graph(strict=False)
    graph.add_edge({"a": "b"}, ports={"a": "p1", "b": "p 2"})
    graph.add_edge({"a": "b"}, {"color": "red"})
    graph.add_edge({"a": "c"})

    assert serialize(graph).splitlines()[1:-1] == [
        '    a:p1 -> b:"p 2";',
        "    a -> b [ color=red ];",
        "    a -> c;",
    ]


def test_dangling_edges_survive_node_removal():
    graph = Graph()
    graph.add_node("a")
    graph.add_node("b")
    graph.add_edge({"a": "b"})
    graph.remove_node("a")

    assert serialize(graph) == "strict digraph G {\n    b;\n    a -> b;\n}\n"


def test_serialization_is_deterministic():
    graph = Graph(strict=False)
    graph.add_cluster("c", "C")
    for name in ["z", "a", "m"]:
        graph.add_node(name, {"label": name.upper()}, group="c")
    graph.add_edge({"z": "a"})
    graph.add_edge({"a": "m"}, {"weight": 2})

    assert serialize(graph) == serialize(graph)


def test_unreachable_group_cycle_is_skipped():
    graph = Graph()
    graph.add_cluster("a", "", group="b")
    graph.add_cluster("b", "", group="a")
    graph.add_node("n", group="a")

    assert serialize(graph) == "strict digraph G {\n}\n"


def test_reachable_group_cycle_raises():
    graph = Graph()
    graph.add_cluster("x", "")
    graph.add_subgraph("default", "", group="x")

    with pytest.raises(GroupCycleError) as excinfo:
        serialize(graph)
    assert excinfo.value.path == ["x", "default", "x"]


def test_registered_default_group_is_not_wrapped():
    graph = Graph()
    graph.add_subgraph("default", "Ignored", {"rank": "same"}, group="elsewhere")
    graph.add_node("a", {"shape": "box"})
    graph.add_node("b")

    text = serialize(graph)

    assert text == "strict digraph G {\n    a [ shape=box ];\n    b;\n}\n"
    assert "subgraph" not in text


def test_edges_keep_insertion_order_after_removal():
    graph = Graph(strict=False)
    for color in ["red", "green", "blue"]:
        graph.add_edge({"a": "b"}, {"color": color})
    graph.remove_edge({"a": "b"}, 1)
    graph.add_edge({"a": "b"}, {"color": "black"})

    assert serialize(graph).splitlines()[1:-1] == [
        "    a -> b [ color=red ];",
        "    a -> b [ color=blue ];",
        "    a -> b [ color=black ];",
    ]
