import pytest

from nodeflow.graph import NodeGraph
from nodeflow.model import TaskStatus


@pytest.fixture
def chain():
    graph = NodeGraph()
    for node_id in (1, 2, 3):
        graph.add_node(node_id, f"n{node_id}")
    assert graph.connect_nodes(1, 2)
    assert graph.connect_nodes(2, 3)
    return graph


def test_add_node_returns_existing():
    graph = NodeGraph()
    first = graph.add_node(5, "first")
    again = graph.add_node(5, "second")
    assert again is first
    assert again.title == "first"
    assert len(graph) == 1


def test_connect_records_both_directions(chain):
    assert chain.output_nodes(1) == [2]
    assert chain.input_nodes(2) == [1]
    assert chain.input_nodes(1) == []


def test_connect_rejects_self_duplicate_and_missing(chain):
    assert not chain.connect_nodes(1, 1)
    assert not chain.connect_nodes(1, 2)
    assert not chain.connect_nodes(1, 99)
    assert chain.output_nodes(1) == [2]


def test_connect_rejects_cycle_and_rolls_back(chain):
    assert not chain.connect_nodes(3, 1)
    assert chain.output_nodes(3) == []
    assert chain.input_nodes(1) == []
    assert not chain.has_cycle()


def test_can_connect(chain):
    assert chain.can_connect(1, 3)
    assert not chain.can_connect(1, 2)
    assert not chain.can_connect(2, 2)
    assert not chain.can_connect(7, 1)


def test_topological_sort_respects_links(chain):
    order = chain.topological_sort()
    assert sorted(order) == [1, 2, 3]
    for node in chain.all_nodes():
        for target in node.output_ids:
            assert order.index(node.id) < order.index(target)


def test_topological_sort_orders_roots_by_id():
    graph = NodeGraph()
    for node_id in (4, 2, 9):
        graph.add_node(node_id, "x")
    assert graph.topological_sort() == [2, 4, 9]


def test_topological_sort_empty_on_cycle(chain):
    chain.node(3).output_ids.append(1)
    chain.node(1).input_ids.append(3)
    assert chain.has_cycle()
    assert chain.topological_sort() == []


def test_remove_node_drops_links(chain):
    chain.remove_node(2)
    assert chain.node(2) is None
    assert chain.output_nodes(1) == []
    assert chain.input_nodes(3) == []
    assert 2 not in chain


def test_disconnect(chain):
    chain.disconnect_nodes(1, 2)
    assert chain.output_nodes(1) == []
    assert chain.input_nodes(2) == []
    assert chain.output_nodes(2) == [3]


def test_all_nodes_ascending():
    graph = NodeGraph()
    for node_id in (3, 1, 2):
        graph.add_node(node_id, "t")
    assert [n.id for n in graph.all_nodes()] == [1, 2, 3]


def test_status_listener_and_lookup(chain):
    events = []
    chain.add_status_listener(lambda node_id, status: events.append((node_id, status)))
    chain.set_node_status(2, TaskStatus.RUNNING)
    chain.set_node_status(42, TaskStatus.FAILED)
    assert events == [(2, TaskStatus.RUNNING)]
    assert chain.node_status(2) is TaskStatus.RUNNING
    assert chain.node_status(42) is TaskStatus.NOT_STARTED


def test_unknown_ids_give_empty_lists():
    graph = NodeGraph()
    assert graph.input_nodes(1) == []
    assert graph.output_nodes(1) == []
    assert graph.node(1) is None


def test_returned_lists_are_copies(chain):
    chain.output_nodes(1).append(3)
    assert chain.output_nodes(1) == [2]


def test_clear(chain):
    chain.clear()
    assert len(chain) == 0
    assert chain.topological_sort() == []