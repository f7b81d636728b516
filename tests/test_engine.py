import threading

import pytest

from nodeflow.engine import FlowEngine
from nodeflow.graph import NodeGraph
from nodeflow.model import TaskStatus


class ScriptedRng:
    """Returns values in order and records the requested ranges."""

    def __init__(self, values):
        self._values = iter(values)
        self.ranges = []

    def randint(self, low, high):
        self.ranges.append((low, high))
        return next(self._values)


def make_graph(node_ids, links):
    graph = NodeGraph()
    for node_id in node_ids:
        graph.add_node(node_id, f"n{node_id}")
    for source, target in links:
        assert graph.connect_nodes(source, target)
    return graph


def run(graph, values, max_workers=1):
    rng = ScriptedRng(values)
    with FlowEngine(rng=rng, max_workers=max_workers, success_delay=0, failure_delay=0) as engine:
        result = engine.execute(graph).result(timeout=5)
    return result, rng


def test_empty_graph_finishes_immediately():
    result, rng = run(NodeGraph(), [])
    assert result == {}
    assert rng.ranges == []


def test_chain_all_succeed():
    graph = make_graph([1, 2, 3], [(1, 2), (2, 3)])
    result, rng = run(graph, [5, 0, 10])
    assert result == {1: TaskStatus.COMPLETED, 2: TaskStatus.COMPLETED, 3: TaskStatus.COMPLETED}
    assert rng.ranges == [(-10, 10)] * 3


def test_failure_does_not_block_successors():
    graph = make_graph([1, 2], [(1, 2)])
    result, _ = run(graph, [-3, 4])
    assert result == {1: TaskStatus.FAILED, 2: TaskStatus.COMPLETED}


def test_diamond_runs_join_node_once():
    graph = make_graph([1, 2, 3, 4], [(1, 2), (1, 3), (2, 4), (3, 4)])
    lock = threading.Lock()
    running = []

    def listen(node_id, status):
        if status is TaskStatus.RUNNING:
            with lock:
                running.append(node_id)

    graph.add_status_listener(listen)
    result, rng = run(graph, [1, 1, 1, 1], max_workers=4)
    assert sorted(running) == [1, 2, 3, 4]
    assert running.index(4) == 3
    assert set(result.values()) == {TaskStatus.COMPLETED}
    assert len(rng.ranges) == 4


def test_independent_roots_all_run():
    graph = make_graph([1, 2, 3], [])
    result, _ = run(graph, [-1, 2, -5], max_workers=3)
    assert sorted(result) == [1, 2, 3]
    assert sorted(s.name for s in result.values()) == ["COMPLETED", "FAILED", "FAILED"]


def test_statuses_are_reset_before_running():
    graph = make_graph([1], [])
    graph.set_node_status(1, TaskStatus.COMPLETED)
    events = []
    graph.add_status_listener(lambda node_id, status: events.append(status))
    result, _ = run(graph, [3])
    assert events[0] is TaskStatus.NOT_STARTED
    assert events[-1] is TaskStatus.COMPLETED
    assert result == {1: TaskStatus.COMPLETED}


def test_listener_error_is_reported_through_future():
    graph = make_graph([1, 2], [(1, 2)])

    def listen(node_id, status):
        if status is TaskStatus.COMPLETED:
            raise RuntimeError("listener broke")

    graph.add_status_listener(listen)
    rng = ScriptedRng([1, 1])
    with FlowEngine(rng=rng, max_workers=1, success_delay=0, failure_delay=0) as engine:
        future = engine.execute(graph)
        with pytest.raises(RuntimeError, match="listener broke"):
            future.result(timeout=5)