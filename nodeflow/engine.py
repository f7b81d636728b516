"""Runs a node graph: each node becomes a task once all its inputs have finished."""

from __future__ import annotations

import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from nodeflow.graph import NodeGraph
from nodeflow.model import Task, TaskStatus

_FINISHED = (TaskStatus.COMPLETED, TaskStatus.FAILED)


@dataclass
class _Run:
    graph: NodeGraph
    done: Future = field(default_factory=Future)
    pending: int = 0


class FlowEngine:
    """Executes flows on a thread pool with randomly succeeding simulated tasks.

    Status listeners of the graph are called from worker threads.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_workers: int | None = None,
        success_delay: float = 0.2,
        failure_delay: float = 0.5,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="flow")
        self._success_delay = success_delay
        self._failure_delay = failure_delay
        self._lock = threading.RLock()

    def __enter__(self) -> FlowEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._executor.shutdown(wait=True)

    def execute(self, graph: NodeGraph) -> Future:
        """Start running ``graph``.

        Returns a future that resolves to a mapping of node id to final status
        once every reachable node has finished.
        """
        run = _Run(graph)
        order = graph.topological_sort()
        if not order:
            run.done.set_result({})
            return run.done
        with self._lock:
            for node_id in order:
                graph.set_node_status(node_id, TaskStatus.NOT_STARTED)
            run.pending = 1
            for node_id in order:
                if not graph.input_nodes(node_id):
                    self._start(run, node_id)
            self._finish_one(run)
        return run.done

    def _start(self, run: _Run, node_id: int) -> None:
        graph = run.graph
        data = graph.node(node_id)
        if data is None or data.status is not TaskStatus.NOT_STARTED:
            return
        if any(graph.node_status(i) not in _FINISHED for i in graph.input_nodes(node_id)):
            return
        graph.set_node_status(node_id, TaskStatus.RUNNING)
        value = self._rng.randint(-10, 10)
        run.pending += 1
        task = Task(
            value,
            lambda ok: self._on_complete(run, node_id, ok),
            self._success_delay,
            self._failure_delay,
        )
        self._executor.submit(task.run)

    def _on_complete(self, run: _Run, node_id: int, succeeded: bool) -> None:
        try:
            with self._lock:
                status = TaskStatus.COMPLETED if succeeded else TaskStatus.FAILED
                run.graph.set_node_status(node_id, status)
                for output_id in run.graph.output_nodes(node_id):
                    self._start(run, output_id)
                self._finish_one(run)
        except Exception as exc:
            if not run.done.done():
                run.done.set_exception(exc)

    def _finish_one(self, run: _Run) -> None:
        run.pending -= 1
        if run.pending == 0 and not run.done.done():
            run.done.set_result({n.id: n.status for n in run.graph.all_nodes()})