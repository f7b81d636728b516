"""Directed acyclic graph of flow nodes."""

from __future__ import annotations

from collections import deque
from typing import Callable

from nodeflow.model import NodeData, TaskStatus

StatusListener = Callable[[int, TaskStatus], None]


class NodeGraph:
    """Nodes keyed by id, kept free of cycles, iterated in ascending id order."""

    def __init__(self) -> None:
        self._nodes: dict[int, NodeData] = {}
        self._listeners: list[StatusListener] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def add_status_listener(self, callback: StatusListener) -> None:
        """Register ``callback(node_id, status)`` to hear of status changes."""
        self._listeners.append(callback)

    def add_node(self, node_id: int, title: str) -> NodeData:
        """Add a node, or return the existing one with that id."""
        existing = self._nodes.get(node_id)
        if existing is not None:
            return existing
        data = NodeData(node_id, title)
        self._nodes[node_id] = data
        return data

    def remove_node(self, node_id: int) -> None:
        """Remove a node and every link to or from it."""
        if node_id not in self._nodes:
            return
        for data in self._nodes.values():
            data.input_ids[:] = [i for i in data.input_ids if i != node_id]
            data.output_ids[:] = [i for i in data.output_ids if i != node_id]
        del self._nodes[node_id]

    def can_connect(self, from_id: int, to_id: int) -> bool:
        """Whether a new link from ``from_id`` to ``to_id`` is allowed, cycles aside."""
        if from_id == to_id:
            return False
        if from_id not in self._nodes or to_id not in self._nodes:
            return False
        return to_id not in self._nodes[from_id].output_ids

    def connect_nodes(self, output_id: int, input_id: int) -> bool:
        """Link ``output_id`` to ``input_id``; refuse and return False if it would form a cycle."""
        if not self.can_connect(output_id, input_id):
            return False
        source = self._nodes[output_id]
        target = self._nodes[input_id]
        source.output_ids.append(input_id)
        target.input_ids.append(output_id)
        if self.has_cycle():
            source.output_ids[:] = [i for i in source.output_ids if i != input_id]
            target.input_ids[:] = [i for i in target.input_ids if i != output_id]
            return False
        return True

    def disconnect_nodes(self, output_id: int, input_id: int) -> None:
        """Remove the link from ``output_id`` to ``input_id`` if both nodes exist."""
        if output_id not in self._nodes or input_id not in self._nodes:
            return
        source = self._nodes[output_id]
        target = self._nodes[input_id]
        source.output_ids[:] = [i for i in source.output_ids if i != input_id]
        target.input_ids[:] = [i for i in target.input_ids if i != output_id]

    def has_cycle(self) -> bool:
        """Whether the links contain a directed cycle."""
        in_progress, finished = 1, 2
        state: dict[int, int] = {}
        for start in sorted(self._nodes):
            if start in state:
                continue
            state[start] = in_progress
            stack = [(start, iter(self._nodes[start].output_ids))]
            while stack:
                node_id, neighbours = stack[-1]
                for neighbour in neighbours:
                    mark = state.get(neighbour)
                    if mark == in_progress:
                        return True
                    if mark is None:
                        state[neighbour] = in_progress
                        stack.append((neighbour, iter(self._nodes[neighbour].output_ids)))
                        break
                else:
                    state[node_id] = finished
                    stack.pop()
        return False

    def topological_sort(self) -> list[int]:
        """Node ids in dependency order, or an empty list if the graph has a cycle."""
        if self.has_cycle():
            return []
        in_degree = {node_id: len(self._nodes[node_id].input_ids) for node_id in sorted(self._nodes)}
        queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
        result: list[int] = []
        while queue:
            current = queue.popleft()
            result.append(current)
            for neighbour in self._nodes[current].output_ids:
                in_degree[neighbour] -= 1
                if in_degree[neighbour] == 0:
                    queue.append(neighbour)
        return result

    def node(self, node_id: int) -> NodeData | None:
        """The node with this id, or None."""
        return self._nodes.get(node_id)

    def all_nodes(self) -> list[NodeData]:
        """All nodes in ascending id order."""
        return [self._nodes[node_id] for node_id in sorted(self._nodes)]

    def input_nodes(self, node_id: int) -> list[int]:
        """Ids of the nodes linking into this one."""
        data = self._nodes.get(node_id)
        return list(data.input_ids) if data else []

    def output_nodes(self, node_id: int) -> list[int]:
        """Ids of the nodes this one links to."""
        data = self._nodes.get(node_id)
        return list(data.output_ids) if data else []

    def set_node_status(self, node_id: int, status: TaskStatus) -> None:
        """Set a node's status and notify listeners; unknown ids are ignored."""
        data = self._nodes.get(node_id)
        if data is None:
            return
        data.status = status
        for listener in list(self._listeners):
            listener(node_id, status)

    def node_status(self, node_id: int) -> TaskStatus:
        """A node's status; NOT_STARTED for unknown ids."""
        data = self._nodes.get(node_id)
        return data.status if data else TaskStatus.NOT_STARTED

    def clear(self) -> None:
        """Remove every node."""
        self._nodes.clear()