"""A flow canvas: nodes, their connections and the graph behind them."""

from __future__ import annotations

from concurrent.futures import Future

from nodeflow.engine import FlowEngine
from nodeflow.graph import NodeGraph
from nodeflow.items import (
    WHITE,
    Color,
    Node,
    NodeConnection,
    NodeSocket,
    Point,
    PointLike,
    Rect,
    SocketType,
)
from nodeflow.model import TaskStatus

BACKGROUND_COLOR: Color = (240, 240, 240)
PENDING_CONNECTION_COLOR: Color = (160, 160, 164)
COMPLETED_COLOR: Color = (10, 191, 61)
FAILED_COLOR: Color = (238, 0, 0)


class NodeScene:
    """Holds the nodes and connections of one flow and keeps its graph in step."""

    def __init__(self, engine: FlowEngine | None = None) -> None:
        self.scene_rect = Rect(0, 0, 2000, 2000)
        self.background_color: Color = BACKGROUND_COLOR
        self.graph = NodeGraph()
        self.engine = engine if engine is not None else FlowEngine()
        self.pending_connection: NodeConnection | None = None
        self._start_socket: NodeSocket | None = None
        self._nodes: list[Node] = []
        self._node_map: dict[int, Node] = {}
        self._connections: list[NodeConnection] = []
        self.graph.add_status_listener(self._on_status_changed)

    @property
    def nodes(self) -> list[Node]:
        """Nodes in the order they were created."""
        return list(self._nodes)

    @property
    def connections(self) -> list[NodeConnection]:
        """Connections in the order they were made."""
        return list(self._connections)

    def _next_free_id(self) -> int:
        ids = sorted(node.id for node in self._nodes)
        for expected, actual in enumerate(ids):
            if expected != actual:
                return expected
        return len(ids)

    def create_node(self, title: str, position: PointLike = Point(), node_id: int | None = None) -> Node:
        """Add a node with input and output sockets.

        Without ``node_id`` the smallest id not in use is taken.
        """
        if node_id is None:
            node_id = self._next_free_id()
        self.graph.add_node(node_id, title)
        node = Node(node_id, title, position)
        node.add_input_socket()
        node.add_output_socket()
        self._nodes.append(node)
        self._node_map[node_id] = node
        return node

    def node(self, node_id: int) -> Node | None:
        """The node with this id, or None."""
        return self._node_map.get(node_id)

    def remove_node(self, node: Node | None) -> None:
        """Remove a node together with every connection touching it."""
        if node is None or node not in self._nodes:
            return
        attached = [
            conn
            for conn in self._connections
            if (conn.start_socket is not None and conn.start_socket.parent is node)
            or (conn.end_socket is not None and conn.end_socket.parent is node)
        ]
        for conn in attached:
            self.remove_connection(conn)
        self._nodes.remove(node)
        self._node_map.pop(node.id, None)
        self.graph.remove_node(node.id)

    def remove_connection(self, connection: NodeConnection | None) -> None:
        """Remove a connection and unlink its nodes in the graph."""
        if connection is None or connection not in self._connections:
            return
        start, end = connection.start_socket, connection.end_socket
        if start is not None and end is not None:
            start_node, end_node = start.parent, end.parent
            if isinstance(start_node, Node) and isinstance(end_node, Node):
                self.graph.disconnect_nodes(start_node.id, end_node.id)
        if start is not None:
            start.connected = False
        if end is not None:
            end.connected = False
        self._connections.remove(connection)

    def can_connect(self, socket1: NodeSocket, socket2: NodeSocket) -> bool:
        """Whether the two sockets may be joined by a new connection."""
        if socket1.parent is socket2.parent:
            return False
        if socket1.socket_type is socket2.socket_type:
            return False
        node1, node2 = socket1.parent, socket2.parent
        if not isinstance(node1, Node) or not isinstance(node2, Node):
            return False
        from_id, to_id = node1.id, node2.id
        if socket1.socket_type is SocketType.INPUT:
            from_id, to_id = to_id, from_id
        return self.graph.can_connect(from_id, to_id)

    def connect_sockets(self, start_socket: NodeSocket, end_socket: NodeSocket) -> NodeConnection | None:
        """Join two sockets, output to input; None if not allowed or it would form a cycle."""
        if not self.can_connect(start_socket, end_socket):
            return None
        output_socket, input_socket = start_socket, end_socket
        if start_socket.socket_type is SocketType.INPUT:
            output_socket, input_socket = end_socket, start_socket
        out_node, in_node = output_socket.parent, input_socket.parent
        if not isinstance(out_node, Node) or not isinstance(in_node, Node):
            return None
        if not self.graph.connect_nodes(out_node.id, in_node.id):
            return None
        connection = NodeConnection(output_socket, input_socket)
        self._connections.append(connection)
        output_socket.connected = True
        input_socket.connected = True
        return connection

    def begin_connection(self, socket: NodeSocket) -> NodeConnection:
        """Start dragging a new connection out of ``socket``."""
        self._start_socket = socket
        pending = NodeConnection(socket, socket)
        pending.color = PENDING_CONNECTION_COLOR
        self.pending_connection = pending
        return pending

    def drag_connection(self, point: PointLike) -> None:
        """Move the free end of the connection being dragged."""
        if self.pending_connection is None or self._start_socket is None:
            return
        self.pending_connection.set_end_point(point)

    def finish_connection(self, socket: NodeSocket | None) -> NodeConnection | None:
        """End the drag on ``socket``, or cancel it when ``socket`` is None.

        Returns the connection made, if any.
        """
        if self.pending_connection is None or self._start_socket is None:
            return None
        start = self._start_socket
        self.pending_connection = None
        self._start_socket = None
        if socket is None or socket is start:
            return None
        return self.connect_sockets(start, socket)

    def topological_sort(self) -> list[int]:
        """Node ids in dependency order."""
        return self.graph.topological_sort()

    def execute_flow(self) -> Future | None:
        """Reset every node and run the flow; None if there is nothing to run."""
        if not self.graph.topological_sort():
            return None
        for node in self._node_map.values():
            node.result_color = WHITE
            node.status = TaskStatus.NOT_STARTED
        return self.engine.execute(self.graph)

    def _on_status_changed(self, node_id: int, status: TaskStatus) -> None:
        node = self._node_map.get(node_id)
        if node is None:
            return
        node.status = status
        if status is TaskStatus.COMPLETED:
            node.result_color = COMPLETED_COLOR
        elif status is TaskStatus.FAILED:
            node.result_color = FAILED_COLOR