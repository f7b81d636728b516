"""Geometry of the items on a flow canvas: nodes, their sockets and connections."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from nodeflow.model import TaskStatus

Color = tuple[int, int, int]

WHITE: Color = (255, 255, 255)
DARK_GRAY: Color = (128, 128, 128)
DEFAULT_NODE_COLOR: Color = (60, 60, 80)


@dataclass(frozen=True)
class Point:
    """A point in scene or item coordinates."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


PointLike = Union[Point, tuple[float, float]]


def _to_point(value: PointLike) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle given by its top-left corner and size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def bottom_left(self) -> Point:
        return Point(self.left, self.bottom)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def is_empty(self) -> bool:
        """Whether the rectangle has no area."""
        return self.width <= 0 or self.height <= 0

    def contains(self, point: PointLike) -> bool:
        """Whether ``point`` lies inside or on the edge of the rectangle."""
        p = _to_point(point)
        return self.left <= p.x <= self.right and self.top <= p.y <= self.bottom

    def translated(self, offset: PointLike) -> Rect:
        """The same rectangle moved by ``offset``."""
        d = _to_point(offset)
        return Rect(self.x + d.x, self.y + d.y, self.width, self.height)


class SocketType(Enum):
    """Direction of a socket on a node."""

    INPUT = 0
    OUTPUT = 1


class NodeSocket:
    """A connection port attached to a node, positioned relative to it."""

    radius = 6

    def __init__(self, socket_type: SocketType, parent: Node | None = None) -> None:
        self.socket_type = socket_type
        self.parent = parent
        self.position = Point()
        self.id = -1
        self.connected = False
        self.hovered = False

    def bounding_rect(self) -> Rect:
        """Area the socket occupies, in its own coordinates."""
        r = self.radius
        return Rect(-r * 2, -r * 2, r * 4, r * 4)

    def scene_pos(self) -> Point:
        """Position of the socket's origin in scene coordinates."""
        if self.parent is None:
            return self.position
        return self.parent.position + self.position

    def connection_point(self) -> Point:
        """Scene point where a connection line attaches to this socket."""
        dx = -self.radius if self.socket_type is SocketType.INPUT else self.radius
        return self.scene_pos() + Point(dx, 0)


class Node:
    """A titled box on the canvas with one input and one output socket."""

    padding = 10
    socket_spacing = 25
    title_height = 25
    min_width = 120
    align_threshold = 5

    def __init__(self, node_id: int, title: str, position: PointLike = Point()) -> None:
        self.id = node_id
        self.title = title
        self.position = _to_point(position)
        self.color: Color = DEFAULT_NODE_COLOR
        self.result_color: Color = WHITE
        self.status = TaskStatus.NOT_STARTED
        self.selected = False
        self.input_socket: NodeSocket | None = None
        self.output_socket: NodeSocket | None = None
        self.left_guide: tuple[Point, Point] | None = None
        self.top_guide: tuple[Point, Point] | None = None

    def add_input_socket(self) -> NodeSocket:
        """Create the input socket and place it."""
        self.input_socket = NodeSocket(SocketType.INPUT, self)
        self.input_socket.id = 0
        self.update_socket_positions()
        return self.input_socket

    def add_output_socket(self) -> NodeSocket:
        """Create the output socket and place it."""
        self.output_socket = NodeSocket(SocketType.OUTPUT, self)
        self.output_socket.id = 0
        self.update_socket_positions()
        return self.output_socket

    @property
    def sockets(self) -> list[NodeSocket]:
        """The sockets the node has, input first."""
        return [s for s in (self.input_socket, self.output_socket) if s is not None]

    def update_socket_positions(self) -> None:
        """Place the input socket at the top centre and the output below the body."""
        half_width = self.bounding_rect().width / 2
        total_height = self.title_height + self.socket_spacing
        if self.input_socket is not None:
            self.input_socket.position = Point(half_width, 0)
        if self.output_socket is not None:
            self.output_socket.position = Point(half_width, total_height + 20)

    def bounding_rect(self) -> Rect:
        """Area the node occupies, in its own coordinates."""
        width = max(self.padding * 2, self.min_width)
        height = self.title_height + self.socket_spacing + self.padding * 2
        return Rect(0, 0, width, height)

    def scene_rect(self) -> Rect:
        """Area the node occupies, in scene coordinates."""
        return self.bounding_rect().translated(self.position)

    def move_to(self, position: PointLike) -> None:
        """Move the node; attached connections follow its sockets."""
        self.position = _to_point(position)

    def auto_align(self, others: Iterable[Node]) -> None:
        """Snap to the left or top edge of any other node within the threshold.

        Guide lines from this node to the node snapped to are stored in
        ``left_guide`` and ``top_guide``.
        """
        self.left_guide = None
        self.top_guide = None
        for other in others:
            if other is self:
                continue
            current = self.scene_rect()
            other_rect = other.scene_rect()
            if abs(abs(current.left) - abs(other_rect.left)) <= self.align_threshold:
                self.position = self.position + Point(other_rect.left - current.left, 0)
                self.left_guide = (self.scene_rect().bottom_left, other_rect.bottom_left)
            if abs(abs(current.top) - abs(other_rect.top)) <= self.align_threshold:
                self.position = self.position + Point(0, other_rect.top - current.top)
                self.top_guide = (self.scene_rect().top_left, other_rect.top_left)

    def label(self) -> str:
        """Text shown on the node: its id and title."""
        return f"{self.id} {self.title}"


class NodeConnection:
    """A line from a start socket to an end socket or to a free end point."""

    line_width = 4
    arrow_size = 8.0

    def __init__(self, start_socket: NodeSocket | None, end_socket: NodeSocket | None = None) -> None:
        self.start_socket = start_socket
        self.end_socket = end_socket
        self.color: Color = DARK_GRAY
        self.selected = False
        self.start_point = start_socket.connection_point() if start_socket else Point()
        self.end_point = end_socket.connection_point() if end_socket else self.start_point
        self.update_position()

    @property
    def line(self) -> tuple[Point, Point]:
        """Current start and end of the line in scene coordinates."""
        start = self.start_socket.connection_point() if self.start_socket else self.start_point
        end = self.end_socket.connection_point() if self.end_socket else self.end_point
        return start, end

    def update_position(self) -> None:
        """Refresh the stored end points from the sockets."""
        self.start_point, self.end_point = self.line

    def set_end_socket(self, end_socket: NodeSocket | None) -> None:
        """Attach the free end to a socket; None is ignored."""
        if end_socket is None:
            return
        self.end_socket = end_socket
        self.update_position()

    def set_end_point(self, point: PointLike) -> None:
        """Detach the end from any socket and put it at ``point``."""
        self.end_socket = None
        self.end_point = _to_point(point)
        self.update_position()

    def _anchors(self) -> tuple[Point, Point]:
        start, end = self.line
        return end + Point(6, 0), start - Point(6, 0)

    def path_points(self) -> list[Point]:
        """Vertices of the orthogonal path drawn from the end back to the start."""
        inp, out = self._anchors()
        if inp.y - 40 >= out.y:
            mid_y = (inp.y + out.y) / 2.0
            return [inp, Point(inp.x, mid_y), Point(out.x, mid_y), out]
        mid_x = (inp.x + out.x) / 2.0
        return [
            inp,
            Point(inp.x, inp.y - 30),
            Point(mid_x, inp.y - 30),
            Point(mid_x, out.y + 30),
            Point(out.x, out.y + 30),
            out,
        ]

    def arrow_points(self) -> tuple[Point, Point, Point]:
        """Triangle of the arrow head: tip at the end, base above it."""
        tip, _ = self._anchors()
        base = Point(tip.x, tip.y - 20)
        angle = math.pi / 3
        p1 = base + Point(math.sin(angle) * self.arrow_size, math.cos(angle) * self.arrow_size)
        p2 = base + Point(math.sin(-angle) * self.arrow_size, math.cos(-angle) * self.arrow_size)
        return tip, p1, p2