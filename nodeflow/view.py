"""A zoomable, pannable view onto a scene and a thumbnail map of it."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from nodeflow.items import Point, PointLike, Rect, _to_point

if TYPE_CHECKING:
    from nodeflow.scene import NodeScene


class NodeView:
    """A viewport of fixed pixel size looking at part of a scene."""

    zoom_factor = 1.1
    grid_spacing = 30

    def __init__(
        self,
        scene: NodeScene | None = None,
        viewport_width: float = 800,
        viewport_height: float = 600,
    ) -> None:
        self.scene = scene
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.zoom_level = 1.0
        self.scale_factor = 1.0
        self.center = scene.scene_rect.center if scene is not None else Point()

    def zoom(self, delta: float) -> float:
        """Zoom in for a positive wheel delta, otherwise out; return the zoom level."""
        if delta > 0:
            self.zoom_level *= 1.1
            self.scale_factor *= self.zoom_factor
        else:
            self.zoom_level *= 0.9
            self.scale_factor /= self.zoom_factor
        return self.zoom_level

    def pan(self, dx: float, dy: float) -> None:
        """Drag the content by ``dx``, ``dy`` viewport pixels."""
        self.center = self.center - Point(dx / self.scale_factor, dy / self.scale_factor)

    def center_on(self, point: PointLike) -> None:
        """Put ``point`` at the middle of the viewport."""
        self.center = _to_point(point)

    def visible_scene_rect(self) -> Rect:
        """The part of the scene the viewport shows."""
        width = self.viewport_width / self.scale_factor
        height = self.viewport_height / self.scale_factor
        return Rect(self.center.x - width / 2, self.center.y - height / 2, width, height)


def grid_lines(rect: Rect, spacing: int = NodeView.grid_spacing) -> list[tuple[Point, Point]]:
    """Background grid segments covering ``rect``: vertical lines first, then horizontal."""
    left = math.floor(rect.left)
    right = math.ceil(rect.right)
    top = math.floor(rect.top)
    bottom = math.ceil(rect.bottom)
    vertical = [(Point(x, top), Point(x, bottom)) for x in range(left, right + 1, spacing)]
    horizontal = [(Point(left, y), Point(right, y)) for y in range(top, bottom + 1, spacing)]
    return vertical + horizontal


class SceneMap:
    """A thumbnail of a scene showing and steering the main view's viewport."""

    refresh_interval = 0.03

    def __init__(self, thumb_width: float = 200, thumb_height: float = 200) -> None:
        self.thumb_width = thumb_width
        self.thumb_height = thumb_height
        self.scene_rect: Rect | None = None
        self.view: NodeView | None = None
        self.dragging = False

    def bind_main_view(self, scene_rect: Rect | None, view: NodeView | None) -> None:
        """Follow ``view`` over a scene of extent ``scene_rect``; ignored if either is missing."""
        if scene_rect is None or view is None:
            return
        self.scene_rect = scene_rect
        self.view = view

    def set_thumbnail_size(self, width: float, height: float) -> None:
        """Change the size of the thumbnail."""
        self.thumb_width = width
        self.thumb_height = height

    def _ready(self) -> bool:
        return self.scene_rect is not None and self.view is not None and not self.scene_rect.is_empty()

    def scale(self) -> float:
        """Ratio of thumbnail size to scene size, keeping the aspect ratio."""
        if self.scene_rect is None:
            raise ValueError("no scene is bound")
        if self.scene_rect.is_empty():
            raise ValueError("scene rectangle is empty")
        return min(self.thumb_width / self.scene_rect.width, self.thumb_height / self.scene_rect.height)

    def viewport_rect(self) -> Rect:
        """The main view's visible area in thumbnail coordinates; empty when unbound."""
        if not self._ready():
            return Rect(0, 0, 0, 0)
        visible = self.view.visible_scene_rect()
        s = self.scale()
        return Rect(visible.x * s, visible.y * s, visible.width * s, visible.height * s)

    def _center_view(self, x: float, y: float) -> None:
        s = self.scale()
        self.view.center_on(Point(x / s, y / s))

    def press(self, x: float, y: float) -> bool:
        """Click at a thumbnail point.

        Inside the viewport frame this starts a drag and returns True; elsewhere
        the main view is centred on the matching scene point.
        """
        if not self._ready():
            return False
        if self.viewport_rect().contains(Point(x, y)):
            self.dragging = True
            return True
        self._center_view(x, y)
        return False

    def drag(self, x: float, y: float) -> None:
        """Move the main view while a drag is in progress."""
        if not self.dragging or not self._ready():
            return
        self._center_view(x, y)

    def release(self) -> None:
        """End a drag."""
        self.dragging = False