"""A set of named flows, each a scene with its view, plus a thumbnail map."""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Iterable, Sequence

from nodeflow.engine import FlowEngine
from nodeflow.items import Node, NodeConnection
from nodeflow.scene import NodeScene
from nodeflow.serializer import (
    FlowFormatError,
    SceneConnectionInfo,
    SceneData,
    SceneNodeInfo,
    load_from_file,
    save_to_file,
)
from nodeflow.view import NodeView, SceneMap

DEFAULT_FLOW_FILE = os.path.join(".", "solution", "app_params.json")
FIRST_FLOW_NAME = "节点编辑"
DEFAULT_NODE_TITLE = "节点"


class WorkspaceError(Exception):
    """Raised when a workspace operation is refused."""


@dataclass
class Flow:
    """One named flow: the scene holding its nodes and the view onto it."""

    name: str
    scene: NodeScene
    view: NodeView


class Workspace:
    """Named flows sharing one execution engine, with a map of the current one."""

    def __init__(self, engine: FlowEngine | None = None) -> None:
        self._resources = contextlib.ExitStack()
        if engine is None:
            engine = self._resources.enter_context(FlowEngine())
        self.engine = engine
        self.scene_map = SceneMap()
        self._flows: list[Flow] = [self._new_flow(FIRST_FLOW_NAME)]
        self.current_index = 0
        self._bind_map()

    def __enter__(self) -> Workspace:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the engine if the workspace created it."""
        self._resources.close()

    @property
    def flows(self) -> list[Flow]:
        """The flows in tab order."""
        return list(self._flows)

    @property
    def current(self) -> Flow:
        """The flow currently shown."""
        return self._flows[self.current_index]

    def _new_flow(self, name: str) -> Flow:
        scene = NodeScene(self.engine)
        return Flow(name, scene, NodeView(scene))

    def _bind_map(self) -> None:
        flow = self.current
        self.scene_map.bind_main_view(flow.scene.scene_rect, flow.view)

    def _resolve(self, index: int | None) -> int:
        if index is None:
            return self.current_index
        if not -len(self._flows) <= index < len(self._flows):
            raise IndexError(f"no flow at index {index}")
        return index % len(self._flows)

    def select_flow(self, index: int) -> Flow:
        """Make the flow at ``index`` current and point the map at it."""
        self.current_index = self._resolve(index)
        self._bind_map()
        return self.current

    def create_flow(self) -> Flow:
        """Append a new empty flow and make it current."""
        flow = self._new_flow(f"{FIRST_FLOW_NAME}_{len(self._flows)}")
        self._flows.append(flow)
        self.select_flow(len(self._flows) - 1)
        return flow

    def delete_flow(self, index: int | None = None) -> Flow:
        """Remove a flow, the current one by default; the last flow cannot go."""
        position = self._resolve(index)
        if len(self._flows) <= 1:
            raise WorkspaceError("at least one flow must remain")
        removed = self._flows.pop(position)
        if self.current_index > position or self.current_index >= len(self._flows):
            self.current_index -= 1
        self._bind_map()
        return removed

    def rename_flow(self, index: int, new_name: str) -> bool:
        """Rename a flow; an empty name is ignored, a name in use elsewhere is refused."""
        position = self._resolve(index)
        if not new_name:
            return False
        if any(i != position and flow.name == new_name for i, flow in enumerate(self._flows)):
            raise WorkspaceError(f"flow name already in use: {new_name!r}")
        self._flows[position].name = new_name
        return True

    def create_default_node(self, index: int | None = None) -> Node:
        """Add a default node at the centre of the flow's view."""
        flow = self._flows[self._resolve(index)]
        return flow.scene.create_node(DEFAULT_NODE_TITLE, flow.view.center)

    def delete_selected(
        self,
        index: int | None = None,
        nodes: Iterable[Node] | None = None,
        connections: Iterable[NodeConnection] | None = None,
    ) -> None:
        """Remove connections, then nodes, from a flow.

        When neither is given the selected items of the scene are removed.
        """
        scene = self._flows[self._resolve(index)].scene
        if nodes is None and connections is None:
            nodes = [node for node in scene.nodes if node.selected]
            connections = [conn for conn in scene.connections if conn.selected]
        for connection in list(connections or ()):
            scene.remove_connection(connection)
        for node in list(nodes or ()):
            scene.remove_node(node)

    def run_flow(self, index: int | None = None) -> Future | None:
        """Execute a flow; None if it has nothing to run."""
        return self._flows[self._resolve(index)].scene.execute_flow()

    def to_scene_data(self) -> list[SceneData]:
        """Snapshot of every flow in the stored document form."""
        result = []
        for flow in self._flows:
            data = SceneData(flow.name)
            for node in flow.scene.nodes:
                data.nodes.append(
                    SceneNodeInfo(node.id, node.title, (node.position.x, node.position.y))
                )
            for conn in flow.scene.connections:
                start = conn.start_socket.parent if conn.start_socket else None
                end = conn.end_socket.parent if conn.end_socket else None
                if isinstance(start, Node) and isinstance(end, Node):
                    data.connections.append(SceneConnectionInfo(start.id, end.id))
            result.append(data)
        return result

    def save_flow(self, file_path: str | os.PathLike = DEFAULT_FLOW_FILE) -> None:
        """Write every flow to a JSON document."""
        save_to_file(self.to_scene_data(), file_path)

    def load_flow(self, file_path: str | os.PathLike = DEFAULT_FLOW_FILE) -> int:
        """Replace all flows with those stored in a document.

        A document with no flows leaves the workspace unchanged. Returns the
        number of flows loaded.
        """
        scenes = load_from_file(file_path)
        if not scenes:
            return 0
        flows = []
        for data in scenes:
            flow = self._new_flow(data.tab_name)
            for info in data.nodes:
                flow.scene.create_node(info.title, info.position, node_id=info.id)
            for conn in data.connections:
                start = flow.scene.node(conn.start_node_id)
                end = flow.scene.node(conn.end_node_id)
                if start is None or end is None:
                    continue
                if start.output_socket is not None and end.input_socket is not None:
                    flow.scene.connect_sockets(start.output_socket, end.input_socket)
            flows.append(flow)
        self._flows = flows
        self.select_flow(len(flows) - 1)
        return len(flows)


def main(argv: Sequence[str] | None = None) -> int:
    """Load a flow document, list its flows and optionally run them."""
    parser = argparse.ArgumentParser(prog="nodeflow", description="Inspect and run node flows.")
    parser.add_argument("file", nargs="?", default=DEFAULT_FLOW_FILE, help="flow document")
    parser.add_argument("--run", action="store_true", help="execute every flow")
    args = parser.parse_args(argv)

    with FlowEngine() as engine, Workspace(engine) as workspace:
        try:
            count = workspace.load_flow(args.file)
        except (OSError, FlowFormatError) as exc:
            print(f"nodeflow: cannot load {args.file}: {exc}", file=sys.stderr)
            return 1
        if count == 0:
            print(f"nodeflow: no flows in {args.file}", file=sys.stderr)
            return 1
        for index, flow in enumerate(workspace.flows):
            scene = flow.scene
            print(f"{flow.name}: {len(scene.nodes)} nodes, {len(scene.connections)} connections")
            if not args.run:
                continue
            future = workspace.run_flow(index)
            statuses = future.result() if future is not None else {}
            for node in scene.nodes:
                status = statuses.get(node.id, node.status)
                print(f"  {node.label()}: {status.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())