"""Reading and writing flow documents as JSON."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Iterable


class FlowFormatError(ValueError):
    """Raised when a flow document is not in the expected format."""


@dataclass
class SceneNodeInfo:
    """A node as stored in a flow document."""

    id: int
    title: str
    position: tuple[float, float] = (0.0, 0.0)


@dataclass
class SceneConnectionInfo:
    """A link between two nodes as stored in a flow document."""

    start_node_id: int
    end_node_id: int


@dataclass
class SceneData:
    """One flow tab: its name, nodes and connections."""

    tab_name: str
    nodes: list[SceneNodeInfo] = field(default_factory=list)
    connections: list[SceneConnectionInfo] = field(default_factory=list)


def _as_object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_array(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _tab_entry(value: Any) -> tuple[str, list]:
    tab = _as_object(value)
    if not tab:
        raise FlowFormatError("flow tab entry has no name")
    name = min(tab)
    return name, _as_array(tab[name])


def load_from_file(file_path: str | os.PathLike) -> list[SceneData]:
    """Load all flow tabs from a JSON document.

    Raises OSError if the file cannot be read and FlowFormatError if it is not
    a JSON object or a tab entry is empty.
    """
    with open(file_path, encoding="utf-8") as handle:
        text = handle.read()
    try:
        root = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FlowFormatError(f"invalid JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise FlowFormatError("flow document must be a JSON object")

    scenes: list[SceneData] = []
    for entry in _as_array(root.get("Node")):
        name, nodes = _tab_entry(entry)
        scene = SceneData(name)
        for raw in nodes:
            node = _as_object(raw)
            pos = _as_object(node.get("NodePos"))
            scene.nodes.append(
                SceneNodeInfo(
                    id=_as_int(_as_object(node.get("NodeId")).get("id")),
                    title=_as_str(_as_object(node.get("NodeTitle")).get("title")),
                    position=(_as_float(pos.get("x")), _as_float(pos.get("y"))),
                )
            )
        scenes.append(scene)

    for entry in _as_array(root.get("Connection")):
        name, connections = _tab_entry(entry)
        scene = next((s for s in scenes if s.tab_name == name), None)
        if scene is None:
            continue
        for raw in connections:
            conn = _as_object(raw)
            scene.connections.append(
                SceneConnectionInfo(
                    start_node_id=_as_int(conn.get("startNodeId")),
                    end_node_id=_as_int(conn.get("endNodeId")),
                )
            )
    return scenes


def save_to_file(scenes: Iterable[SceneData], file_path: str | os.PathLike) -> None:
    """Write flow tabs to a JSON document, replacing any existing file."""
    node_tabs = []
    connection_tabs = []
    for scene in scenes:
        node_tabs.append(
            {
                scene.tab_name: [
                    {
                        "NodeId": {"id": info.id},
                        "NodeTitle": {"title": info.title},
                        "NodePos": {"x": float(info.position[0]), "y": float(info.position[1])},
                    }
                    for info in scene.nodes
                ]
            }
        )
        connection_tabs.append(
            {
                scene.tab_name: [
                    {
                        "startNodeId": info.start_node_id,
                        "inPortIndex": 0,
                        "endNodeId": info.end_node_id,
                        "outPortIndex": 0,
                    }
                    for info in scene.connections
                ]
            }
        )
    root = {"Node": node_tabs, "Connection": connection_tabs}
    text = json.dumps(root, indent=4, sort_keys=True, ensure_ascii=False)
    with open(file_path, "w", encoding="utf-8") as handle:
        handle.write(text + "\n")