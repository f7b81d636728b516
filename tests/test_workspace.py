import json
import random

import pytest

from nodeflow.engine import FlowEngine
from nodeflow.model import TaskStatus
from nodeflow.serializer import FlowFormatError
from nodeflow.workspace import Workspace, WorkspaceError, main


@pytest.fixture
def workspace():
    with FlowEngine(rng=random.Random(3), success_delay=0, failure_delay=0) as engine:
        with Workspace(engine) as ws:
            yield ws


def _linked_flow(ws):
    scene = ws.current.scene
    a = scene.create_node("a", (10.0, 20.0))
    b = scene.create_node("b", (200.0, 300.0))
    conn = scene.connect_sockets(a.output_socket, b.input_socket)
    return a, b, conn


def test_starts_with_one_flow(workspace):
    assert [f.name for f in workspace.flows] == ["节点编辑"]
    assert workspace.current_index == 0


def test_create_flow_names_and_selects(workspace):
    flow = workspace.create_flow()
    assert flow.name == "节点编辑_1"
    assert workspace.current_index == 1
    assert workspace.scene_map.view is flow.view
    assert workspace.scene_map.scene_rect == flow.scene.scene_rect


def test_cannot_delete_last_flow(workspace):
    with pytest.raises(WorkspaceError):
        workspace.delete_flow()
    assert len(workspace.flows) == 1


def test_delete_flow_adjusts_current(workspace):
    workspace.create_flow()
    removed = workspace.delete_flow()
    assert removed.name == "节点编辑_1"
    assert workspace.current_index == 0
    assert workspace.scene_map.view is workspace.current.view


def test_delete_flow_bad_index(workspace):
    workspace.create_flow()
    with pytest.raises(IndexError):
        workspace.delete_flow(5)


def test_rename_flow(workspace):
    workspace.create_flow()
    assert workspace.rename_flow(0, "main") is True
    assert workspace.flows[0].name == "main"
    assert workspace.rename_flow(0, "") is False
    assert workspace.flows[0].name == "main"
    with pytest.raises(WorkspaceError):
        workspace.rename_flow(1, "main")
    assert workspace.rename_flow(0, "main") is True


def test_create_default_node_at_view_centre(workspace):
    node = workspace.create_default_node()
    assert node.title == "节点"
    assert node.id == 0
    assert node.position == workspace.current.view.center


def test_delete_selected_explicit(workspace):
    a, b, conn = _linked_flow(workspace)
    workspace.delete_selected(nodes=[a], connections=[conn])
    scene = workspace.current.scene
    assert scene.nodes == [b]
    assert scene.connections == []
    assert b.input_socket.connected is False
    assert scene.graph.input_nodes(b.id) == []


def test_delete_selected_uses_selection(workspace):
    a, b, conn = _linked_flow(workspace)
    conn.selected = True
    workspace.delete_selected()
    scene = workspace.current.scene
    assert scene.connections == []
    assert scene.nodes == [a, b]
    assert scene.graph.output_nodes(a.id) == []


def test_save_load_round_trip(workspace, tmp_path):
    _linked_flow(workspace)
    workspace.create_flow()
    workspace.create_default_node()
    path = tmp_path / "flows.json"
    workspace.save_flow(path)
    before = workspace.to_scene_data()

    with FlowEngine(success_delay=0, failure_delay=0) as engine, Workspace(engine) as other:
        assert other.load_flow(path) == 2
        assert other.to_scene_data() == before
        assert other.current_index == 1
        assert other.scene_map.view is other.current.view
        first = other.flows[0].scene
        assert first.graph.output_nodes(0) == [1]
        assert first.node(1).input_socket.connected is True


def test_load_empty_document_keeps_flows(workspace, tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"Node": [], "Connection": []}), encoding="utf-8")
    workspace.create_flow()
    assert workspace.load_flow(path) == 0
    assert len(workspace.flows) == 2


def test_load_invalid_document(workspace, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(FlowFormatError):
        workspace.load_flow(path)


def test_load_skips_connections_to_missing_nodes(workspace, tmp_path):
    doc = {
        "Node": [{"t": [{"NodeId": {"id": 4}, "NodeTitle": {"title": "x"}, "NodePos": {"x": 1, "y": 2}}]}],
        "Connection": [{"t": [{"startNodeId": 4, "endNodeId": 9}]}],
    }
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    assert workspace.load_flow(path) == 1
    scene = workspace.current.scene
    assert [n.id for n in scene.nodes] == [4]
    assert scene.connections == []


def test_run_flow_finishes_every_node(workspace):
    a, b, _ = _linked_flow(workspace)
    future = workspace.run_flow()
    statuses = future.result(timeout=10)
    assert set(statuses) == {a.id, b.id}
    assert set(statuses.values()) <= {TaskStatus.COMPLETED, TaskStatus.FAILED}
    assert a.status == statuses[a.id]


def test_run_empty_flow(workspace):
    assert workspace.run_flow() is None


def test_main_lists_flows(tmp_path, capsys):
    with FlowEngine(success_delay=0, failure_delay=0) as engine, Workspace(engine) as ws:
        _linked_flow(ws)
        ws.rename_flow(0, "demo")
        path = tmp_path / "flows.json"
        ws.save_flow(path)
    assert main([str(path), "--run"]) == 0
    out = capsys.readouterr().out
    assert "demo: 2 nodes, 1 connections" in out
    assert "0 a:" in out


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.json")]) == 1
    assert "cannot load" in capsys.readouterr().err