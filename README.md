# nodeflow

nodeflow models a node-based flow editor.

- A flow is made of nodes. Each node has one input socket and one output socket.
- A connection joins one node's output to another node's input.
- The graph behind a flow never holds a cycle.
- Running a flow executes its nodes on a thread pool in dependency order. Each node is a simulated task that succeeds or fails at random.
- Flows can be saved to a JSON document and loaded back.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `nodeflow.model`

- `TaskStatus` is an enum with the members `NOT_STARTED`, `RUNNING`, `COMPLETED`, `FAILED` and `JUMP`.
- `NodeData` is a node record. It has the fields `id`, `title`, `status`, `input_ids` and `output_ids`.
- `Task(task_id, on_complete, success_delay=0.2, failure_delay=0.5)` is a simulated unit of work. Calling `run()` waits and then reports the outcome:
  - A non-negative `task_id` waits `success_delay` seconds and then calls `on_complete(True)`.
  - A negative `task_id` waits `failure_delay` seconds and then calls `on_complete(False)`.

### `nodeflow.graph`

`NodeGraph` is a directed graph of `NodeData`, keyed by id. It supports `len()` and `in`.

Changing the graph:

- `add_node` returns the existing node when the id is already taken.
- `remove_node` also drops every link to or from the node.
- `connect_nodes(output_id, input_id)` returns `False` and changes nothing in any of these cases:
  - the link would join a node to itself;
  - the link already exists;
  - a node is unknown;
  - the link would close a cycle.
- `disconnect_nodes` removes a link.
- `clear` removes every node.

Querying the graph:

- `can_connect` applies the same checks as `connect_nodes`, except the cycle check.
- `has_cycle` reports whether the links contain a directed cycle.
- `topological_sort` returns the node ids in dependency order. It starts from the nodes with no inputs, taken in ascending id order. It returns an empty list if the graph has a cycle.
- `node`, `all_nodes`, `input_nodes` and `output_nodes` look up nodes and links.

Status:

- `set_node_status` and `node_status` hold each node's `TaskStatus`. An unknown id reads as `NOT_STARTED`.
- Callbacks registered with `add_status_listener(callback)` are called as `callback(node_id, status)` on every change.

### `nodeflow.engine`

`FlowEngine(rng=None, max_workers=None, success_delay=0.2, failure_delay=0.5)` runs graphs on a `ThreadPoolExecutor`. It is a context manager, and leaving the `with` block shuts the pool down.

`execute(graph)` does the following:

1. It resets every node to `NOT_STARTED`.
2. It starts each node that has no inputs.
3. It starts any other node once all of that node's inputs are `COMPLETED` or `FAILED`.

A node's outcome comes from a random integer in the range -10 to 10. A negative value means failure. `execute` returns a `concurrent.futures.Future`. The future resolves to a dict that maps each node id to its final status. Status listeners are called from worker threads.

### `nodeflow.items`

This module holds the geometry of a flow:

- `Point` and `Rect` are plain geometry values.
- `SocketType` has the members `INPUT` and `OUTPUT`.
- `NodeSocket` gives `bounding_rect()`, `scene_pos()` and `connection_point()`.
- `Node` is a box at least 120 units wide.
  - `add_input_socket` and `add_output_socket` create its sockets.
  - `bounding_rect()` and `scene_rect()` give its area.
  - `move_to(position)` moves it.
  - `auto_align(others)` snaps it to the left or top edge of another node within 5 units. It records guide lines in `left_guide` and `top_guide`.
  - `label()` returns `"<id> <title>"`.
- `NodeConnection` is a line from a start socket to an end socket or to a free point.
  - `set_end_socket` and `set_end_point` attach or move its free end.
  - `update_position` refreshes it after a node moves.
  - `path_points()` gives the vertices of its orthogonal path.
  - `arrow_points()` gives the arrow head.

### `nodeflow.scene`

`NodeScene(engine=None)` keeps the items of one flow and its `NodeGraph` in step.

- `create_node(title, position, node_id=None)` adds a node. Without `node_id` it takes the smallest id not in use.
- `node(node_id)` looks up a node.
- `remove_node` removes a node together with every connection attached to it.
- `remove_connection` removes a connection.
- `can_connect` and `connect_sockets` join an output socket to an input socket. They accept the two sockets in either order. `connect_sockets` returns `None` when the link is refused.
- `begin_connection`, `drag_connection` and `finish_connection` handle a connection being dragged out of a socket. `finish_connection(None)` cancels the drag.
- `execute_flow()` resets every node and then runs the flow through the engine. It returns the engine's future, or `None` when the graph has nothing to run.

While a flow runs, each node's `status` is updated. Its `result_color` turns green when the node completes and red when it fails.

### `nodeflow.view`

- `NodeView(scene, viewport_width=800, viewport_height=600)` is a viewport onto a scene.
  - `zoom(delta)` zooms in for a positive delta and out otherwise.
  - `pan`, `center_on` and `visible_scene_rect` move the view and report what it shows.
- `grid_lines(rect, spacing=30)` returns the segments of the background grid.
- `SceneMap(thumb_width=200, thumb_height=200)` is a thumbnail of a scene.
  - `scale()` gives the thumbnail's scale.
  - `viewport_rect()` gives the main view's frame in thumbnail coordinates.
  - `press`, `drag` and `release` steer the bound view.

### `nodeflow.serializer`

`load_from_file(path)` and `save_to_file(scenes, path)` read and write lists of `SceneData`. Each `SceneData` holds `SceneNodeInfo` and `SceneConnectionInfo` records.

Loading raises `OSError` when the file cannot be read. It raises `FlowFormatError` when any of these holds:

- the text is not JSON;
- the JSON is not an object;
- a tab entry is empty.

### `nodeflow.workspace`

`Workspace(engine=None)` manages several named flows. Each flow is a `Flow` with a `name`, a `scene` and a `view`. A `SceneMap` follows the current flow.

- `create_flow` adds a flow.
- `select_flow` makes a flow current.
- `rename_flow` renames a flow. A name already in use elsewhere raises `WorkspaceError`.
- `delete_flow` removes a flow. Removing the last flow raises `WorkspaceError`.
- `create_default_node` adds a node to a flow.
- `delete_selected` removes nodes and connections.
- `run_flow` runs a flow.
- `to_scene_data`, `save_flow(path)` and `load_flow(path)` convert and store the whole workspace. The default path is `./solution/app_params.json`. Loading a document that holds no flows leaves the workspace unchanged.

## Example

```python
from nodeflow.engine import FlowEngine
from nodeflow.items import Point
from nodeflow.scene import NodeScene

with FlowEngine() as engine:
    scene = NodeScene(engine)
    a = scene.create_node("load", Point(0, 0))
    b = scene.create_node("process", Point(0, 120))
    scene.connect_sockets(a.output_socket, b.input_socket)
    print(scene.topological_sort())      # [0, 1]
    statuses = scene.execute_flow().result()
    print(statuses)                      # e.g. {0: TaskStatus.COMPLETED, 1: TaskStatus.FAILED}
```

## Command line

```
nodeflow [FILE] [--run]
```

The command loads a flow document. `FILE` defaults to `./solution/app_params.json`. It prints each flow's name with its node and connection counts. With `--run` it also executes every flow and prints each node's final status.

It exits with status 1 in either of these cases:

- the document cannot be loaded;
- the document holds no flows.

## File format

The file is a JSON object with two arrays.

- `"Node"` holds one object per flow, keyed by the flow's tab name. Each node in it is stored as:
  - `NodeId.id`
  - `NodeTitle.title`
  - `NodePos.x` and `NodePos.y`
- `"Connection"` holds, for each tab name, a list of links. Each link has:
  - `startNodeId`
  - `endNodeId`
  - `inPortIndex` and `outPortIndex`, always written as 0.

When loading, connections listed under a tab name with no matching node entry are skipped.

## What it does not do

nodeflow has no graphical editor and draws nothing. It offers no window, no painting, and no mouse or keyboard handling. Nodes, sockets, connections, views and the scene map provide the geometry and the state an editor would need. Showing them on screen is left to the caller.