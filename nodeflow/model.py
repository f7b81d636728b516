"""Core data types shared by the flow graph and its execution engine."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class TaskStatus(Enum):
    """Execution state of a single node in a flow."""

    NOT_STARTED = 0
    RUNNING = 1
    COMPLETED = 2
    FAILED = 3
    JUMP = 4


@dataclass
class NodeData:
    """A node of the flow graph with its incoming and outgoing links."""

    id: int
    title: str
    status: TaskStatus = TaskStatus.NOT_STARTED
    input_ids: list[int] = field(default_factory=list)
    output_ids: list[int] = field(default_factory=list)


class Task:
    """A simulated unit of work.

    A non-negative ``task_id`` succeeds after ``success_delay`` seconds; a
    negative one fails after ``failure_delay`` seconds. The outcome is passed
    to ``on_complete`` as a boolean.
    """

    def __init__(
        self,
        task_id: int,
        on_complete: Callable[[bool], None],
        success_delay: float = 0.2,
        failure_delay: float = 0.5,
    ) -> None:
        self.task_id = task_id
        self._on_complete = on_complete
        self._success_delay = success_delay
        self._failure_delay = failure_delay

    def run(self) -> None:
        """Wait for the simulated duration, then report the outcome."""
        succeeded = self.task_id >= 0
        time.sleep(self._success_delay if succeeded else self._failure_delay)
        self._on_complete(succeeded)