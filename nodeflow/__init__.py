"""Node flows: cycle-free graphs, canvas geometry, concurrent execution and JSON persistence."""

__version__ = "0.1.0"

__all__ = ["engine", "graph", "items", "model", "scene", "serializer", "view", "workspace"]