"""
Exception hierarchy for infraview.

The analysis engines do not raise for unknown ids or exhausted bounds; these
errors surface at the edges: graph loading, argument resolution and config.
"""


class InfraviewError(Exception):
    """Base class for all infraview errors."""


class GraphLoadError(InfraviewError):
    """Raised when a graph payload cannot be read or decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load graph from {path}: {reason}")


class GraphNotFoundError(InfraviewError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Graph file not found: {path}")


class NodeNotFoundError(InfraviewError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class InvalidFilterError(InfraviewError):
    """Raised when filter options fail validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid filter '{field}': {message}")


class ConfigError(InfraviewError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration in {path}: {reason}")
