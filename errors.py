from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds surfaced by the editor core."""
    NOT_FOUND = "not_found"
    DUPLICATE_EDGE = "duplicate_edge"
    PARENT_CONFLICT = "parent_conflict"
    CYCLE_REJECTED = "cycle_rejected"
    NO_SUCH_EDGE = "no_such_edge"
    EMPTY_HISTORY = "empty_history"
    INVALID_NODE_TYPE = "invalid_node_type"
    TERMINAL_UNAVAILABLE = "terminal_unavailable"
    IO_FAILURE = "io_failure"


class DecisionTreeError(Exception):
    """Base class for recoverable editor errors."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NodeNotFound(DecisionTreeError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, node_id: str, role: str = "node") -> None:
        super().__init__(f"{role} {node_id!r} not found")
        self.node_id = node_id


class DuplicateEdge(DecisionTreeError):
    kind = ErrorKind.DUPLICATE_EDGE

    def __init__(self, from_id: str, to_id: str) -> None:
        super().__init__(f"edge {from_id} -> {to_id} already exists")
        self.from_id = from_id
        self.to_id = to_id


class ParentConflict(DecisionTreeError):
    kind = ErrorKind.PARENT_CONFLICT

    def __init__(self, node_id: str, parent_id: str) -> None:
        super().__init__(f"node {node_id!r} already has parent {parent_id!r}")
        self.node_id = node_id
        self.parent_id = parent_id


class CycleRejected(DecisionTreeError):
    kind = ErrorKind.CYCLE_REJECTED

    def __init__(self, from_id: str, to_id: str) -> None:
        super().__init__(f"connecting {from_id} -> {to_id} would create a cycle")
        self.from_id = from_id
        self.to_id = to_id


class NoSuchEdge(DecisionTreeError):
    kind = ErrorKind.NO_SUCH_EDGE

    def __init__(self, from_id: str, to_id: str) -> None:
        super().__init__(f"no edge from {from_id} to {to_id}")
        self.from_id = from_id
        self.to_id = to_id


class EmptyHistory(DecisionTreeError):
    kind = ErrorKind.EMPTY_HISTORY

    def __init__(self, action: str) -> None:
        super().__init__(f"nothing to {action}")
        self.action = action


class InvalidNodeType(DecisionTreeError, ValueError):
    kind = ErrorKind.INVALID_NODE_TYPE

    def __init__(self, token: str) -> None:
        super().__init__(f"unknown node type: {token!r}")
        self.token = token


class TerminalUnavailable(DecisionTreeError):
    kind = ErrorKind.TERMINAL_UNAVAILABLE

    def __init__(self, reason: str) -> None:
        super().__init__(f"terminal unavailable: {reason}")
        self.reason = reason


class IOFailure(DecisionTreeError):
    kind = ErrorKind.IO_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"i/o failure: {reason}")
        self.reason = reason
