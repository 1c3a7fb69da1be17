"""Exceptions raised by gl-enforcer."""

from typing import Any


class ConfigError(Exception):
    pass


class NotFoundError(Exception):
    pass


class GroupNotFoundError(NotFoundError):
    def __init__(self, path: str, segment: Any = None) -> None:
        msg = f"group not found: {path}"
        if segment is not None and segment != path:
            msg += f" (no match for '{segment}')"
        super().__init__(msg)
        self.path = path
        self.segment = segment


class ReconcileError(Exception):
    """A failure reconciling one project. The run continues with the next project."""


class DeliveryError(Exception):
    def __init__(self, msg: Any) -> None:
        super().__init__("failed to deliver email: " + str(msg))
