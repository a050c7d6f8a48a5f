"""Error taxonomy shared by models, services and storage."""

from __future__ import annotations


class VisionBoardError(Exception):
    """Base class for all visionboard errors."""


class InvalidInput(VisionBoardError, ValueError):
    """A required field is missing or a value is out of its allowed range."""


class IndexOutOfRange(VisionBoardError, IndexError):
    """A stage, task or list-entry index does not exist."""

    def __init__(self, kind: str, index: int, size: int) -> None:
        super().__init__(f"{kind} index {index} out of range (0..{size - 1})")
        self.kind = kind
        self.index = index
        self.size = size


class NotFound(VisionBoardError, LookupError):
    """No entity with the requested id exists."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class StorageFailure(VisionBoardError):
    """The entity store rejected a call. Never retried."""
