"""
Exception hierarchy for the repository layer.

All repository exceptions inherit from RepositoryError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (entity name, offending argument or value) for logging/debugging.

Store-level failures (``sqlalchemy.exc.*``) are never wrapped; they reach
the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.entity = entity
        self.details = details or {}
        super().__init__(message)


class InvalidArgumentError(RepositoryError, ValueError):
    """A structurally invalid argument: missing entity, non-positive id, blank email."""

    def __init__(self, message: str, *, argument: str | None = None, **kwargs) -> None:
        self.argument = argument
        super().__init__(message, **kwargs)


class ConflictError(RepositoryError):
    """A uniqueness rule would be violated."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, **kwargs)


class NotFoundError(RepositoryError, LookupError):
    """An update targets an entity, or references one, that does not exist."""

    def __init__(self, message: str, *, entity_id: Any = None, **kwargs) -> None:
        self.entity_id = entity_id
        super().__init__(message, **kwargs)
