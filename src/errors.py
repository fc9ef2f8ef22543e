"""
Error Taxonomy

Every failure the engine surfaces is one of these. Each carries enough
structure to be rendered as an error payload by whatever front-end calls
the engine, so callers never have to parse message strings.

Propagation rules:
- ValidationError / NotFoundError are raised locally and immediately.
- StoreUnavailableError is never retried here; the caller re-issues.
- RenderError means no bytes were produced at all.
"""

from typing import Any, Optional


class FinanceError(Exception):
    """Base class for all engine errors."""

    code = "finance_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Structured error message for the caller."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FinanceError):
    """Malformed or missing input. Carries one issue per offending field."""

    code = "validation_error"

    def __init__(self, issues: list, message: str = "Invalid input"):
        self.issues = list(issues)
        super().__init__(
            message,
            details={"issues": [issue.model_dump() for issue in self.issues]},
        )

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


class NotFoundError(FinanceError):
    """Entity absent, or not owned by the requesting user."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity.capitalize()} not found",
            details={"entity": entity, "id": str(entity_id)},
        )
        self.entity = entity
        self.entity_id = entity_id


class StorageError(FinanceError):
    """Base exception for storage operations."""

    code = "storage_error"


class StoreUnavailableError(StorageError):
    """Could not reach the storage backend."""

    code = "store_unavailable"


class RenderError(FinanceError):
    """An export could not be constructed."""

    code = "render_error"
