"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    ``errors`` maps field names to messages so callers can show them inline.
    """

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})

    @classmethod
    def from_fields(cls, errors: dict[str, str]) -> "ValidationError":
        """Build an error whose message lists every failing field."""
        summary = "; ".join(f"{field}: {message}" for field, message in errors.items())
        return cls(f"Invalid input ({summary})", errors)


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ProtectedEntityError(DomainError):
    """Operation refused because the entity is protected (e.g. default category)."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or stale versions."""


class StoreUnavailableError(DomainError):
    """The underlying record store failed or returned an unsuccessful response."""


def category_protected(name: str) -> str:
    """Return message for deleting a default category."""
    return f"Cannot delete default category '{name}'"


def duplicate_category(name: str, category_type: str) -> str:
    """Return message for duplicate category names within a type."""
    return f"Category '{name}' already exists for type '{category_type}'"


def duplicate_budget(category_id: int, month: str) -> str:
    """Return message for a second budget on the same category and month."""
    return f"A budget for category {category_id} in {month} already exists"


def stale_version(collection: str, record_id: int, expected: int, actual: int) -> str:
    """Return message for a failed compare-and-set."""
    return (
        f"Record {record_id} in '{collection}' was modified concurrently "
        f"(expected version {expected}, found {actual})"
    )
