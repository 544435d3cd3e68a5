"""
Domain exceptions.

Services raise these; ``storefront.api.errors`` turns them into HTTP responses.
"""

from typing import Iterable


class StorefrontError(Exception):
    """Base class for catalog and auth errors."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(StorefrontError):
    status_code = 409


class InvalidReferenceError(StorefrontError):
    """A foreign key points at a row that does not exist or belongs elsewhere in the tree."""

    status_code = 400


class EmptyUpdateError(StorefrontError):
    def __init__(self) -> None:
        super().__init__("No fields to update")


class UnknownFieldError(StorefrontError):
    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = sorted(fields)
        super().__init__(f"Unknown fields: {', '.join(self.fields)}")


class AuthenticationError(StorefrontError):
    status_code = 401
