"""Exceptions raised across the inventory editor."""
from __future__ import annotations

from typing import Optional

from .validation.rules import FieldErrors


class InventoryError(Exception):
    """Base class for inventory editor failures."""


class ProductNotFound(InventoryError):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id!r}")
        self.product_id = product_id


class ProductValidationError(InventoryError):
    """A product write was refused because a field breaks the record invariants."""

    def __init__(self, errors: FieldErrors) -> None:
        messages = [message for message in (errors.title, errors.quantity) if message]
        super().__init__("; ".join(messages) or "Invalid product")
        self.errors = errors


class StoreClosedError(InventoryError):
    """The product store was used outside its open/close lifecycle."""


class SessionClosedError(InventoryError):
    """The edit session already submitted and can no longer change."""


class SubmissionRejected(InventoryError):
    """The server answered a form submission with something other than a redirect."""

    def __init__(self, status_code: int, errors: Optional[FieldErrors] = None) -> None:
        super().__init__(f"Submission rejected with status {status_code}")
        self.status_code = status_code
        self.errors = errors
