"""Read and write handlers for the product list and product form pages.

These functions hold the page protocol independent of the web framework: the
read side decides between a synthetic blank product and a stored one, and the
write side interprets a submitted intent and reports where the request ended.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Mapping, Optional

from loguru import logger

from ..data.records import (
    EMPTY_PRODUCT,
    ExistingTarget,
    NewTarget,
    PageMode,
    ProductDetailPage,
    ProductListPage,
    ProductSummary,
    Target,
)
from ..errors import ProductNotFound, ProductValidationError
from ..validation.rules import NO_ERRORS, FieldErrors, parse_quantity

if TYPE_CHECKING:
    from .product_store import ProductStore

DELETE_INTENT = "delete"
SAVE_INTENT = "save"
LIST_URL = "/"


def load_product_list(store: "ProductStore") -> ProductListPage:
    return ProductListPage(products=store.list_all())


def load_product_detail(store: "ProductStore", target: Target) -> ProductDetailPage:
    """Return the data for a product form.

    A new target is answered with a blank product without consulting the
    store. Unknown ids raise :class:`ProductNotFound`.
    """
    if isinstance(target, NewTarget):
        return ProductDetailPage(product=EMPTY_PRODUCT, mode=PageMode.NEW)
    try:
        record = store.get_by_id(target.product_id)
    except ProductNotFound:
        logger.warning("Product {} requested but not found", target.product_id)
        raise
    return ProductDetailPage(product=record.summary(), mode=PageMode.EDIT)


@dataclass(frozen=True)
class Submission:
    intent: str
    title: str
    quantity: int

    @classmethod
    def from_form(cls, form: Mapping[str, object]) -> "Submission":
        """Build a submission from raw form fields; a bad quantity becomes 0."""
        intent = form.get("intent")
        title = form.get("title")
        return cls(
            intent=str(intent) if intent is not None else SAVE_INTENT,
            title=str(title) if title is not None else "",
            quantity=parse_quantity(form.get("quantity")),
        )

    @property
    def is_delete(self) -> bool:
        return self.intent == DELETE_INTENT


class WriteState(str, Enum):
    REDIRECT_LIST = "redirect_list"
    NOT_FOUND = "not_found"
    INVALID = "invalid"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    WriteState.REDIRECT_LIST: 303,
    WriteState.NOT_FOUND: 404,
    WriteState.INVALID: 422,
}


@dataclass(frozen=True)
class WriteOutcome:
    state: WriteState
    target: Target
    redirect_to: Optional[str] = None
    errors: FieldErrors = NO_ERRORS
    submitted: Optional[ProductSummary] = None

    @property
    def ok(self) -> bool:
        return self.state is WriteState.REDIRECT_LIST


def apply_submission(
    store: "ProductStore", target: Target, submission: Submission
) -> WriteOutcome:
    """Delete or save a product and report the terminal state of the request.

    Validation failures come back as an ``INVALID`` outcome carrying the field
    errors and the submitted values so the form can be shown again.
    """
    if submission.is_delete:
        return _delete(store, target)
    return _save(store, target, submission)


def _delete(store: "ProductStore", target: Target) -> WriteOutcome:
    if not isinstance(target, ExistingTarget):
        logger.warning("Delete requested for a product that was never saved")
        return WriteOutcome(state=WriteState.NOT_FOUND, target=target)
    try:
        store.delete(target.product_id)
    except ProductNotFound:
        logger.warning("Delete requested for missing product {}", target.product_id)
        return WriteOutcome(state=WriteState.NOT_FOUND, target=target)
    return WriteOutcome(state=WriteState.REDIRECT_LIST, target=target, redirect_to=LIST_URL)


def _save(store: "ProductStore", target: Target, submission: Submission) -> WriteOutcome:
    submitted = ProductSummary(
        id=target.product_id if isinstance(target, ExistingTarget) else "",
        title=submission.title,
        quantity=submission.quantity,
    )
    try:
        store.upsert(target, submission.title, submission.quantity)
    except ProductValidationError as exc:
        logger.warning("Rejected product {} submission: {}", target, exc)
        return WriteOutcome(
            state=WriteState.INVALID,
            target=target,
            errors=exc.errors,
            submitted=submitted,
        )
    except ProductNotFound:
        logger.warning("Save requested for missing product {}", target)
        return WriteOutcome(state=WriteState.NOT_FOUND, target=target)
    return WriteOutcome(state=WriteState.REDIRECT_LIST, target=target, redirect_to=LIST_URL)
