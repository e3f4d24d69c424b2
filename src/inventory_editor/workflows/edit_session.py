"""Client-side edit session for a single product form.

The session owns the uncommitted draft of a product: the title and quantity
being typed, whether the title is shown as text or as an edit control, and
the inline field errors. It validates with the same rules the store enforces
and hands finished drafts to a submitter.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional

import httpx
from loguru import logger

from ..data.records import (
    ExistingTarget,
    NewTarget,
    PageMode,
    ProductDetailPage,
    Target,
)
from ..errors import SessionClosedError, SubmissionRejected
from ..service.handlers import DELETE_INTENT, SAVE_INTENT
from ..validation.rules import (
    NO_ERRORS,
    FieldErrors,
    parse_quantity,
    quantity_is_valid,
    validate_product,
)

DELETE_CONFIRMATION = "Are you sure you want to delete this product?"

Submitter = Callable[[Target, Dict[str, str]], object]
Confirm = Callable[[str], bool]


class TitleMode(str, Enum):
    DISPLAY = "display"
    EDITING = "editing"


class SessionStatus(str, Enum):
    OPEN = "open"
    SUBMITTED = "submitted"


def _initial_title_mode(mode: PageMode) -> TitleMode:
    # A brand-new product has no saved title to display.
    return TitleMode.EDITING if mode is PageMode.NEW else TitleMode.DISPLAY


class EditSession:
    """Draft state for one product form, seeded from a loaded detail page."""

    def __init__(
        self,
        page: ProductDetailPage,
        submit: Submitter,
        confirm: Optional[Confirm] = None,
    ) -> None:
        self._submit = submit
        self._confirm = confirm or (lambda message: False)
        self._page = page
        self.title = page.product.title
        self.quantity = page.product.quantity
        self.title_mode = _initial_title_mode(page.mode)
        self.errors: FieldErrors = NO_ERRORS
        self.status = SessionStatus.OPEN

    @property
    def mode(self) -> PageMode:
        return self._page.mode

    @property
    def target(self) -> Target:
        if self._page.mode is PageMode.NEW:
            return NewTarget()
        return ExistingTarget(self._page.product.id)

    @property
    def title_editing(self) -> bool:
        return self.title_mode is TitleMode.EDITING

    @property
    def is_open(self) -> bool:
        return self.status is SessionStatus.OPEN

    def load(self, page: ProductDetailPage) -> None:
        """Re-seed from freshly loaded page data.

        Moving to a different product also restores the title mode and clears
        errors; reloading the same product only refreshes the draft values.
        """
        changed = (page.mode, page.product.id) != (self._page.mode, self._page.product.id)
        self._page = page
        self.title = page.product.title
        self.quantity = page.product.quantity
        self.status = SessionStatus.OPEN
        if changed:
            self.title_mode = _initial_title_mode(page.mode)
            self.errors = NO_ERRORS

    def on_title_changed(self, value: str) -> None:
        self._ensure_open()
        self.title = value
        if self.errors.title and value.strip():
            self.errors = FieldErrors(title="", quantity=self.errors.quantity)

    def on_quantity_changed(self, text: str) -> None:
        self._ensure_open()
        self.quantity = parse_quantity(text)
        if self.errors.quantity and quantity_is_valid(self.quantity):
            self.errors = FieldErrors(title=self.errors.title, quantity="")

    def enter_title_edit(self) -> None:
        self._ensure_open()
        if self.title_mode is TitleMode.DISPLAY:
            self.title_mode = TitleMode.EDITING

    def exit_title_edit(self) -> None:
        self._ensure_open()
        if self.mode is PageMode.EDIT and self.title_mode is TitleMode.EDITING:
            self.title_mode = TitleMode.DISPLAY

    def reset(self) -> None:
        self._ensure_open()
        self.title = self._page.product.title
        self.quantity = self._page.product.quantity
        self.errors = NO_ERRORS

    def save(self) -> bool:
        """Validate the draft and submit it; returns whether it was accepted."""
        self._ensure_open()
        self.errors = validate_product(self.title, self.quantity)
        if self.errors.any():
            return False
        return self._send(
            {"title": self.title, "quantity": str(self.quantity), "intent": SAVE_INTENT}
        )

    def delete(self) -> bool:
        self._ensure_open()
        if self.mode is not PageMode.EDIT:
            return False
        if not self._confirm(DELETE_CONFIRMATION):
            return False
        return self._send({"intent": DELETE_INTENT})

    def _send(self, payload: Dict[str, str]) -> bool:
        try:
            self._submit(self.target, payload)
        except SubmissionRejected as exc:
            if exc.errors is None:
                raise
            logger.info("Server rejected product {}: {}", self.target, exc.errors.to_dict())
            self.errors = exc.errors
            return False
        self.status = SessionStatus.SUBMITTED
        return True

    def _ensure_open(self) -> None:
        if self.status is not SessionStatus.OPEN:
            raise SessionClosedError("Edit session already submitted")


class HttpFormSubmitter:
    """Posts session payloads as form data to ``/products/{target}``.

    A redirect counts as success. A 422 answer is turned into
    :class:`SubmissionRejected` with the server's field errors; any other
    status is rejected without field errors.
    """

    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    def __call__(self, target: Target, payload: Dict[str, str]) -> str:
        response = self.client.post(
            f"/products/{target}",
            data=payload,
            headers={"Accept": "application/json"},
            follow_redirects=False,
        )
        if response.is_redirect:
            return response.headers["location"]
        if response.status_code == 422:
            errors = response.json().get("errors", {})
            raise SubmissionRejected(
                response.status_code,
                FieldErrors(
                    title=errors.get("title", ""),
                    quantity=errors.get("quantity", ""),
                ),
            )
        raise SubmissionRejected(response.status_code)
