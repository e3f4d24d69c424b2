from typing import Dict, List, Tuple

import pytest

from inventory_editor.data.records import (
    EMPTY_PRODUCT,
    ExistingTarget,
    NewTarget,
    PageMode,
    ProductDetailPage,
    ProductSummary,
    Target,
)
from inventory_editor.errors import SessionClosedError, SubmissionRejected
from inventory_editor.validation.rules import (
    MAX_QUANTITY,
    NO_ERRORS,
    QUANTITY_NEGATIVE,
    QUANTITY_TOO_LARGE,
    TITLE_REQUIRED,
    FieldErrors,
)
from inventory_editor.workflows.edit_session import (
    DELETE_CONFIRMATION,
    EditSession,
    SessionStatus,
    TitleMode,
)

WIDGET = ProductDetailPage(
    product=ProductSummary(id="abc", title="Widget", quantity=5), mode=PageMode.EDIT
)
GADGET = ProductDetailPage(
    product=ProductSummary(id="def", title="Gadget", quantity=2), mode=PageMode.EDIT
)
BLANK = ProductDetailPage(product=EMPTY_PRODUCT, mode=PageMode.NEW)


class RecordingSubmitter:
    def __init__(self) -> None:
        self.calls: List[Tuple[Target, Dict[str, str]]] = []

    def __call__(self, target: Target, payload: Dict[str, str]) -> str:
        self.calls.append((target, payload))
        return "/"


@pytest.fixture()
def submitter() -> RecordingSubmitter:
    return RecordingSubmitter()


def test_title_mode_defaults_follow_page_mode(submitter: RecordingSubmitter) -> None:
    assert EditSession(BLANK, submitter).title_mode is TitleMode.EDITING
    assert EditSession(WIDGET, submitter).title_mode is TitleMode.DISPLAY
    assert EditSession(WIDGET, submitter).title_editing is False


def test_title_edit_toggle_in_edit_mode(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)

    session.enter_title_edit()
    assert session.title_editing
    session.enter_title_edit()
    assert session.title_editing
    session.exit_title_edit()
    assert session.title_mode is TitleMode.DISPLAY


def test_new_mode_title_never_leaves_editing(submitter: RecordingSubmitter) -> None:
    session = EditSession(BLANK, submitter)

    session.exit_title_edit()

    assert session.title_editing


def test_save_with_blank_title_shows_error_and_does_not_submit(
    submitter: RecordingSubmitter,
) -> None:
    session = EditSession(BLANK, submitter)

    assert session.save() is False

    assert session.errors.title == TITLE_REQUIRED
    assert submitter.calls == []
    assert session.is_open

    session.on_title_changed("Widget")
    assert session.errors.title == ""


def test_title_error_stays_while_value_is_blank(submitter: RecordingSubmitter) -> None:
    session = EditSession(BLANK, submitter)
    session.save()

    session.on_title_changed("   ")

    assert session.errors.title == TITLE_REQUIRED


def test_quantity_error_clears_once_non_negative(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.on_quantity_changed("-4")
    assert session.quantity == -4

    assert session.save() is False
    assert session.errors == FieldErrors(title="", quantity=QUANTITY_NEGATIVE)

    session.on_quantity_changed("-1")
    assert session.errors.quantity == QUANTITY_NEGATIVE
    session.on_quantity_changed("3")
    assert session.errors == NO_ERRORS


def test_oversized_quantity_blocks_save_until_fixed(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.on_quantity_changed(str(MAX_QUANTITY + 1))

    assert session.save() is False
    assert session.errors.quantity == QUANTITY_TOO_LARGE
    assert submitter.calls == []

    session.on_quantity_changed(str(MAX_QUANTITY))
    assert session.errors == NO_ERRORS


def test_lenient_quantity_parse(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)

    session.on_quantity_changed("abc")

    assert session.quantity == 0
    assert session.errors == NO_ERRORS


def test_save_submits_draft_and_closes(submitter: RecordingSubmitter) -> None:
    session = EditSession(BLANK, submitter)
    session.on_title_changed("Widget")
    session.on_quantity_changed("5")

    assert session.save() is True

    assert submitter.calls == [
        (NewTarget(), {"title": "Widget", "quantity": "5", "intent": "save"})
    ]
    assert session.status is SessionStatus.SUBMITTED
    with pytest.raises(SessionClosedError):
        session.on_title_changed("Other")


def test_save_targets_existing_product(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.on_quantity_changed("8")

    session.save()

    assert submitter.calls[0][0] == ExistingTarget("abc")
    assert submitter.calls[0][1]["quantity"] == "8"


def test_reset_restores_loaded_values(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.enter_title_edit()
    for value in ("", "W", "Wid", "  "):
        session.on_title_changed(value)
    for text in ("-2", "x", "40"):
        session.on_quantity_changed(text)
    session.on_quantity_changed("-9")
    session.save()
    assert session.errors.any()

    session.reset()
    session.reset()

    assert (session.title, session.quantity) == ("Widget", 5)
    assert session.errors == NO_ERRORS
    assert session.title_editing
    assert submitter.calls == []


def test_delete_requires_confirmation(submitter: RecordingSubmitter) -> None:
    prompts: List[str] = []

    def decline(message: str) -> bool:
        prompts.append(message)
        return False

    session = EditSession(WIDGET, submitter, confirm=decline)
    session.on_title_changed("Changed")

    assert session.delete() is False

    assert prompts == [DELETE_CONFIRMATION]
    assert submitter.calls == []
    assert session.title == "Changed"
    assert session.is_open


def test_confirmed_delete_submits_intent(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter, confirm=lambda message: True)

    assert session.delete() is True

    assert submitter.calls == [(ExistingTarget("abc"), {"intent": "delete"})]
    assert not session.is_open


def test_delete_is_unavailable_for_new_products(submitter: RecordingSubmitter) -> None:
    session = EditSession(BLANK, submitter, confirm=lambda message: True)

    assert session.delete() is False
    assert submitter.calls == []


def test_loading_another_product_resets_to_defaults(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.enter_title_edit()
    session.on_title_changed("")
    session.save()

    session.load(GADGET)

    assert (session.title, session.quantity) == ("Gadget", 2)
    assert session.title_mode is TitleMode.DISPLAY
    assert session.errors == NO_ERRORS

    session.load(BLANK)
    assert session.title_editing
    assert session.target == NewTarget()


def test_reloading_same_product_keeps_ui_state(submitter: RecordingSubmitter) -> None:
    session = EditSession(WIDGET, submitter)
    session.enter_title_edit()
    refreshed = ProductDetailPage(
        product=ProductSummary(id="abc", title="Widget v2", quantity=6), mode=PageMode.EDIT
    )

    session.load(refreshed)

    assert (session.title, session.quantity) == ("Widget v2", 6)
    assert session.title_editing
    session.on_title_changed("scratch")
    session.reset()
    assert session.title == "Widget v2"


def test_server_rejection_keeps_session_open() -> None:
    def reject(target: Target, payload: Dict[str, str]) -> str:
        raise SubmissionRejected(422, FieldErrors(title=TITLE_REQUIRED))

    session = EditSession(WIDGET, reject)

    assert session.save() is False

    assert session.errors.title == TITLE_REQUIRED
    assert session.is_open
    assert session.title == "Widget"


def test_unexpected_rejection_propagates() -> None:
    def fail(target: Target, payload: Dict[str, str]) -> str:
        raise SubmissionRejected(404)

    session = EditSession(WIDGET, fail, confirm=lambda message: True)

    with pytest.raises(SubmissionRejected):
        session.delete()
    assert session.is_open
