"""Field rules shared by the edit session and the product store."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, Optional

TITLE_REQUIRED = "Title is required"
QUANTITY_NEGATIVE = "Quantity cannot be negative"
QUANTITY_TOO_LARGE = "Quantity is too large"

# Largest value a 32-bit INTEGER column holds.
MAX_QUANTITY = 2**31 - 1

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)", re.ASCII)


@dataclass(frozen=True)
class FieldErrors:
    title: str = ""
    quantity: str = ""

    def any(self) -> bool:
        return bool(self.title or self.quantity)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


NO_ERRORS = FieldErrors()


def title_is_valid(title: Optional[str]) -> bool:
    return bool(title and title.strip())


def quantity_error(quantity: int) -> str:
    if quantity < 0:
        return QUANTITY_NEGATIVE
    if quantity > MAX_QUANTITY:
        return QUANTITY_TOO_LARGE
    return ""


def quantity_is_valid(quantity: int) -> bool:
    return not quantity_error(quantity)


def validate_product(title: Optional[str], quantity: int) -> FieldErrors:
    """Check a product's editable fields and return a message per failing field."""
    return FieldErrors(
        title="" if title_is_valid(title) else TITLE_REQUIRED,
        quantity=quantity_error(quantity),
    )


def parse_quantity(raw: Optional[object]) -> int:
    """Parse user-entered quantity text.

    Leading integer digits are used and anything else is ignored; text with no
    leading integer (including ``None`` and the empty string) becomes 0. This is
    deliberately lenient: a malformed quantity is never a validation error.
    """
    if raw is None:
        return 0
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return int(match.group(1))
