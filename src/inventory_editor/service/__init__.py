"""Persistence and request handling for the product pages."""

from .handlers import (
    Submission,
    WriteOutcome,
    WriteState,
    apply_submission,
    load_product_detail,
    load_product_list,
)
from .product_store import ProductStore

__all__ = [
    "ProductStore",
    "Submission",
    "WriteOutcome",
    "WriteState",
    "apply_submission",
    "load_product_detail",
    "load_product_list",
]
