"""Product records and the route target variant shared by every layer."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Union

NEW_TOKEN = "new"


class PageMode(str, Enum):
    NEW = "new"
    EDIT = "edit"


@dataclass(frozen=True)
class ProductSummary:
    """The fields a page needs to show or edit a product."""

    id: str
    title: str
    quantity: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class ProductRecord:
    id: str
    title: str
    quantity: int
    created_at: datetime

    def summary(self) -> ProductSummary:
        return ProductSummary(id=self.id, title=self.title, quantity=self.quantity)


EMPTY_PRODUCT = ProductSummary(id="", title="", quantity=0)


@dataclass(frozen=True)
class NewTarget:
    """No record yet: a save allocates a fresh product."""

    def __str__(self) -> str:
        return NEW_TOKEN


@dataclass(frozen=True)
class ExistingTarget:
    product_id: str

    def __str__(self) -> str:
        return self.product_id


Target = Union[NewTarget, ExistingTarget]


def parse_target(raw: str) -> Target:
    """Map a route identifier onto a target; only the literal token means new."""
    if raw == NEW_TOKEN:
        return NewTarget()
    return ExistingTarget(raw)


@dataclass(frozen=True)
class ProductListPage:
    products: List[ProductSummary]

    def to_dict(self) -> Dict[str, object]:
        return {"products": [product.to_dict() for product in self.products]}


@dataclass(frozen=True)
class ProductDetailPage:
    product: ProductSummary
    mode: PageMode

    def to_dict(self) -> Dict[str, object]:
        return {"product": self.product.to_dict(), "mode": self.mode.value}
