"""Data models for the store.

This module defines the core data structures used throughout the package:
catalog products, shopping carts and their line items, immutable orders,
discount codes, the analytics snapshot and the response envelope returned by
the store facade.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from pydantic import field_validator
from pydantic.dataclasses import dataclass as validated_dataclass

from CheckoutStore.enums import ErrorCategory, FailureKind
from CheckoutStore.exceptions import ECommerceException


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@validated_dataclass
class Product:
    """Represents a product in the catalog.

    Attributes:
        id: Unique identifier for the product
        name: Display name
        description: Short marketing description
        price: Unit price, never negative
        category: Category label (e.g. 'Electronics')
        stock: Units available, only decreased by checkout
        image: Optional path of the product image
    """
    id: str
    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    image: Optional[str] = None

    @field_validator("price", "stock")
    @classmethod
    def validate_non_negative(cls, v):
        """Reject negative prices and stock counts.

        Raises:
            ValueError: If the value is below zero
        """
        if v < 0:
            raise ValueError("must not be negative")
        return v


@dataclass
class CartItem:
    """A single line of a cart.

    Attributes:
        product_id: Catalog id of the product
        quantity: Number of units, always at least one
    """
    product_id: str
    quantity: int


@dataclass
class Cart:
    """A customer's shopping cart.

    Items keep insertion order, which is the order a UI displays them in.
    A product id appears at most once.
    """
    id: str
    items: List[CartItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def find_item(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def touch(self) -> None:
        self.updated_at = utc_now()


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    product_name: str
    quantity: int
    price_at_purchase: Decimal


@dataclass(frozen=True)
class Order:
    """A completed checkout. Never modified after creation.

    Attributes:
        id: Unique order identifier
        items: Purchased lines with the unit price captured at checkout time
        subtotal: Sum of price_at_purchase * quantity
        discount_code: Code redeemed by this order, if any
        discount_amount: Amount taken off the subtotal
        total: subtotal - discount_amount
        created_at: When the order was placed
    """
    id: str
    items: Tuple[OrderItem, ...]
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal
    discount_code: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


@validated_dataclass
class DiscountCode:
    """A promotional code issued after every Nth order.

    Once ``is_used`` is set the code is terminal and is never reset.

    Attributes:
        code: Fixed-length uppercase alphanumeric code
        discount_percent: Percentage taken off the subtotal (0-100]
        created_at: Issuance timestamp
        is_used: Whether the code has been redeemed
        used_at: Redemption timestamp
        order_id: Order that redeemed the code
    """
    code: str
    discount_percent: Decimal
    created_at: datetime = field(default_factory=utc_now)
    is_used: bool = False
    used_at: Optional[datetime] = None
    order_id: Optional[str] = None

    @field_validator("discount_percent")
    @classmethod
    def validate_percent(cls, v):
        if v <= 0 or v > 100:
            raise ValueError("discount percent must be within (0, 100]")
        return v


@dataclass
class Analytics:
    """Aggregated store figures for the admin view."""
    total_items_purchased: int
    total_purchase_amount: Decimal
    discount_codes_issued: List[DiscountCode]
    total_discount_amount: Decimal
    order_count: int
    nth_order_config: int
    orders_until_next_discount: int


@dataclass
class StoreResponse:
    """Envelope returned by every store facade operation.

    Failures are returned as values: ``success`` is False, ``data`` is None and
    the error fields describe what went wrong.
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    error_category: Optional[ErrorCategory] = None

    @classmethod
    def ok(cls, data: Any = None) -> "StoreResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: ECommerceException) -> "StoreResponse":
        return cls(
            success=False,
            error=exc.message,
            error_kind=exc.kind,
            error_category=exc.category,
        )
