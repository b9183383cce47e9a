from typing import Optional

from CheckoutStore.enums import ErrorCategory, FailureKind


class ECommerceException(Exception):
    """Base exception class for all store related failures.

    Every subclass carries a ``kind`` naming the exact failure and a ``category``
    grouping it into the store's failure taxonomy. The store facade catches this
    base class and turns it into a failed response, so callers never see it raised.
    """
    kind: Optional[FailureKind] = None
    category: Optional[ErrorCategory] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProductNotFound(ECommerceException):
    """Raised when a product id is not present in the catalog."""
    kind = FailureKind.PRODUCT_NOT_FOUND
    category = ErrorCategory.NOT_FOUND


class CartNotFound(ECommerceException):
    """Raised when an operation needs an existing cart and none was created yet."""
    kind = FailureKind.CART_NOT_FOUND
    category = ErrorCategory.NOT_FOUND


class ItemNotFound(ECommerceException):
    """Raised when a cart has no line for the requested product."""
    kind = FailureKind.ITEM_NOT_FOUND
    category = ErrorCategory.NOT_FOUND


class OrderNotFound(ECommerceException):
    kind = FailureKind.ORDER_NOT_FOUND
    category = ErrorCategory.NOT_FOUND


class InsufficientStock(ECommerceException):
    """Raised when the requested quantity exceeds a product's current stock.

    Raised both while editing a cart and while re-validating the cart at checkout.
    """
    kind = FailureKind.INSUFFICIENT_STOCK
    category = ErrorCategory.VALIDATION_FAILURE


class InvalidQuantity(ECommerceException):
    kind = FailureKind.INVALID_QUANTITY
    category = ErrorCategory.VALIDATION_FAILURE


class CartEmpty(ECommerceException):
    """Raised when checkout is attempted on a cart with no line items."""
    kind = FailureKind.CART_EMPTY
    category = ErrorCategory.VALIDATION_FAILURE


class InvalidDiscountCode(ECommerceException):
    """Raised when a discount code is unknown or has already been redeemed.

    This is terminal for the checkout attempt: checkout never proceeds without
    a discount the customer explicitly asked for.
    """
    kind = FailureKind.INVALID_DISCOUNT_CODE
    category = ErrorCategory.INVALID_DISCOUNT_CODE


class NoOrdersYet(ECommerceException):
    kind = FailureKind.NO_ORDERS_YET
    category = ErrorCategory.PRECONDITION_FAILED


class NotAtThreshold(ECommerceException):
    kind = FailureKind.NOT_AT_THRESHOLD
    category = ErrorCategory.PRECONDITION_FAILED


class DiscountAlreadyAvailable(ECommerceException):
    kind = FailureKind.DISCOUNT_ALREADY_AVAILABLE
    category = ErrorCategory.PRECONDITION_FAILED
