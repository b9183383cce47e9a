from enum import Enum


# Failure taxonomy shared by exceptions and facade responses

class ErrorCategory(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    INVALID_DISCOUNT_CODE = "INVALID_DISCOUNT_CODE"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"


class FailureKind(str, Enum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CART_NOT_FOUND = "CART_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    CART_EMPTY = "CART_EMPTY"
    INVALID_DISCOUNT_CODE = "INVALID_DISCOUNT_CODE"
    NO_ORDERS_YET = "NO_ORDERS_YET"
    NOT_AT_THRESHOLD = "NOT_AT_THRESHOLD"
    DISCOUNT_ALREADY_AVAILABLE = "DISCOUNT_ALREADY_AVAILABLE"
