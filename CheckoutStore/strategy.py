import secrets
import string
from decimal import Decimal

from CheckoutStore.models import DiscountCode

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_discount_code(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class DiscountStrategy:

    def __init__(self, name: str):
        self.name = name

    async def apply_discounts(self, subtotal: Decimal, discount: DiscountCode) -> Decimal:
        raise NotImplementedError


class PercentageDiscountStrategy(DiscountStrategy):

    def __init__(self, name: str = "PercentageDiscount"):
        super().__init__(name=name)

    async def apply_discounts(self, subtotal: Decimal, discount: DiscountCode) -> Decimal:
        # Left unrounded, analytics rounds when aggregating
        return subtotal * Decimal(discount.discount_percent) / Decimal(100)


class IssuancePolicy:

    def __init__(self, name: str):
        self.name = name

    async def is_eligible(self, order_count: int) -> bool:
        raise NotImplementedError

    async def orders_until_next(self, order_count: int) -> int:
        raise NotImplementedError


class EveryNthOrderPolicy(IssuancePolicy):
    """A new code may be issued whenever the order counter is a positive multiple of N."""

    def __init__(self, nth_order: int, name: str = "EveryNthOrder"):
        super().__init__(name=name)
        self.nth_order = nth_order

    async def is_eligible(self, order_count: int) -> bool:
        return order_count > 0 and order_count % self.nth_order == 0

    async def orders_until_next(self, order_count: int) -> int:
        if order_count == 0:
            return self.nth_order
        remainder = order_count % self.nth_order
        return 0 if remainder == 0 else self.nth_order - remainder
