from decimal import Decimal

import pytest

from CheckoutStore.models import DiscountCode
from CheckoutStore.strategy import CODE_ALPHABET, EveryNthOrderPolicy, PercentageDiscountStrategy, generate_discount_code


class TestGenerateDiscountCode:
    def test_fixed_length_alphanumeric(self):
        code = generate_discount_code(8)
        assert len(code) == 8
        assert all(ch in CODE_ALPHABET for ch in code)

    def test_respects_length(self):
        assert len(generate_discount_code(12)) == 12


class TestPercentageDiscountStrategy:
    async def test_ten_percent(self):
        strategy = PercentageDiscountStrategy()
        discount = DiscountCode(code="X" * 8, discount_percent=Decimal(10))
        assert await strategy.apply_discounts(Decimal("100"), discount) == Decimal("10")

    async def test_not_rounded(self):
        strategy = PercentageDiscountStrategy()
        discount = DiscountCode(code="X" * 8, discount_percent=Decimal(10))
        assert await strategy.apply_discounts(Decimal("149.99"), discount) == Decimal("14.999")

    async def test_zero_subtotal(self):
        strategy = PercentageDiscountStrategy()
        discount = DiscountCode(code="X" * 8, discount_percent=Decimal(10))
        assert await strategy.apply_discounts(Decimal("0"), discount) == Decimal("0")


class TestEveryNthOrderPolicy:
    @pytest.mark.parametrize(
        "order_count, eligible",
        [(0, False), (1, False), (2, True), (3, False), (4, True), (99, False), (100, True)],
    )
    async def test_eligibility(self, order_count, eligible):
        assert await EveryNthOrderPolicy(nth_order=2).is_eligible(order_count) is eligible

    @pytest.mark.parametrize("order_count, remaining", [(0, 2), (1, 1), (2, 0), (3, 1), (4, 0)])
    async def test_orders_until_next(self, order_count, remaining):
        assert await EveryNthOrderPolicy(nth_order=2).orders_until_next(order_count) == remaining

    async def test_every_order_when_n_is_one(self):
        policy = EveryNthOrderPolicy(nth_order=1)
        assert await policy.is_eligible(1)
        assert await policy.orders_until_next(0) == 1
