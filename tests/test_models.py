from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest
from pydantic import ValidationError

from CheckoutStore.enums import ErrorCategory, FailureKind
from CheckoutStore.exceptions import CartEmpty, InvalidDiscountCode, ProductNotFound
from CheckoutStore.models import Cart, CartItem, DiscountCode, Order, OrderItem, Product, StoreResponse


class TestProduct:
    def test_valid_product(self):
        product = Product(id="p1", name="Hub", description="USB-C", price=Decimal("49.99"),
                          category="Electronics", stock=3)
        assert product.price == Decimal("49.99")
        assert product.image is None

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Product(id="p1", name="Hub", description="", price=Decimal("-1"), category="x", stock=1)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            Product(id="p1", name="Hub", description="", price=Decimal("1"), category="x", stock=-1)

    def test_zero_stock_allowed(self):
        product = Product(id="p1", name="Hub", description="", price=Decimal("0"), category="x", stock=0)
        assert product.stock == 0


class TestCart:
    def test_new_cart_is_empty_with_timestamps(self):
        cart = Cart(id="c1")
        assert cart.items == []
        assert cart.created_at is not None
        assert cart.updated_at is not None

    def test_find_item(self):
        cart = Cart(id="c1", items=[CartItem(product_id="a", quantity=1), CartItem(product_id="b", quantity=2)])
        assert cart.find_item("b").quantity == 2
        assert cart.find_item("missing") is None

    def test_touch_moves_updated_at(self):
        cart = Cart(id="c1")
        before = cart.updated_at
        cart.touch()
        assert cart.updated_at >= before


class TestOrder:
    def test_order_is_immutable(self):
        order = Order(
            id="o1",
            items=(OrderItem(product_id="a", product_name="A", quantity=2, price_at_purchase=Decimal("5")),),
            subtotal=Decimal("10"),
            discount_amount=Decimal("0"),
            total=Decimal("10"),
        )
        with pytest.raises(FrozenInstanceError):
            order.total = Decimal("0")

    def test_item_count(self):
        order = Order(
            id="o1",
            items=(
                OrderItem(product_id="a", product_name="A", quantity=2, price_at_purchase=Decimal("5")),
                OrderItem(product_id="b", product_name="B", quantity=3, price_at_purchase=Decimal("1")),
            ),
            subtotal=Decimal("13"),
            discount_amount=Decimal("0"),
            total=Decimal("13"),
        )
        assert order.item_count == 5


class TestDiscountCode:
    def test_defaults(self):
        discount = DiscountCode(code="ABCD1234", discount_percent=Decimal(10))
        assert discount.is_used is False
        assert discount.used_at is None
        assert discount.order_id is None

    @pytest.mark.parametrize("percent", [Decimal(0), Decimal(-5), Decimal(101)])
    def test_percent_out_of_range_rejected(self, percent):
        with pytest.raises(ValidationError):
            DiscountCode(code="ABCD1234", discount_percent=percent)


class TestStoreResponse:
    def test_ok(self):
        response = StoreResponse.ok([1, 2])
        assert response.success is True
        assert response.data == [1, 2]
        assert response.error is None

    def test_fail_carries_kind_and_category(self):
        response = StoreResponse.fail(CartEmpty("Cart is empty"))
        assert response.success is False
        assert response.data is None
        assert response.error == "Cart is empty"
        assert response.error_kind == FailureKind.CART_EMPTY
        assert response.error_category == ErrorCategory.VALIDATION_FAILURE

    def test_exception_taxonomy(self):
        assert ProductNotFound("x").category == ErrorCategory.NOT_FOUND
        assert InvalidDiscountCode("x").category == ErrorCategory.INVALID_DISCOUNT_CODE
