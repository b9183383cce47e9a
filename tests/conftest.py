from decimal import Decimal

import pytest

from CheckoutStore.config import StoreConfig
from CheckoutStore.models import Product
from CheckoutStore.store import Store


def make_products():
    return [
        Product(id="kbd", name="Mechanical Keyboard", description="Cherry MX switches",
                price=Decimal("129.99"), category="Electronics", stock=5),
        Product(id="mouse", name="Ergonomic Mouse", description="Adjustable DPI",
                price=Decimal("59.99"), category="Electronics", stock=10),
        Product(id="stand", name="Laptop Stand", description="Aluminum",
                price=Decimal("39.99"), category="Accessories", stock=1),
    ]


@pytest.fixture
def config():
    return StoreConfig(nth_order_for_discount=2, discount_percent=Decimal(10))


@pytest.fixture
async def store(config):
    store = Store(config=config)
    await store.add_products(make_products())
    return store


@pytest.fixture
def checkout_once(store):
    """Place a single-item order on a fresh cart and return the response."""
    counter = {"n": 0}

    async def _checkout(product_id="mouse", quantity=1, discount_code=None):
        counter["n"] += 1
        cart_id = f"auto-cart-{counter['n']}"
        added = await store.add_to_cart(cart_id, product_id, quantity)
        assert added.success, added.error
        return await store.checkout(cart_id, discount_code=discount_code)

    return _checkout
