"""Store facade.

``Store`` is the single entry point for request handlers and admin tooling.
It owns every repository, wires the services together and returns a
``StoreResponse`` from each operation instead of raising. Objects handed back
to callers are deep copies, so callers cannot mutate store state through them.
"""
import asyncio
import copy
import uuid
from decimal import Decimal
from typing import Any, List, Optional

import structlog

from CheckoutStore.config import StoreConfig
from CheckoutStore.exceptions import ECommerceException, InvalidDiscountCode, OrderNotFound, ProductNotFound
from CheckoutStore.models import Product, StoreResponse
from CheckoutStore.repository import CartRepository, CatalogRepository, DiscountRepository, OrderRepository
from CheckoutStore.service import (
    AnalyticsService,
    CartService,
    CatalogService,
    CheckoutService,
    DiscountService,
)
from CheckoutStore.strategy import EveryNthOrderPolicy, PercentageDiscountStrategy

logger = structlog.get_logger(__name__)


SAMPLE_PRODUCTS = [
    dict(name="Wireless Bluetooth Headphones",
         description="Premium noise-canceling headphones with 30-hour battery life",
         price="149.99", image="/products/headphones.jpg", category="Electronics", stock=50),
    dict(name="Mechanical Keyboard",
         description="RGB backlit mechanical keyboard with Cherry MX switches",
         price="129.99", image="/products/keyboard.jpg", category="Electronics", stock=30),
    dict(name="Ergonomic Mouse",
         description="Wireless ergonomic mouse with adjustable DPI",
         price="59.99", image="/products/mouse.jpg", category="Electronics", stock=100),
    dict(name="USB-C Hub",
         description="7-in-1 USB-C hub with HDMI, USB 3.0, and SD card reader",
         price="49.99", image="/products/hub.jpg", category="Electronics", stock=75),
    dict(name="Laptop Stand",
         description="Adjustable aluminum laptop stand for better ergonomics",
         price="39.99", image="/products/stand.jpg", category="Accessories", stock=60),
    dict(name="Webcam HD 1080p",
         description="Full HD webcam with built-in microphone and auto-focus",
         price="79.99", image="/products/webcam.jpg", category="Electronics", stock=40),
]


class Store:
    """In-memory store facade.

    Construct one per process and pass it to whatever serves requests.
    Operations that read or write carts, stock or the discount ledger run
    under a single lock, so a checkout is never interleaved with another
    mutation.
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or StoreConfig()

        self._catalog_repository = CatalogRepository()
        self._cart_repository = CartRepository()
        self._discount_repository = DiscountRepository()
        self._order_repository = OrderRepository()

        issuance_policy = EveryNthOrderPolicy(nth_order=self.config.nth_order_for_discount)

        self._catalog_service = CatalogService(self._catalog_repository)
        self._cart_service = CartService(self._cart_repository, self._catalog_service)
        self._discount_service = DiscountService(
            discount_repository=self._discount_repository,
            order_repository=self._order_repository,
            issuance_policy=issuance_policy,
            config=self.config,
        )
        self._checkout_service = CheckoutService(
            cart_service=self._cart_service,
            catalog_service=self._catalog_service,
            discount_service=self._discount_service,
            order_repository=self._order_repository,
            discount_strategy=PercentageDiscountStrategy(),
        )
        self._analytics_service = AnalyticsService(
            order_repository=self._order_repository,
            discount_service=self._discount_service,
            issuance_policy=issuance_policy,
            config=self.config,
        )
        self._lock = asyncio.Lock()

    async def add_products(self, products: List[Product]) -> None:
        async with self._lock:
            await self._catalog_repository.add_products(products=products)

    async def _run(self, operation: str, coro) -> StoreResponse:
        async with self._lock:
            try:
                result: Any = await coro
            except ECommerceException as e:
                logger.info("operation_rejected", operation=operation, kind=e.kind.value, error=e.message)
                return StoreResponse.fail(e)
        return StoreResponse.ok(copy.deepcopy(result))

    # ============ PRODUCTS ============

    async def list_products(self) -> StoreResponse:
        return await self._run("list_products", self._catalog_service.get_all())

    async def get_product(self, product_id: str) -> StoreResponse:
        async def lookup():
            product = await self._catalog_service.get_by_id(product_id)
            if product is None:
                raise ProductNotFound(f"Product with id {product_id} does not exist")
            return product

        return await self._run("get_product", lookup())

    # ============ CART ============

    async def has_cart(self, cart_id: str) -> StoreResponse:
        return await self._run("has_cart", self._cart_service.exists(cart_id))

    async def get_cart(self, cart_id: str) -> StoreResponse:
        return await self._run("get_cart", self._cart_service.get_or_create(cart_id))

    async def add_to_cart(self, cart_id: str, product_id: str, quantity: int = 1) -> StoreResponse:
        return await self._run("add_to_cart", self._cart_service.add_item(cart_id, product_id, quantity))

    async def update_cart_item(self, cart_id: str, product_id: str, quantity: int) -> StoreResponse:
        return await self._run(
            "update_cart_item", self._cart_service.set_item_quantity(cart_id, product_id, quantity)
        )

    async def remove_from_cart(self, cart_id: str, product_id: str) -> StoreResponse:
        return await self._run("remove_from_cart", self._cart_service.remove_item(cart_id, product_id))

    async def clear_cart(self, cart_id: str) -> StoreResponse:
        return await self._run("clear_cart", self._cart_service.clear(cart_id))

    # ============ CHECKOUT ============

    async def checkout(self, cart_id: str, discount_code: Optional[str] = None) -> StoreResponse:
        return await self._run("checkout", self._checkout_service.checkout(cart_id, discount_code))

    async def get_order_count(self) -> StoreResponse:
        return await self._run("get_order_count", self._order_repository.get_order_count())

    async def list_orders(self) -> StoreResponse:
        return await self._run("list_orders", self._order_repository.get_all_orders())

    async def get_order(self, order_id: str) -> StoreResponse:
        async def lookup():
            order = await self._order_repository.find_order(order_id)
            if order is None:
                raise OrderNotFound(f"Order {order_id} not found")
            return order

        return await self._run("get_order", lookup())

    # ============ DISCOUNTS ============

    async def validate_discount_code(self, code: str) -> StoreResponse:
        async def lookup():
            discount = await self._discount_service.validate(code)
            if discount is None:
                raise InvalidDiscountCode("Invalid or already used discount code")
            return discount

        return await self._run("validate_discount_code", lookup())

    async def get_available_discount_code(self) -> StoreResponse:
        return await self._run("get_available_discount_code", self._discount_service.get_available())

    async def list_discount_codes(self) -> StoreResponse:
        return await self._run("list_discount_codes", self._discount_service.get_all())

    async def admin_generate_discount_code(self) -> StoreResponse:
        return await self._run("admin_generate_discount_code", self._discount_service.admin_force_issue())

    # ============ ANALYTICS ============

    async def get_analytics(self) -> StoreResponse:
        return await self._run("get_analytics", self._analytics_service.snapshot())


class StoreFactory:

    async def setup(self, config: Optional[StoreConfig] = None,
                    products: Optional[List[Product]] = None) -> Store:
        """Build a store and seed its catalog.

        Args:
            config: Store configuration, defaults to ``StoreConfig()``
            products: Catalog to load, defaults to the sample products

        Returns:
            Store: A ready-to-use store instance
        """
        store = Store(config=config)

        if products is None:
            products = [
                Product(
                    id=str(uuid.uuid4()),
                    name=data["name"],
                    description=data["description"],
                    price=Decimal(data["price"]),
                    category=data["category"],
                    stock=data["stock"],
                    image=data["image"],
                )
                for data in SAMPLE_PRODUCTS
            ]
        await store.add_products(products)

        logger.info(
            "store_ready",
            products=len(products),
            nth_order_for_discount=store.config.nth_order_for_discount,
            discount_percent=str(store.config.discount_percent),
        )
        return store
