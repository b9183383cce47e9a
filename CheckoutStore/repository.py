"""Repository module for in-memory data storage.

This module contains the repository classes that own the store's state: the
product catalog, carts, the discount code ledger and the order log with its
global order counter. Everything lives in process memory and is lost on restart.
"""
from typing import Dict, List, Optional

from CheckoutStore.exceptions import ProductNotFound
from CheckoutStore.models import Cart, DiscountCode, Order, Product


class CatalogRepository:
    """Repository class for catalog products.

    Products are kept in a dict, which preserves insertion order for listings.
    """

    def __init__(self):
        self._products: Dict[str, Product] = {}

    async def upsert(self, product: Product):
        self._products[product.id] = product

    async def find_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    async def get_product(self, product_id: str) -> Product:
        if product_id not in self._products:
            raise ProductNotFound(f"Product with id {product_id} does not exist")
        return self._products[product_id]

    async def get_all_products(self) -> List[Product]:
        return list(self._products.values())

    async def add_products(self, products: List[Product]):
        for product in products:
            await self.upsert(product=product)


class CartRepository:

    def __init__(self):
        self._carts: Dict[str, Cart] = {}

    async def upsert(self, cart: Cart):
        self._carts[cart.id] = cart

    async def find_cart(self, cart_id: str) -> Optional[Cart]:
        return self._carts.get(cart_id)

    async def has_cart(self, cart_id: str) -> bool:
        return cart_id in self._carts

    async def delete(self, cart_id: str):
        self._carts.pop(cart_id, None)


class DiscountRepository:
    """Repository class for the discount code ledger.

    Keeps every issued code keyed by its code string, in issuance order, and
    the single "available" slot pointing at the code customers can currently use.
    """

    def __init__(self):
        self._discounts: Dict[str, DiscountCode] = {}
        self._available_code: Optional[str] = None

    async def upsert(self, discount: DiscountCode):
        self._discounts[discount.code] = discount

    async def find_discount(self, code: str) -> Optional[DiscountCode]:
        return self._discounts.get(code)

    async def has_code(self, code: str) -> bool:
        return code in self._discounts

    async def get_all_discounts(self) -> List[DiscountCode]:
        return list(self._discounts.values())

    async def get_available(self) -> Optional[DiscountCode]:
        if self._available_code is None:
            return None
        return self._discounts.get(self._available_code)

    async def set_available(self, code: Optional[str]):
        self._available_code = code


class OrderRepository:
    """Append-only order log plus the global order counter."""

    def __init__(self):
        self._orders: List[Order] = []
        self._order_count = 0

    async def append(self, order: Order):
        self._orders.append(order)
        self._order_count += 1

    async def get_all_orders(self) -> List[Order]:
        return list(self._orders)

    async def find_order(self, order_id: str) -> Optional[Order]:
        return next((order for order in self._orders if order.id == order_id), None)

    async def get_order_count(self) -> int:
        return self._order_count
