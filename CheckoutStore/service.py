"""Service layer for the store's business logic.

This module contains the services that implement catalog lookups, cart
mutation, the discount code ledger, the checkout engine and analytics. Services
raise ``ECommerceException`` subclasses on failure and validate fully before
they mutate anything, so a rejected operation leaves every repository untouched.
"""
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

import structlog

from CheckoutStore.config import StoreConfig
from CheckoutStore.exceptions import (
    CartEmpty,
    CartNotFound,
    DiscountAlreadyAvailable,
    InsufficientStock,
    InvalidDiscountCode,
    InvalidQuantity,
    ItemNotFound,
    NoOrdersYet,
    NotAtThreshold,
)
from CheckoutStore.models import (
    Analytics,
    Cart,
    CartItem,
    DiscountCode,
    Order,
    OrderItem,
    Product,
    utc_now,
)
from CheckoutStore.repository import (
    CartRepository,
    CatalogRepository,
    DiscountRepository,
    OrderRepository,
)
from CheckoutStore.strategy import DiscountStrategy, IssuancePolicy, generate_discount_code

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def _is_whole_number(quantity) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool)


class CatalogService:
    """Read access to the product catalog."""

    def __init__(self, catalog_repository: CatalogRepository):
        self._catalog_repository = catalog_repository

    async def get_all(self) -> List[Product]:
        return await self._catalog_repository.get_all_products()

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Look up a product. A missing product is returned as None, not raised."""
        return await self._catalog_repository.find_product(product_id)

    async def require(self, product_id: str) -> Product:
        """Retrieve a single product by its ID.

        Raises:
            ProductNotFound: If no product exists with the given ID
        """
        return await self._catalog_repository.get_product(product_id)


class CartService:
    """Service for cart mutation.

    Carts are created lazily on first access. Every quantity written into a cart
    is checked against the product's stock at the time of the write.
    """

    def __init__(self, cart_repository: CartRepository, catalog_service: CatalogService):
        self._cart_repository = cart_repository
        self._catalog_service = catalog_service

    async def get_or_create(self, cart_id: str) -> Cart:
        cart = await self._cart_repository.find_cart(cart_id)
        if cart is None:
            cart = Cart(id=cart_id)
            await self._cart_repository.upsert(cart)
            logger.debug("cart_created", cart_id=cart_id)
        return cart

    async def exists(self, cart_id: str) -> bool:
        return await self._cart_repository.has_cart(cart_id)

    async def _require_cart(self, cart_id: str) -> Cart:
        cart = await self._cart_repository.find_cart(cart_id)
        if cart is None:
            raise CartNotFound(f"Cart {cart_id} not found")
        return cart

    async def add_item(self, cart_id: str, product_id: str, quantity: int) -> Cart:
        """Add units of a product to a cart, merging with an existing line.

        Only the quantity being added is compared with stock, not the line's
        running total, so repeated adds may together exceed the stock.

        Args:
            cart_id: Cart to add to, created if it does not exist yet
            product_id: Catalog id of the product
            quantity: Units to add, at least one

        Returns:
            Cart: The updated cart

        Raises:
            InvalidQuantity: If quantity is not an integer or is below one
            ProductNotFound: If the product is not in the catalog
            InsufficientStock: If quantity exceeds the product's current stock
        """
        if not _is_whole_number(quantity) or quantity < 1:
            raise InvalidQuantity(f"Quantity must be a whole number of at least 1, got {quantity!r}")

        product = await self._catalog_service.require(product_id)
        if product.stock < quantity:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}: "
                f"requested {quantity}, available {product.stock}"
            )

        cart = await self.get_or_create(cart_id)
        existing = cart.find_item(product_id)
        if existing is not None:
            existing.quantity += quantity
        else:
            cart.items.append(CartItem(product_id=product_id, quantity=quantity))
        cart.touch()
        return cart

    async def set_item_quantity(self, cart_id: str, product_id: str, quantity: int) -> Cart:
        """Set the quantity of an existing line. Zero or less removes the line.

        Raises:
            CartNotFound: If the cart does not exist
            ItemNotFound: If the cart has no line for the product
            InvalidQuantity: If quantity is not an integer
            InsufficientStock: If the new quantity exceeds the product's stock
        """
        cart = await self._require_cart(cart_id)
        item = cart.find_item(product_id)
        if item is None:
            raise ItemNotFound(f"Product {product_id} is not in cart {cart_id}")
        if not _is_whole_number(quantity):
            raise InvalidQuantity(f"Quantity must be a whole number, got {quantity!r}")

        if quantity <= 0:
            cart.items = [line for line in cart.items if line.product_id != product_id]
        else:
            product = await self._catalog_service.get_by_id(product_id)
            if product is None or product.stock < quantity:
                available = product.stock if product is not None else 0
                raise InsufficientStock(
                    f"Insufficient stock for product {product_id}: "
                    f"requested {quantity}, available {available}"
                )
            item.quantity = quantity

        cart.touch()
        return cart

    async def remove_item(self, cart_id: str, product_id: str) -> Cart:
        cart = await self._require_cart(cart_id)
        cart.items = [line for line in cart.items if line.product_id != product_id]
        cart.touch()
        return cart

    async def clear(self, cart_id: str) -> None:
        await self._cart_repository.delete(cart_id)


class DiscountService:
    """The discount code ledger.

    Tracks every issued code and a single "available" slot. The slot holds at
    most one unused code; a new code is only minted once the slot is empty and
    the issuance policy accepts the current order count.
    """

    def __init__(self, discount_repository: DiscountRepository,
                 order_repository: OrderRepository,
                 issuance_policy: IssuancePolicy,
                 config: StoreConfig):
        self._discount_repository = discount_repository
        self._order_repository = order_repository
        self._issuance_policy = issuance_policy
        self._config = config

    async def _mint(self) -> DiscountCode:
        code = generate_discount_code(self._config.discount_code_length)
        while await self._discount_repository.has_code(code):
            code = generate_discount_code(self._config.discount_code_length)

        discount = DiscountCode(code=code, discount_percent=self._config.discount_percent)
        await self._discount_repository.upsert(discount)
        await self._discount_repository.set_available(discount.code)
        logger.info(
            "discount_code_issued",
            code=discount.code,
            discount_percent=str(discount.discount_percent),
            order_count=await self._order_repository.get_order_count(),
        )
        return discount

    async def issue_if_eligible(self) -> Optional[DiscountCode]:
        """Return the available code, minting one if the order count qualifies.

        Returns:
            Optional[DiscountCode]: The available code, or None when the slot is
            empty and the order count is zero or not at a multiple of N
        """
        available = await self.get_available()
        if available is not None:
            return available

        order_count = await self._order_repository.get_order_count()
        if not await self._issuance_policy.is_eligible(order_count):
            return None
        return await self._mint()

    async def admin_force_issue(self) -> DiscountCode:
        """Administrative issuance with explicit reasons for refusal.

        Raises:
            NoOrdersYet: If no order has been placed
            NotAtThreshold: If the order count is not a multiple of N
            DiscountAlreadyAvailable: If an unused code already occupies the slot
        """
        order_count = await self._order_repository.get_order_count()
        if order_count == 0:
            raise NoOrdersYet("No orders have been placed yet")

        if not await self._issuance_policy.is_eligible(order_count):
            remaining = await self._issuance_policy.orders_until_next(order_count)
            raise NotAtThreshold(
                f"Order count {order_count} is not at a multiple of "
                f"{self._config.nth_order_for_discount}; "
                f"{remaining} more order(s) needed"
            )

        available = await self.get_available()
        if available is not None:
            raise DiscountAlreadyAvailable(
                f"Discount code {available.code} is already available and unused"
            )
        return await self._mint()

    async def validate(self, code: str) -> Optional[DiscountCode]:
        discount = await self._discount_repository.find_discount(code)
        if discount is None or discount.is_used:
            return None
        return discount

    async def redeem(self, code: str, order_id: str) -> bool:
        """Mark a code as used by an order. Used codes are never reset.

        Returns:
            bool: False if the code is unknown or already used
        """
        discount = await self._discount_repository.find_discount(code)
        if discount is None or discount.is_used:
            return False

        discount.is_used = True
        discount.used_at = utc_now()
        discount.order_id = order_id

        available = await self._discount_repository.get_available()
        if available is not None and available.code == code:
            await self._discount_repository.set_available(None)

        logger.info("discount_code_redeemed", code=code, order_id=order_id)
        return True

    async def get_available(self) -> Optional[DiscountCode]:
        available = await self._discount_repository.get_available()
        if available is None or available.is_used:
            return None
        return available

    async def get_all(self) -> List[DiscountCode]:
        return await self._discount_repository.get_all_discounts()


class CheckoutService:
    """Checkout engine.

    Runs one checkout attempt as a single pass:
    cart lookup, validation, pricing, discount application, commit and
    issuance of the next discount code. Every stage before commit only reads,
    so a failure there leaves cart, stock, ledger and counter unchanged.
    """

    def __init__(self, cart_service: CartService,
                 catalog_service: CatalogService,
                 discount_service: DiscountService,
                 order_repository: OrderRepository,
                 discount_strategy: DiscountStrategy):
        self._cart_service = cart_service
        self._catalog_service = catalog_service
        self._discount_service = discount_service
        self._order_repository = order_repository
        self._discount_strategy = discount_strategy

    async def _lookup_cart(self, cart_id: str) -> Cart:
        if not await self._cart_service.exists(cart_id):
            raise CartNotFound("Cart not found. Please add items to your cart first.")
        cart = await self._cart_service.get_or_create(cart_id)
        if not cart.items:
            raise CartEmpty("Cart is empty")
        logger.debug("checkout_cart_found", cart_id=cart_id, lines=len(cart.items))
        return cart

    async def _validate(self, cart: Cart) -> List[Tuple[Product, int]]:
        lines = []
        for item in cart.items:
            product = await self._catalog_service.get_by_id(item.product_id)
            if product is None:
                raise InsufficientStock(f"Product {item.product_id} is no longer available")
            if product.stock < item.quantity:
                raise InsufficientStock(f"Insufficient stock for {product.name}")
            lines.append((product, item.quantity))
        logger.debug("checkout_validated", cart_id=cart.id, lines=len(lines))
        return lines

    @staticmethod
    def _price(lines: List[Tuple[Product, int]]) -> Tuple[Tuple[OrderItem, ...], Decimal]:
        order_items = tuple(
            OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price_at_purchase=product.price,
            )
            for product, quantity in lines
        )
        subtotal = sum(
            (item.price_at_purchase * item.quantity for item in order_items), Decimal(0)
        )
        return order_items, subtotal

    async def _apply_discount(self, subtotal: Decimal,
                              discount_code: Optional[str]) -> Tuple[Optional[DiscountCode], Decimal]:
        if not discount_code:
            return None, Decimal(0)

        discount = await self._discount_service.validate(discount_code)
        if discount is None:
            raise InvalidDiscountCode("Invalid or already used discount code")
        amount = await self._discount_strategy.apply_discounts(subtotal=subtotal, discount=discount)
        logger.debug("checkout_discount_applied", code=discount.code, discount_amount=str(amount))
        return discount, amount

    async def _commit(self, cart: Cart, lines: List[Tuple[Product, int]],
                      order_items: Tuple[OrderItem, ...], subtotal: Decimal,
                      discount: Optional[DiscountCode], discount_amount: Decimal) -> Order:
        for product, quantity in lines:
            product.stock -= quantity

        order = Order(
            id=str(uuid.uuid4()),
            items=order_items,
            subtotal=subtotal,
            discount_code=discount.code if discount else None,
            discount_amount=discount_amount,
            total=subtotal - discount_amount,
        )

        if discount is not None:
            await self._discount_service.redeem(discount.code, order.id)

        await self._order_repository.append(order)
        await self._cart_service.clear(cart.id)

        logger.info(
            "order_placed",
            order_id=order.id,
            cart_id=cart.id,
            items=order.item_count,
            total=str(order.total),
            discount_code=order.discount_code,
            order_count=await self._order_repository.get_order_count(),
        )
        return order

    async def checkout(self, cart_id: str, discount_code: Optional[str] = None) -> Order:
        """Turn a cart into an order.

        Args:
            cart_id: Cart to check out
            discount_code: Optional code the customer wants to redeem

        Returns:
            Order: The completed order

        Raises:
            CartNotFound: If the cart was never created
            CartEmpty: If the cart has no items
            InsufficientStock: If any line exceeds its product's current stock
            InvalidDiscountCode: If the supplied code is unknown or already used
        """
        log = logger.bind(cart_id=cart_id)

        cart = await self._lookup_cart(cart_id)
        lines = await self._validate(cart)
        order_items, subtotal = self._price(lines)
        log.debug("checkout_priced", subtotal=str(subtotal), lines=len(lines))

        discount, discount_amount = await self._apply_discount(subtotal, discount_code)
        order = await self._commit(cart, lines, order_items, subtotal, discount, discount_amount)

        await self._discount_service.issue_if_eligible()
        return order


class AnalyticsService:
    """Read-only aggregation over the order log and the discount ledger."""

    def __init__(self, order_repository: OrderRepository,
                 discount_service: DiscountService,
                 issuance_policy: IssuancePolicy,
                 config: StoreConfig):
        self._order_repository = order_repository
        self._discount_service = discount_service
        self._issuance_policy = issuance_policy
        self._config = config

    async def snapshot(self) -> Analytics:
        orders = await self._order_repository.get_all_orders()
        order_count = await self._order_repository.get_order_count()

        total_items = sum(order.item_count for order in orders)
        total_amount = sum((order.total for order in orders), Decimal(0))
        total_discount = sum((order.discount_amount for order in orders), Decimal(0))

        return Analytics(
            total_items_purchased=total_items,
            total_purchase_amount=total_amount.quantize(CENTS, rounding=ROUND_HALF_UP),
            discount_codes_issued=await self._discount_service.get_all(),
            total_discount_amount=total_discount.quantize(CENTS, rounding=ROUND_HALF_UP),
            order_count=order_count,
            nth_order_config=self._config.nth_order_for_discount,
            orders_until_next_discount=await self._issuance_policy.orders_until_next(order_count),
        )
