import asyncio

from CheckoutStore.config import StoreConfig
from CheckoutStore.logging_config import configure_logging
from CheckoutStore.store import StoreFactory


async def run_demo(config: StoreConfig) -> None:
    """Walk two customers through checkout so the Nth-order code gets issued and redeemed."""
    store = await StoreFactory().setup(config=config)

    products = (await store.list_products()).data
    keyboard, mouse = products[1], products[2]

    for cart_id in ("demo-cart-1", "demo-cart-2"):
        await store.add_to_cart(cart_id, keyboard.id, 1)
        result = await store.checkout(cart_id)
        print(f"Order {result.data.id}: total {result.data.total}")

    available = (await store.get_available_discount_code()).data
    print(f"Available discount code: {available.code if available else None}")

    if available is not None:
        await store.add_to_cart("demo-cart-3", mouse.id, 2)
        result = await store.checkout("demo-cart-3", discount_code=available.code)
        print(f"Discounted order total: {result.data.total} (saved {result.data.discount_amount})")

        # Reusing the same code must fail
        await store.add_to_cart("demo-cart-4", mouse.id, 1)
        result = await store.checkout("demo-cart-4", discount_code=available.code)
        print(f"Reusing the code: {result.error}")

    analytics = (await store.get_analytics()).data
    print(f"Items purchased: {analytics.total_items_purchased}")
    print(f"Revenue: {analytics.total_purchase_amount}")
    print(f"Discounts granted: {analytics.total_discount_amount}")
    print(f"Orders until next discount: {analytics.orders_until_next_discount}")


if __name__ == "__main__":
    store_config = StoreConfig.from_env()
    configure_logging(store_config.log_level)
    asyncio.run(run_demo(store_config))
