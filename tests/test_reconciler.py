"""Tests for reconciling the device cart with the cloud cart."""

import asyncio

import pytest
from cartsync.reconciler import CartReconciler
from cartsync.state import CART_KEY
from cartsync.stores import load_local_cart, save_local_cart
from factories import FIXED_NOW, Auth, fixed_clock, make_cart, make_item

pytestmark = pytest.mark.unit


def _quantities(cart):
    return {item.product_id: item.quantity for item in cart.items}


@pytest.fixture
def auth():
    return Auth()


@pytest.fixture
def reconciler(local_store, cloud_store, auth):
    return CartReconciler(local_store, cloud_store, auth, clock=fixed_clock)


class TestInitialize:
    def test_guest_uses_device_cart(self, reconciler, local_store, cloud_store):
        cart = make_cart(make_item("a", quantity=2))
        save_local_cart(local_store, cart)
        assert asyncio.run(reconciler.initialize()) == cart
        assert local_store.get(CART_KEY) is not None
        assert cloud_store.writes == []

    def test_signed_in_without_cloud_cart_uses_device_cart(self, reconciler, local_store, auth, alice):
        auth.identity = alice
        cart = make_cart(make_item("a"))
        save_local_cart(local_store, cart)
        assert asyncio.run(reconciler.initialize()) == cart

    def test_empty_device_cart_takes_cloud_cart(self, reconciler, cloud_store, auth, alice):
        auth.identity = alice
        cloud = make_cart(make_item("c", quantity=4))
        cloud_store.carts["alice"] = cloud
        assert asyncio.run(reconciler.initialize()) == cloud
        assert cloud_store.writes == []

    def test_merges_and_moves_device_cart_to_cloud(self, reconciler, local_store, cloud_store, auth, alice):
        auth.identity = alice
        save_local_cart(local_store, make_cart(make_item("x", quantity=2), make_item("y")))
        cloud_store.carts["alice"] = make_cart(make_item("x", quantity=1), make_item("z"))

        merged = asyncio.run(reconciler.initialize())

        assert _quantities(merged) == {"x": 2, "z": 1, "y": 1}
        assert merged.updated_at == FIXED_NOW
        assert cloud_store.carts["alice"] == merged
        assert local_store.get(CART_KEY) is None

    def test_failed_cloud_write_keeps_device_cart(self, reconciler, local_store, cloud_store, auth, alice):
        auth.identity = alice
        save_local_cart(local_store, make_cart(make_item("x")))
        cloud_store.carts["alice"] = make_cart(make_item("z"))
        cloud_store.fail_writes = True

        merged = asyncio.run(reconciler.initialize())

        assert _quantities(merged) == {"z": 1, "x": 1}
        assert local_store.get(CART_KEY) is not None

    def test_unreachable_cloud_falls_back_to_device(self, reconciler, local_store, cloud_store, auth, alice):
        auth.identity = alice
        cart = make_cart(make_item("a"))
        save_local_cart(local_store, cart)
        cloud_store.fail_reads = True
        assert asyncio.run(reconciler.initialize()) == cart

    def test_repeated_initialize_is_stable(self, reconciler, local_store, cloud_store, auth, alice):
        auth.identity = alice
        save_local_cart(local_store, make_cart(make_item("x", quantity=2)))
        cloud_store.carts["alice"] = make_cart(make_item("y"))

        first = asyncio.run(reconciler.initialize())
        second = asyncio.run(reconciler.initialize())
        assert _quantities(first) == _quantities(second) == {"y": 1, "x": 2}


class TestSyncOnLogin:
    def test_guest_items_merge_into_account_cart(self, reconciler, local_store, cloud_store, auth, alice):
        guest_cart = make_cart(make_item("X", quantity=2))
        save_local_cart(local_store, guest_cart)
        cloud_store.carts["alice"] = make_cart(make_item("X", quantity=1), make_item("Y", quantity=3))

        auth.identity = alice
        result = asyncio.run(reconciler.sync_on_login(guest_cart))

        assert _quantities(result) == {"X": 2, "Y": 3}
        assert _quantities(cloud_store.carts["alice"]) == {"X": 2, "Y": 3}
        assert load_local_cart(local_store).is_empty

    def test_pushes_session_cart_when_account_has_none(self, reconciler, local_store, cloud_store, auth, alice):
        auth.identity = alice
        current = make_cart(make_item("a"))
        save_local_cart(local_store, current)

        assert asyncio.run(reconciler.sync_on_login(current)) == current
        assert cloud_store.carts["alice"] == current
        assert local_store.get(CART_KEY) is None

    def test_empty_cart_is_not_pushed(self, reconciler, cloud_store, auth, alice):
        auth.identity = alice
        asyncio.run(reconciler.sync_on_login(make_cart()))
        assert cloud_store.writes == []

    def test_without_identity_keeps_device_cart(self, reconciler, local_store, cloud_store):
        current = make_cart(make_item("a"))
        save_local_cart(local_store, current)
        assert asyncio.run(reconciler.sync_on_login(current)) == current
        assert local_store.get(CART_KEY) is not None
        assert cloud_store.writes == []

    def test_write_failure_still_returns_merged_cart(self, reconciler, cloud_store, auth, alice):
        auth.identity = alice
        cloud_store.carts["alice"] = make_cart(make_item("c"))
        cloud_store.fail_writes = True
        result = asyncio.run(reconciler.sync_on_login(make_cart(make_item("g"))))
        assert _quantities(result) == {"c": 1, "g": 1}


class TestLogout:
    def test_clears_session_keys_only(self, reconciler, local_store):
        for key in ("cart", "wishlist", "recentlyViewed", "session", "theme"):
            local_store.set(key, "{}")

        cart = asyncio.run(reconciler.logout())

        assert cart.is_empty
        assert cart.updated_at == FIXED_NOW
        assert local_store.data == {"theme": "{}"}

    def test_cloud_cart_survives_logout(self, reconciler, cloud_store, auth, alice):
        auth.identity = alice
        cloud = make_cart(make_item("a"))
        cloud_store.carts["alice"] = cloud

        asyncio.run(reconciler.logout())
        auth.identity = None

        assert cloud_store.carts["alice"] == cloud
        assert cloud_store.writes == []
