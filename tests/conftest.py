import pytest

from cartsync.config import Settings
from cartsync.models import Identity
from cartsync.stores import MemoryCloudStore, MemoryLocalStore


@pytest.fixture
def alice():
    return Identity(subject="alice", token="alice-token")


@pytest.fixture
def local_store():
    return MemoryLocalStore()


@pytest.fixture
def cloud_store():
    return MemoryCloudStore()


@pytest.fixture
def cart_settings():
    return Settings(_env_file=None)


@pytest.fixture
def backend_carts():
    """Empty the backend's cloud cart storage around a test."""
    from cart_backend.database.carts import cart_db

    cart_db.clear()
    yield cart_db
    cart_db.clear()
