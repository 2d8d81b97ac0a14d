"""
Cart storage backends

Local stores are device-scoped, synchronous and must never raise: any
failure degrades to "no data". Cloud stores are account-scoped and
asynchronous; they raise StorageUnavailable and leave recovery to the
caller.
"""

import os
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from pricing.exceptions import CartError

from .models import Cart, Identity
from .state import CART_KEY

logger = logging.getLogger(__name__)


class StorageUnavailable(CartError):
    """A cart store could not be read or written"""
    pass


# ==================== Local storage ====================

class LocalStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryLocalStore:
    """In-memory local store"""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileLocalStore:
    """Local store keeping one file per key in a device directory"""

    def __init__(self, directory: Union[str, os.PathLike]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Local store read failed for {key!r}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            logger.warning(f"Local store write failed for {key!r}: {e}")

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Local store remove failed for {key!r}: {e}")


def load_local_cart(store: LocalStore) -> Cart:
    """Read the device cart; missing or unreadable data yields an empty cart"""
    raw = store.get(CART_KEY)
    if not raw:
        return Cart()

    try:
        return Cart.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding unreadable local cart: {e.error_count()} validation errors")
        return Cart()


def save_local_cart(store: LocalStore, cart: Cart) -> None:
    store.set(CART_KEY, cart.model_dump_json())


# ==================== Cloud storage ====================

class CloudStore(Protocol):
    async def get_cart(self, identity: Identity) -> Optional[Cart]: ...

    async def put_cart(self, identity: Identity, cart: Cart) -> None: ...


class MemoryCloudStore:
    """
    In-process cloud store.

    ``fail_reads``/``fail_writes`` make the store raise StorageUnavailable,
    and ``writes`` records every accepted write in order.
    """

    def __init__(self):
        self.carts: dict[str, Cart] = {}
        self.writes: list[tuple[str, Cart]] = []
        self.fail_reads = False
        self.fail_writes = False

    async def get_cart(self, identity: Identity) -> Optional[Cart]:
        if self.fail_reads:
            raise StorageUnavailable("Cloud store read failed")
        return self.carts.get(identity.subject)

    async def put_cart(self, identity: Identity, cart: Cart) -> None:
        if self.fail_writes:
            raise StorageUnavailable("Cloud store write failed")
        self.carts[identity.subject] = cart
        self.writes.append((identity.subject, cart))
