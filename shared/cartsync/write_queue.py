"""
Cloud write queue

Fire-and-forget cloud cart writes with at most one write in flight per
identity. Writes submitted while one is in flight collapse into a single
pending write holding the latest cart (last write wins). Failed writes are
logged and dropped; the next submitted cart acts as the retry.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .models import Cart, Identity
from .stores import CloudStore, StorageUnavailable

logger = logging.getLogger(__name__)


@dataclass
class WriteStats:
    submitted: int = 0
    written: int = 0
    collapsed: int = 0
    failed: int = 0


class CloudWriteQueue:
    """Per-identity serialized cloud writes with latest-wins collapsing"""

    def __init__(self, cloud_store: CloudStore):
        self.cloud_store = cloud_store
        self.stats = WriteStats()
        self._in_flight: dict[str, asyncio.Task] = {}
        self._pending: dict[str, tuple[Identity, Cart]] = {}

    @property
    def idle(self) -> bool:
        return not self._in_flight and not self._pending

    def pending_cart(self, identity: Identity) -> Optional[Cart]:
        pending = self._pending.get(identity.subject)
        return pending[1] if pending else None

    def submit(self, identity: Identity, cart: Cart) -> None:
        """Queue a cart write without waiting for it"""
        key = identity.subject
        self.stats.submitted += 1
        if key in self._pending:
            self.stats.collapsed += 1
        self._pending[key] = (identity, cart)

        if key not in self._in_flight:
            self._start(key)

    def _start(self, key: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, cloud write for {key} stays pending")
            return

        identity, cart = self._pending.pop(key)
        self._in_flight[key] = loop.create_task(self._write(key, identity, cart))

    async def _write(self, key: str, identity: Identity, cart: Cart) -> None:
        try:
            await self.cloud_store.put_cart(identity, cart)
            self.stats.written += 1
            logger.debug(f"Cloud cart written for {key} ({len(cart.items)} items)")
        except StorageUnavailable as e:
            self.stats.failed += 1
            logger.warning(f"Cloud cart write failed for {key}: {e}")
        except Exception:
            self.stats.failed += 1
            logger.exception(f"Unexpected error writing cloud cart for {key}")
        finally:
            del self._in_flight[key]
            if key in self._pending:
                self._start(key)

    async def drain(self) -> None:
        """Wait until every submitted write has been attempted"""
        for key in list(self._pending):
            if key not in self._in_flight:
                self._start(key)

        while self._in_flight:
            await asyncio.gather(*self._in_flight.values(), return_exceptions=True)
