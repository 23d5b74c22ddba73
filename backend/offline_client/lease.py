"""
Sync lease.

A timestamped flag in the device's storage that keeps two flush passes of
the same device from running at once. It expires after ``ttl`` seconds so
a flush that crashed without releasing it cannot block syncing forever.

It is not a distributed lock: two devices sharing one login each hold
their own lease. The server's unique ``local_id`` is what keeps a replayed
order from being stored twice.
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

from shared.config.constants import OfflineTimeouts
from shared.config.logging import offline_logger as logger
from .models import SyncLock
from .storage import SYNC_LOCK_KEY, KeyValueStore


class SyncLease:
    def __init__(
        self,
        store: KeyValueStore,
        ttl: float = OfflineTimeouts.SYNC_LOCK_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._owner: str | None = None

    def _read(self) -> SyncLock:
        raw = self._store.get(SYNC_LOCK_KEY)
        return SyncLock.model_validate(raw) if raw else SyncLock()

    def _expired(self, lock: SyncLock) -> bool:
        return self._clock() - lock.timestamp >= self._ttl

    def acquire(self) -> bool:
        """Take the lease. Returns False while another holder's lease is live."""
        current = self._read()
        if current.locked and not self._expired(current):
            logger.debug("Sync lease busy", age=round(self._clock() - current.timestamp, 1))
            return False
        if current.locked:
            logger.info("Sync lease expired, taking over", owner=current.owner)

        owner = uuid.uuid4().hex
        self._store.set(
            SYNC_LOCK_KEY,
            SyncLock(locked=True, timestamp=self._clock(), owner=owner).model_dump(),
        )

        # Another writer may have replaced the record between our read and write
        if self._read().owner != owner:
            logger.info("Lost sync lease race")
            return False

        self._owner = owner
        return True

    def release(self) -> None:
        """Give the lease back. A lease taken over by another holder is left alone."""
        if self._owner is not None:
            current = self._read()
            if current.owner == self._owner:
                self._clear()
            else:
                logger.warning("Sync lease was taken over before release", owner=current.owner)
        self._owner = None

    def _clear(self) -> None:
        self._store.set(SYNC_LOCK_KEY, SyncLock().model_dump())

    def is_locked(self) -> bool:
        """Whether a live lease exists. An expired lease is cleared on the way."""
        current = self._read()
        if not current.locked:
            return False
        if self._expired(current):
            self._clear()
            return False
        return True

    @property
    def held(self) -> bool:
        return self._owner is not None and self._read().owner == self._owner
