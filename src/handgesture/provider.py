"""Boundary to the hand-tracking sensor.

The sensor pushes anchor updates on its own schedule while the frame tick
reads whatever arrived last. Each hand gets a single-slot cell: writes
overwrite, reads return the current value, and the tick reads each cell
once per frame so every predicate sees the same sample.

Usage:
    provider = HandTrackingProvider()
    asyncio.create_task(provider.run(sensor.anchor_updates()))
    ...
    left = provider.latest(Chirality.LEFT)
"""

from __future__ import annotations

import logging
import threading
from typing import AsyncIterator, Generic, Optional, TypeVar

from handgesture.joints import Chirality
from handgesture.skeleton import HandAnchor

logger = logging.getLogger("handgesture.provider")

T = TypeVar("T")


class LatestValue(Generic[T]):
    """Most-recent-value cell, safe for one writer and one reader thread."""

    def __init__(self, value: Optional[T] = None):
        self._value = value
        self._lock = threading.Lock()

    def set(self, value: Optional[T]):
        with self._lock:
            self._value = value

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def clear(self):
        self.set(None)


class HandTrackingProvider:
    """Holds the latest anchor per hand, fed by an async update stream."""

    def __init__(self):
        self._cells: dict[Chirality, LatestValue[HandAnchor]] = {
            Chirality.LEFT: LatestValue(),
            Chirality.RIGHT: LatestValue(),
        }
        self._running = False

    def submit(self, anchor: HandAnchor):
        """Overwrite the latest anchor for the anchor's hand."""
        self._cells[anchor.chirality].set(anchor)

    def latest(self, chirality: Chirality) -> Optional[HandAnchor]:
        return self._cells[chirality].get()

    def snapshot(self) -> dict[Chirality, Optional[HandAnchor]]:
        """Read every hand once."""
        return {c: cell.get() for c, cell in self._cells.items()}

    def clear(self):
        for cell in self._cells.values():
            cell.clear()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self, updates: AsyncIterator[HandAnchor]) -> int:
        """Consume an anchor stream until it ends. Returns updates received."""
        count = 0
        self._running = True
        logger.info("Hand tracking stream started")
        try:
            async for anchor in updates:
                self.submit(anchor)
                count += 1
        except Exception as e:
            logger.error("Hand tracking stream failed: %s", e)
            raise
        finally:
            self._running = False
            logger.info("Hand tracking stream stopped after %d updates", count)
        return count
