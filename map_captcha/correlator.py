"""Fragment correlator.

Placements reference their tile by id, and the raw data for that id may
arrive before or after the placement. :class:`TileCorrelator` keeps one
future per waiting call, keyed by tile id. Publishing a buffer resolves every
waiter on its id; cancelling resolves all waiters with ``None``.

All methods must be called from the event loop that runs the waiters.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from map_captcha.components import TileBuffer
from map_captcha.types import EMPTY_TILE_ID, TileID

logger = logging.getLogger(__name__)

TileLookupFn = Callable[[TileID], Optional[TileBuffer]]


class TileCorrelator:
    """Single-resolution signals for tile data that has not arrived yet."""

    def __init__(self) -> None:
        self._waiters: Dict[TileID, List["asyncio.Future[Optional[TileBuffer]]"]] = {}

    @property
    def pending(self) -> int:
        """Number of outstanding waits across all tile ids."""
        return sum(len(futures) for futures in self._waiters.values())

    def is_waiting(self, tile_id: TileID) -> bool:
        return bool(self._waiters.get(tile_id))

    async def await_tile(
        self, tile_id: TileID, lookup: TileLookupFn
    ) -> Optional[TileBuffer]:
        """Return the buffer for ``tile_id``, waiting until it is published.

        Arguments:
            tile_id: Referenced tile id. The empty sentinel returns ``None``
                immediately.
            lookup: Reads the current capture's buffers; consulted once before
                suspending so already-arrived data returns without waiting.

        Returns:
            TileBuffer | None: The buffer, or ``None`` if the wait was cancelled.
        """
        if tile_id == EMPTY_TILE_ID:
            return None

        tile = lookup(tile_id)
        if tile is not None:
            return tile

        future: "asyncio.Future[Optional[TileBuffer]]" = (
            asyncio.get_running_loop().create_future()
        )
        self._waiters.setdefault(tile_id, []).append(future)
        logger.debug("Waiting for tile %s", tile_id)
        try:
            return await future
        finally:
            self._discard(tile_id, future)

    def publish(self, tile: TileBuffer) -> int:
        """Resolve every waiter on ``tile.tile_id``. Returns how many were woken."""
        futures = self._waiters.pop(tile.tile_id, [])
        woken = 0
        for future in futures:
            if not future.done():
                future.set_result(tile)
                woken += 1
        return woken

    def cancel_all(self) -> int:
        """Resolve every outstanding waiter with ``None``."""
        waiters, self._waiters = self._waiters, {}
        woken = 0
        for futures in waiters.values():
            for future in futures:
                if not future.done():
                    future.set_result(None)
                    woken += 1
        if woken:
            logger.debug("Cancelled %d pending tile waits", woken)
        return woken

    def _discard(
        self, tile_id: TileID, future: "asyncio.Future[Optional[TileBuffer]]"
    ) -> None:
        futures = self._waiters.get(tile_id)
        if not futures:
            return
        if future in futures:
            futures.remove(future)
        if not futures:
            del self._waiters[tile_id]
