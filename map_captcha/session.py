"""Capture session.

:class:`CaptureSession` is the explicit handle every event handler runs
against. It owns the current immutable :class:`CaptureState`, the
:class:`TileCorrelator` for tile data that has not arrived yet, the stop flag
and the success listeners.

Handlers are meant to be driven from one event loop. Tile-data events are
synchronous; placement and direct-reference handlers are coroutines because
they may suspend until their tile data arrives. While one is suspended,
further events (in particular tile data) are still processed.

A capture is assembled as soon as :func:`is_complete` holds after a fragment
is added. The session state is swapped for a fresh ``CaptureState`` before
the image is handed to the listeners.
"""

import logging
from typing import Callable, List, Optional, Sequence

from PIL import Image

from map_captcha.components import Fragment, TileBuffer
from map_captcha.config import CaptureConfig
from map_captcha.correlator import TileCorrelator
from map_captcha.events import (
    DirectTileEvent,
    Holder,
    MetadataEntry,
    PlacementEvent,
    TileDataEvent,
    placement_from_metadata,
)
from map_captcha.protocol import (
    MetadataKeys,
    is_filled_map,
    is_frame,
    is_supported_version,
    metadata_keys,
)
from map_captcha.renderer.compositor import assemble
from map_captcha.renderer.palette import Palette
from map_captcha.state import CaptureState
from map_captcha.systems.accumulate import (
    add_direct_fragment,
    add_fragment,
    is_complete,
    orientation_from_yaw,
    record_placement,
    record_tile_buffer,
)
from map_captcha.systems.layout import compute_layout
from map_captcha.types import EMPTY_TILE_ID, EntityID, TileID

logger = logging.getLogger(__name__)

SuccessListener = Callable[[Image.Image], None]


class CaptureSession:
    """Accumulates one capture at a time and emits the assembled image."""

    state: CaptureState
    stopped: bool
    keys: Optional[MetadataKeys]

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        palette: Optional[Palette] = None,
        version: Optional[str] = None,
    ):
        self.config = config or CaptureConfig()
        self.palette = palette or self.config.load_palette()
        self.correlator = TileCorrelator()
        self.state = CaptureState()
        self.stopped = self.config.start_stopped
        self.keys = None
        self._listeners: List[SuccessListener] = []
        # Bumped on every stop/resume; waits that span a bump are discarded.
        self._epoch = 0
        if version is not None:
            self.on_login(version)

    # -------- Control surface --------

    def stop(self) -> None:
        self._update_state(True)

    def resume(self) -> None:
        self._update_state(False)

    def _update_state(self, stopped: bool) -> None:
        if self.stopped == stopped:
            return
        self.stopped = stopped
        self._epoch += 1
        self.reset()
        if stopped:
            self.correlator.cancel_all()
        logger.info("Capture %s", "stopped" if stopped else "resumed")

    def reset(self) -> None:
        """Discard the current capture."""
        self.state = CaptureState()

    def add_success_listener(self, listener: SuccessListener) -> None:
        self._listeners.append(listener)

    def remove_success_listener(self, listener: SuccessListener) -> None:
        self._listeners.remove(listener)

    # -------- Inbound events --------

    def on_login(self, version: str) -> None:
        """Resolve protocol settings for ``version``; stop if it is unsupported."""
        if not is_supported_version(version):
            logger.error("Unsupported protocol version: %s", version)
            self.stop()
            return
        self.keys = metadata_keys(version)
        if self.stopped:
            return
        self.reset()

    def on_tile_data(self, event: TileDataEvent) -> None:
        if self.stopped:
            return
        tile = event.to_tile()
        self.state = record_tile_buffer(self.state, tile)
        woken = self.correlator.publish(tile)
        logger.debug("Stored tile %s (%d waiting)", tile.tile_id, woken)

    async def on_direct_tile(self, event: DirectTileEvent) -> Optional[Image.Image]:
        """Handle a filled-tile reference outside any placement.

        Returns:
            Image.Image | None: The capture image if this fragment completed it.
        """
        if self.stopped:
            return None
        item = event.item
        if item is None or not is_filled_map(item.name, self.config.filled_item):
            return None

        tile_id = item.tile_id if item.tile_id is not None else EMPTY_TILE_ID
        epoch = self._epoch
        tile = await self._await_tile(tile_id)
        if self.stopped or epoch != self._epoch:
            return None

        self.state = add_direct_fragment(self.state, tile_id, tile)
        return self._complete_if_ready()

    async def on_placement(self, event: PlacementEvent) -> Optional[Image.Image]:
        """Handle a holder metadata update.

        Returns:
            Image.Image | None: The capture image if this fragment completed it.

        Raises:
            ValueError: If a qualifying holder's filled tile carries no tile id.
        """
        if self.stopped:
            return None
        holder = event.holder
        if holder is None:
            logger.warning("Entity %s not found; ignoring placement", event.holder_id)
            return None
        if not is_frame(holder.entity_type, self.config.frame_entities):
            return None
        item = event.item
        if item is None or not is_filled_map(item.name, self.config.filled_item):
            return None
        if item.tile_id is None:
            raise ValueError(f"Filled tile on holder {holder.entity_id} has no tile id")

        orientation = orientation_from_yaw(holder.yaw)
        if orientation is None:
            logger.warning(
                "Holder %s has yaw %.3f outside the orientation table",
                holder.entity_id,
                holder.yaw,
            )
        self.state = record_placement(self.state, holder.position, orientation)

        epoch = self._epoch
        tile = await self._await_tile(item.tile_id)
        if self.stopped or epoch != self._epoch:
            return None

        fragment = Fragment(
            position=holder.position,
            tile_id=item.tile_id,
            rotation=event.rotation,
            tile=tile,
        )
        self.state = add_fragment(self.state, fragment)
        logger.debug("Recorded tile %s at %s", item.tile_id, holder.position)
        return self._complete_if_ready()

    def parse_placement(
        self,
        holder_id: EntityID,
        holder: Optional[Holder],
        metadata: Sequence[MetadataEntry],
    ) -> PlacementEvent:
        """Build a placement event with this session's metadata keys."""
        if self.keys is None:
            raise ValueError("Metadata keys are not resolved; call on_login first")
        return placement_from_metadata(holder_id, holder, metadata, self.keys)

    # -------- Internals --------

    async def _await_tile(self, tile_id: TileID) -> Optional[TileBuffer]:
        return await self.correlator.await_tile(
            tile_id, lambda tid: self.state.tile_buffers.get(tid)
        )

    def _complete_if_ready(self) -> Optional[Image.Image]:
        state = self.state
        if self.stopped or not is_complete(state):
            return None

        layout = compute_layout(state)
        image = assemble(state.fragments, layout, self.palette, self.config.background)
        self.reset()
        logger.info(
            "Capture complete: %d fragments, %dx%d",
            len(state.fragments),
            image.width,
            image.height,
        )
        for listener in list(self._listeners):
            listener(image)
        return image
