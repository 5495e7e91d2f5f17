"""Capture accumulation systems.

Pure reducers over :class:`map_captcha.state.CaptureState`. Two producers
feed a capture:

* Placement path: :func:`record_placement` runs as soon as the placement is
  observed, then :func:`add_fragment` once its tile has been resolved.
* Direct path: :func:`add_direct_fragment` adds one fragment at the origin
  without touching the coordinate stores.

:func:`is_complete` is evaluated after every fragment is added.
"""

import math
from dataclasses import replace
from typing import Optional

from map_captcha.components import ORIGIN, Fragment, Position, TileBuffer
from map_captcha.state import CaptureState
from map_captcha.types import YAW_TO_ORIENTATION, Orientation, TileID


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def orientation_from_yaw(yaw: float) -> Optional[Orientation]:
    """Map a holder yaw in radians to its orientation, if the rounded yaw is known."""
    return YAW_TO_ORIENTATION.get(_round_half_away(yaw))


def record_tile_buffer(state: CaptureState, tile: TileBuffer) -> CaptureState:
    """Store raw tile data; a repeated id replaces the previous buffer."""
    return replace(state, tile_buffers=state.tile_buffers.set(tile.tile_id, tile))


def record_placement(
    state: CaptureState, position: Position, orientation: Optional[Orientation]
) -> CaptureState:
    """Append a placement's coordinates and overwrite the capture orientation."""
    return replace(
        state,
        xs=state.xs.append(position.x),
        ys=state.ys.append(position.y),
        zs=state.zs.append(position.z),
        orientation=orientation,
    )


def add_fragment(state: CaptureState, fragment: Fragment) -> CaptureState:
    return replace(state, fragments=state.fragments.append(fragment))


def add_direct_fragment(
    state: CaptureState, tile_id: TileID, tile: Optional[TileBuffer]
) -> CaptureState:
    """Add the single direct-reference fragment at the origin, rotation 0."""
    return add_fragment(state, Fragment(position=ORIGIN, tile_id=tile_id, tile=tile))


def is_complete(state: CaptureState) -> bool:
    """Return True when every received buffer is matched by a fragment.

    A capture is also held back while more placements have been observed
    than fragments resolved.
    """
    return len(state.fragments) == len(state.tile_buffers) and len(state.ys) <= len(
        state.fragments
    )
