"""Immutable capture ``CaptureState``.

One capture accumulates into a single frozen :class:`CaptureState`. Systems
in :mod:`map_captcha.systems.accumulate` are pure functions that take a state
plus an input and return a *new* state; nothing is mutated in place. Resetting
a capture means swapping in a fresh ``CaptureState()``, so a handler holding
an old snapshot can never observe a half-cleared one.

Design notes:

* ``tile_buffers`` is a persistent map keyed by tile id. It is filled by raw
    tile-data events only.
* ``xs`` / ``ys`` / ``zs`` record placement positions at the time the
    placement is observed, *before* its tile is resolved. Direct references
    add a fragment but no coordinates. The completeness predicate relies on
    this asymmetry.
* ``orientation`` is overwritten by every placement, including being cleared
    by a yaw outside the known table.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pyrsistent import PMap, PVector, pmap, pvector

from map_captcha.components import Fragment, TileBuffer
from map_captcha.types import Orientation, TileID


@dataclass(frozen=True)
class CaptureState:
    """Immutable accumulation snapshot for one capture.

    Attributes:
        tile_buffers (PMap[TileID, TileBuffer]): Raw tile data received so far.
        fragments (PVector[Fragment]): Fragments in resolution order.
        xs (PVector[int]): Placement x coordinates in observation order.
        ys (PVector[int]): Placement y coordinates in observation order.
        zs (PVector[int]): Placement z coordinates in observation order.
        orientation (Orientation | None): Facing of the latest placement.
    """

    tile_buffers: PMap[TileID, TileBuffer] = pmap()
    fragments: PVector[Fragment] = pvector()
    xs: PVector[int] = pvector()
    ys: PVector[int] = pvector()
    zs: PVector[int] = pvector()
    orientation: Optional[Orientation] = None

    @property
    def has_placements(self) -> bool:
        return len(self.xs) > 0 and len(self.ys) > 0

    @property
    def description(self) -> PMap[str, Any]:
        """Counts of the populated stores, for diagnostics."""
        return pmap(
            {
                "tile_buffers": len(self.tile_buffers),
                "fragments": len(self.fragments),
                "placements": len(self.ys),
                "orientation": self.orientation,
            }
        )
