"""Layout engine.

Collapses the 3-D placement positions of a capture to a 2-D grid of tile
cells and assigns each distinct coordinate value a pixel offset.

Captures are planar: either all placements share one x (the wall runs along
z) or the wall runs along x. Horizontal order depends on the orientation of
the holders; vertical order is always descending because world y grows
upward while image rows grow downward.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from pyrsistent import PMap, pmap

from map_captcha.components import Position
from map_captcha.state import CaptureState
from map_captcha.types import (
    ASCENDING_ORIENTATIONS,
    TILE_SIZE,
    HorizontalAxis,
    Orientation,
)


@dataclass(frozen=True)
class CoordinateMapping:
    """Coordinate value -> pixel offset along one axis.

    Attributes:
        offsets: ``TILE_SIZE * index`` for each distinct value in sort order.
        extent: Canvas length along this axis in pixels.
    """

    offsets: PMap[int, int]
    extent: int


SINGLE_CELL = CoordinateMapping(offsets=pmap({0: 0}), extent=TILE_SIZE)


@dataclass(frozen=True)
class Layout:
    """Canvas geometry for one capture."""

    axis: HorizontalAxis
    horizontal: CoordinateMapping
    vertical: CoordinateMapping

    @property
    def width(self) -> int:
        return self.horizontal.extent

    @property
    def height(self) -> int:
        return self.vertical.extent

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def offset(self, position: Position) -> Tuple[Optional[int], Optional[int]]:
        """Return ``(left, top)`` for a position; ``None`` where no cell matches."""
        value = position.z if self.axis == "z" else position.x
        return self.horizontal.offsets.get(value), self.vertical.offsets.get(position.y)


def is_ascending(vertical: bool, orientation: Optional[Orientation]) -> bool:
    return not vertical and orientation in ASCENDING_ORIENTATIONS


def build_mapping(
    values: Sequence[int],
    vertical: bool = False,
    orientation: Optional[Orientation] = None,
) -> CoordinateMapping:
    """Assign each distinct value an offset of ``TILE_SIZE * index``.

    Arguments:
        values: Recorded coordinates along one axis; duplicates allowed.
        vertical: Building the vertical axis. Always sorted descending.
        orientation: Capture orientation; ascending horizontal order only for
            ``WEST`` and ``SOUTH``.

    Raises:
        ValueError: If ``values`` is empty.
    """
    if not values:
        raise ValueError("Cannot build a coordinate mapping from no values")

    ordered = sorted(set(values), reverse=not is_ascending(vertical, orientation))
    extent = (abs(ordered[0] - ordered[-1]) + 1) * TILE_SIZE
    offsets = pmap({value: index * TILE_SIZE for index, value in enumerate(ordered)})
    return CoordinateMapping(offsets=offsets, extent=extent)


def select_horizontal_axis(xs: Sequence[int]) -> HorizontalAxis:
    """Use z when every recorded x is identical, otherwise x."""
    return "z" if len(set(xs)) == 1 else "x"


def compute_layout(state: CaptureState) -> Layout:
    """Compute the canvas layout for the state's recorded placements.

    Without placements (only a direct reference) the layout is a single
    ``TILE_SIZE`` square cell at the origin.
    """
    if not state.has_placements:
        return Layout(axis="x", horizontal=SINGLE_CELL, vertical=SINGLE_CELL)

    axis = select_horizontal_axis(state.xs)
    values = state.zs if axis == "z" else state.xs
    return Layout(
        axis=axis,
        horizontal=build_mapping(values, orientation=state.orientation),
        vertical=build_mapping(state.ys, vertical=True, orientation=state.orientation),
    )
