"""Common type aliases, constants and enumerations.

``Orientation`` codes are the raw strings produced by the yaw table; the
layout engine only distinguishes the ascending pair (``"1"``, ``"2"``) from
the rest.
"""

from enum import StrEnum
from typing import Dict, Literal

TileID = int
EntityID = int

TILE_SIZE = 128
TILE_PIXELS = TILE_SIZE * TILE_SIZE

# Sentinel tile id meaning "no backing data".
EMPTY_TILE_ID: TileID = 0

HorizontalAxis = Literal["x", "z"]


class Orientation(StrEnum):
    """Cardinal facing of a placement holder, keyed by its yaw code."""

    WEST = "1"
    SOUTH = "2"
    EAST = "3"
    NORTH = "4"


# Rounded yaw (radians) -> orientation. Other rounded values have no entry.
YAW_TO_ORIENTATION: Dict[int, Orientation] = {
    2: Orientation.WEST,
    3: Orientation.SOUTH,
    5: Orientation.EAST,
    0: Orientation.NORTH,
}

ASCENDING_ORIENTATIONS = frozenset({Orientation.WEST, Orientation.SOUTH})
