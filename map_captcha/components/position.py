"""Position component.

Integer world block coordinates of a placement holder. Upstream positions
are floats; they are floored when the component is built from an event.
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Position:
    """World coordinate.

    Attributes:
        x: East/west block coordinate.
        y: Height block coordinate.
        z: North/south block coordinate.
    """

    x: int
    y: int
    z: int

    @classmethod
    def from_world(cls, coords: Tuple[float, float, float]) -> "Position":
        x, y, z = coords
        return cls(math.floor(x), math.floor(y), math.floor(z))


ORIGIN = Position(0, 0, 0)
