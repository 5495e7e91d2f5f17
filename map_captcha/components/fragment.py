"""Fragment component.

One placed (or directly referenced) tile occurrence within a capture. The
resolved ``tile`` is ``None`` when the tile id was the empty sentinel or the
wait for its data was cancelled; such fragments composite as blank.
"""

from dataclasses import dataclass
from typing import Optional

from map_captcha.components.position import Position
from map_captcha.components.tile import TileBuffer
from map_captcha.types import TileID


@dataclass(frozen=True)
class Fragment:
    """Resolved tile occurrence.

    Attributes:
        position: World position of the holder (origin for direct references).
        tile_id: Referenced tile id.
        rotation: Clockwise quarter turns in ``[0, 3]``.
        tile: Resolved raw buffer, or ``None`` for a blank fragment.
    """

    position: Position
    tile_id: TileID
    rotation: int = 0
    tile: Optional[TileBuffer] = None

    def __post_init__(self) -> None:
        if not 0 <= self.rotation <= 3:
            raise ValueError(f"Rotation must be in [0, 3], got {self.rotation}")
