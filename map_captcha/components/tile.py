"""Tile buffer component.

Raw per-pixel color indices for one 128x128 map tile. Buffers are never
mutated after insertion into a capture; a repeated id replaces the whole
buffer.
"""

from dataclasses import dataclass

from map_captcha.types import TILE_PIXELS, TileID


@dataclass(frozen=True)
class TileBuffer:
    """Color-index bytes for one tile.

    Attributes:
        tile_id: Opaque positive tile identifier.
        data: Exactly ``TILE_PIXELS`` palette indices, row major.
    """

    tile_id: TileID
    data: bytes

    def __post_init__(self) -> None:
        if self.tile_id < 0:
            raise ValueError(f"Tile id must be non-negative, got {self.tile_id}")
        if len(self.data) != TILE_PIXELS:
            raise ValueError(
                f"Tile {self.tile_id} has {len(self.data)} bytes, expected {TILE_PIXELS}"
            )
