"""Map color palette and index decoding.

A map tile stores one byte per pixel. The byte is ``base * 4 + shade``: the
base color comes from :data:`BASE_COLORS` and the shade scales it by one of
:data:`SHADE_MULTIPLIERS`. Base color 0 is fully transparent. Bytes past the
last base color have no entry; decoding one is a configuration error.
"""

import json
from functools import cached_property
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
import numpy.typing as npt
from PIL import Image

from map_captcha.types import TILE_PIXELS, TILE_SIZE

UInt8Array = npt.NDArray[np.uint8]
BoolArray = npt.NDArray[np.bool_]
RGBA = Tuple[int, int, int, int]

PALETTE_SIZE = 256

SHADE_MULTIPLIERS: Tuple[int, ...] = (180, 220, 255, 135)

BASE_COLORS: Tuple[Tuple[int, int, int], ...] = (
    (0, 0, 0),  # none (transparent)
    (127, 178, 56),  # grass
    (247, 233, 163),  # sand
    (199, 199, 199),  # wool
    (255, 0, 0),  # fire
    (160, 160, 255),  # ice
    (167, 167, 167),  # metal
    (0, 124, 0),  # plant
    (255, 255, 255),  # snow
    (164, 168, 184),  # clay
    (151, 109, 77),  # dirt
    (112, 112, 112),  # stone
    (64, 64, 255),  # water
    (143, 119, 72),  # wood
    (255, 252, 245),  # quartz
    (216, 127, 51),  # orange
    (178, 76, 216),  # magenta
    (102, 153, 216),  # light blue
    (229, 229, 51),  # yellow
    (127, 204, 25),  # lime
    (242, 127, 165),  # pink
    (76, 76, 76),  # gray
    (153, 153, 153),  # light gray
    (76, 127, 153),  # cyan
    (127, 63, 178),  # purple
    (51, 76, 178),  # blue
    (102, 76, 51),  # brown
    (102, 127, 51),  # green
    (153, 51, 51),  # red
    (25, 25, 25),  # black
    (250, 238, 77),  # gold
    (92, 219, 213),  # diamond
    (74, 128, 255),  # lapis
    (0, 217, 58),  # emerald
    (129, 86, 49),  # podzol
    (112, 2, 0),  # nether
    (209, 177, 161),  # terracotta white
    (159, 82, 36),  # terracotta orange
    (149, 87, 108),  # terracotta magenta
    (112, 108, 138),  # terracotta light blue
    (186, 133, 36),  # terracotta yellow
    (103, 117, 53),  # terracotta lime
    (160, 77, 78),  # terracotta pink
    (57, 41, 35),  # terracotta gray
    (135, 107, 98),  # terracotta light gray
    (87, 92, 92),  # terracotta cyan
    (122, 73, 88),  # terracotta purple
    (76, 62, 92),  # terracotta blue
    (76, 50, 35),  # terracotta brown
    (76, 82, 42),  # terracotta green
    (142, 60, 46),  # terracotta red
    (37, 22, 16),  # terracotta black
    (189, 48, 49),  # crimson nylium
    (148, 63, 97),  # crimson stem
    (92, 25, 29),  # crimson hyphae
    (22, 126, 134),  # warped nylium
    (58, 142, 140),  # warped stem
    (86, 44, 62),  # warped hyphae
    (20, 180, 133),  # warped wart block
    (100, 100, 100),  # deepslate
    (216, 175, 147),  # raw iron
    (127, 167, 150),  # glow lichen
)


class PaletteError(ValueError):
    """Raised for palette files that cannot be read or indices with no color."""


def shade(rgb: Tuple[int, int, int], multiplier: int) -> RGBA:
    r, g, b = rgb
    return (r * multiplier // 255, g * multiplier // 255, b * multiplier // 255, 255)


def default_entries() -> List[Optional[RGBA]]:
    """Expand :data:`BASE_COLORS` into the sparse 256-entry index table."""
    entries: List[Optional[RGBA]] = [None] * PALETTE_SIZE
    for base, rgb in enumerate(BASE_COLORS):
        for offset, multiplier in enumerate(SHADE_MULTIPLIERS):
            entries[base * 4 + offset] = (0, 0, 0, 0) if base == 0 else shade(rgb, multiplier)
    return entries


def _parse_entry(index: int, raw: Any) -> Optional[RGBA]:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)) or len(raw) not in (3, 4):
        raise PaletteError(f"Palette entry {index} must be [r, g, b] or [r, g, b, a]: {raw!r}")
    channels = [int(c) for c in raw]
    if any(not 0 <= c <= 255 for c in channels):
        raise PaletteError(f"Palette entry {index} has a channel outside 0-255: {raw!r}")
    if len(channels) == 3:
        channels.append(255)
    r, g, b, a = channels
    return (r, g, b, a)


class Palette:
    """Fixed byte -> RGBA lookup table.

    Lookups are vectorized: a whole tile is decoded with one fancy index into
    a ``(256, 4)`` array, so each distinct index is resolved once per call.
    """

    def __init__(self, entries: Sequence[Optional[RGBA]]):
        if len(entries) > PALETTE_SIZE:
            raise PaletteError(f"Palette has {len(entries)} entries, max {PALETTE_SIZE}")
        table: UInt8Array = np.zeros((PALETTE_SIZE, 4), dtype=np.uint8)
        defined: BoolArray = np.zeros(PALETTE_SIZE, dtype=np.bool_)
        for index, entry in enumerate(entries):
            if entry is not None:
                table[index] = entry
                defined[index] = True
        table.setflags(write=False)
        defined.setflags(write=False)
        self._table = table
        self._defined = defined

    @classmethod
    def default(cls) -> "Palette":
        return cls(default_entries())

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Palette":
        """Load a palette file.

        The file holds either a list indexed by byte value or an object keyed
        by the decimal byte value. Entries are ``[r, g, b]``, ``[r, g, b, a]``
        or ``null`` for a gap.
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise PaletteError(f"Cannot read palette {path}: {exc}") from exc

        entries: List[Optional[RGBA]] = [None] * PALETTE_SIZE
        if isinstance(raw, list):
            if len(raw) > PALETTE_SIZE:
                raise PaletteError(f"Palette {path} has {len(raw)} entries, max {PALETTE_SIZE}")
            for index, value in enumerate(raw):
                entries[index] = _parse_entry(index, value)
        elif isinstance(raw, dict):
            for key, value in raw.items():
                index = int(key)
                if not 0 <= index < PALETTE_SIZE:
                    raise PaletteError(f"Palette {path} has out-of-range index {key!r}")
                entries[index] = _parse_entry(index, value)
        else:
            raise PaletteError(f"Palette {path} must be a JSON list or object")
        return cls(entries)

    def __contains__(self, index: int) -> bool:
        return 0 <= index < PALETTE_SIZE and bool(self._defined[index])

    def __getitem__(self, index: int) -> RGBA:
        if index not in self:
            raise PaletteError(f"No palette color for index {index}")
        r, g, b, a = (int(c) for c in self._table[index])
        return (r, g, b, a)

    @cached_property
    def gaps(self) -> Tuple[int, ...]:
        return tuple(int(i) for i in np.flatnonzero(~self._defined))

    def decode(self, indices: bytes) -> UInt8Array:
        """Decode index bytes to an ``(N, 4)`` RGBA array.

        Raises:
            PaletteError: If any index has no palette entry.
        """
        idx = np.frombuffer(indices, dtype=np.uint8)
        missing = ~self._defined[idx]
        if missing.any():
            unknown = sorted(set(int(i) for i in idx[missing]))
            raise PaletteError(f"No palette color for indices {unknown}")
        return self._table[idx]

    def decode_to_image(self, indices: bytes) -> Image.Image:
        """Decode one tile's indices to a ``TILE_SIZE`` square RGBA image."""
        if len(indices) != TILE_PIXELS:
            raise ValueError(f"Tile has {len(indices)} bytes, expected {TILE_PIXELS}")
        rgba = self.decode(indices).reshape(TILE_SIZE, TILE_SIZE, 4)
        return Image.fromarray(np.ascontiguousarray(rgba))
