"""Protocol-version policy.

Which upstream protocol versions are supported, which entity metadata keys
carry a holder's item and rotation for a given version, and which entity and
item names qualify for a capture.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

VersionTuple = Tuple[int, ...]

# Exclusive bounds.
MIN_VERSION: VersionTuple = (1, 13, 1)
MAX_VERSION: VersionTuple = (1, 20, 5)

FRAME_ENTITIES = frozenset({"item_frame", "item_frames", "glow_item_frame"})
FILLED_MAP = "filled_map"


@dataclass(frozen=True)
class MetadataKeys:
    """Entity metadata indices for a holder's rotation and item."""

    rotate: int
    item: int


def parse_version(version: str) -> VersionTuple:
    """Parse a dotted release string such as ``"1.16.5"``.

    Raises:
        ValueError: If a component is not an integer.
    """
    try:
        return tuple(int(part) for part in version.strip().split("."))
    except ValueError:
        raise ValueError(f"Malformed protocol version: {version!r}") from None


def is_supported_version(version: str) -> bool:
    return MIN_VERSION < parse_version(version) < MAX_VERSION


def metadata_keys(version: str) -> MetadataKeys:
    parsed = parse_version(version)
    if parsed <= (1, 13, 2):
        return MetadataKeys(rotate=7, item=6)
    if parsed <= (1, 16, 5):
        return MetadataKeys(rotate=8, item=7)
    return MetadataKeys(rotate=9, item=8)


def is_frame(entity_type: Optional[str], allowed: frozenset = FRAME_ENTITIES) -> bool:
    return entity_type in allowed


def is_filled_map(item_name: Optional[str], filled: str = FILLED_MAP) -> bool:
    return item_name is not None and item_name == filled
