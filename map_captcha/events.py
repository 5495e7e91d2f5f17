"""Typed inbound events.

Upstream notifications are loosely shaped. They are converted to these
frozen records once, at the boundary, so the capture systems only ever see
:class:`TileBuffer`, :class:`Position` and plain integers.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from map_captcha.components import Position, TileBuffer
from map_captcha.protocol import MetadataKeys
from map_captcha.types import EntityID, TileID


@dataclass(frozen=True)
class ItemDescriptor:
    """Item attached to a holder or carried by a payload.

    Attributes:
        name: Registry name, e.g. ``"filled_map"``.
        tile_id: Map id from the item's tag; ``None`` if the item has no tag.
    """

    name: str
    tile_id: Optional[TileID] = None


@dataclass(frozen=True)
class MetadataEntry:
    key: int
    value: Any


@dataclass(frozen=True)
class Holder:
    """Known entity state for a placement holder."""

    entity_id: EntityID
    entity_type: Optional[str]
    position: Position
    yaw: float

    @classmethod
    def from_world(
        cls,
        entity_id: EntityID,
        entity_type: Optional[str],
        position: Tuple[float, float, float],
        yaw: float,
    ) -> "Holder":
        return cls(entity_id, entity_type, Position.from_world(position), float(yaw))


@dataclass(frozen=True)
class TileDataEvent:
    """Raw data for one tile arrived."""

    tile_id: TileID
    data: bytes

    def to_tile(self) -> TileBuffer:
        return TileBuffer(tile_id=self.tile_id, data=bytes(self.data))


@dataclass(frozen=True)
class PlacementEvent:
    """A holder's metadata changed.

    ``holder`` is ``None`` when the entity is not known to the event source.
    """

    holder_id: EntityID
    holder: Optional[Holder]
    item: Optional[ItemDescriptor]
    rotation: int = 0


@dataclass(frozen=True)
class DirectTileEvent:
    """A payload carrying an item outside of any placement."""

    item: Optional[ItemDescriptor]


def _find(metadata: Sequence[MetadataEntry], key: int) -> Any:
    for entry in metadata:
        if entry.key == key:
            return entry.value
    return None


def item_from_metadata(
    metadata: Sequence[MetadataEntry], keys: MetadataKeys
) -> Optional[ItemDescriptor]:
    value = _find(metadata, keys.item)
    if value is None or isinstance(value, ItemDescriptor):
        return value
    raise ValueError(f"Metadata key {keys.item} is not an item: {value!r}")


def rotation_from_metadata(metadata: Sequence[MetadataEntry], keys: MetadataKeys) -> int:
    """Return the holder rotation as quarter turns in ``[0, 3]``; absent means 0."""
    value = _find(metadata, keys.rotate)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Metadata key {keys.rotate} is not a rotation: {value!r}")
    return value % 4


def placement_from_metadata(
    holder_id: EntityID,
    holder: Optional[Holder],
    metadata: Sequence[MetadataEntry],
    keys: MetadataKeys,
) -> PlacementEvent:
    """Build a :class:`PlacementEvent` from an entity metadata update."""
    return PlacementEvent(
        holder_id=holder_id,
        holder=holder,
        item=item_from_metadata(metadata, keys),
        rotation=rotation_from_metadata(metadata, keys),
    )
