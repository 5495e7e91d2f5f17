import pytest

from map_captcha.components import Position
from map_captcha.events import (
    Holder,
    ItemDescriptor,
    MetadataEntry,
    TileDataEvent,
    item_from_metadata,
    placement_from_metadata,
    rotation_from_metadata,
)
from map_captcha.protocol import MetadataKeys
from map_captcha.types import TILE_PIXELS

KEYS = MetadataKeys(rotate=9, item=8)


def test_holder_from_world_floors_position() -> None:
    holder = Holder.from_world(3, "item_frame", (10.5, 64.0, -3.5), 2)
    assert holder.position == Position(10, 64, -4)
    assert holder.yaw == 2.0


def test_tile_data_event_to_tile() -> None:
    tile = TileDataEvent(tile_id=4, data=bytearray(TILE_PIXELS)).to_tile()
    assert tile.tile_id == 4
    assert isinstance(tile.data, bytes)


def test_tile_data_event_rejects_short_data() -> None:
    with pytest.raises(ValueError):
        TileDataEvent(tile_id=4, data=bytes(100)).to_tile()


def test_item_from_metadata() -> None:
    item = ItemDescriptor("filled_map", 12)
    metadata = [MetadataEntry(0, 1), MetadataEntry(8, item)]
    assert item_from_metadata(metadata, KEYS) == item
    assert item_from_metadata([MetadataEntry(0, 1)], KEYS) is None


def test_item_from_metadata_rejects_non_item() -> None:
    with pytest.raises(ValueError):
        item_from_metadata([MetadataEntry(8, "filled_map")], KEYS)


def test_rotation_defaults_to_zero() -> None:
    assert rotation_from_metadata([], KEYS) == 0
    assert rotation_from_metadata([MetadataEntry(9, None)], KEYS) == 0


def test_rotation_is_quarter_turns() -> None:
    assert rotation_from_metadata([MetadataEntry(9, 3)], KEYS) == 3
    assert rotation_from_metadata([MetadataEntry(9, 5)], KEYS) == 1


@pytest.mark.parametrize("value", [-1, 1.5, "2", True])
def test_rotation_rejects_malformed(value: object) -> None:
    with pytest.raises(ValueError):
        rotation_from_metadata([MetadataEntry(9, value)], KEYS)


def test_placement_from_metadata() -> None:
    holder = Holder(5, "item_frame", Position(1, 2, 3), 0.0)
    item = ItemDescriptor("filled_map", 7)
    event = placement_from_metadata(
        5, holder, [MetadataEntry(8, item), MetadataEntry(9, 2)], KEYS
    )
    assert event.holder == holder
    assert event.item == item
    assert event.rotation == 2
