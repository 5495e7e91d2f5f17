import pytest

from map_captcha.components import ORIGIN, Fragment, Position
from map_captcha.state import CaptureState
from map_captcha.systems.accumulate import (
    add_direct_fragment,
    add_fragment,
    is_complete,
    orientation_from_yaw,
    record_placement,
    record_tile_buffer,
)
from map_captcha.types import Orientation
from tests.test_utils import FIRE, make_tile


@pytest.mark.parametrize(
    "yaw, orientation",
    [
        (1.57, Orientation.WEST),
        (2.4, Orientation.WEST),
        (3.14, Orientation.SOUTH),
        (4.71, Orientation.EAST),
        (0.0, Orientation.NORTH),
        (0.49, Orientation.NORTH),
        (2.5, Orientation.SOUTH),
    ],
)
def test_orientation_from_known_yaw(yaw: float, orientation: Orientation) -> None:
    assert orientation_from_yaw(yaw) == orientation


@pytest.mark.parametrize("yaw", [0.8, 3.9, 6.28, -1.57])
def test_orientation_from_unknown_yaw_is_unset(yaw: float) -> None:
    assert orientation_from_yaw(yaw) is None


def test_record_tile_buffer_last_write_wins() -> None:
    state = record_tile_buffer(CaptureState(), make_tile(3))
    replacement = make_tile(3, FIRE)
    state = record_tile_buffer(state, replacement)
    assert len(state.tile_buffers) == 1
    assert state.tile_buffers[3] is replacement


def test_reducers_return_new_state() -> None:
    empty = CaptureState()
    state = record_tile_buffer(empty, make_tile(1))
    assert state is not empty
    assert len(empty.tile_buffers) == 0


def test_record_placement_tracks_coordinates_and_orientation() -> None:
    state = record_placement(CaptureState(), Position(1, 2, 3), Orientation.WEST)
    state = record_placement(state, Position(4, 5, 6), None)
    assert list(state.xs) == [1, 4]
    assert list(state.ys) == [2, 5]
    assert list(state.zs) == [3, 6]
    # Latest placement wins, even when unset.
    assert state.orientation is None
    assert len(state.fragments) == 0


def test_direct_fragment_skips_coordinates() -> None:
    tile = make_tile(5)
    state = add_direct_fragment(CaptureState(), 5, tile)
    assert list(state.fragments) == [Fragment(position=ORIGIN, tile_id=5, rotation=0, tile=tile)]
    assert len(state.xs) == len(state.ys) == len(state.zs) == 0
    assert not state.has_placements


def test_incomplete_while_buffers_outnumber_fragments() -> None:
    state = CaptureState()
    for tile_id in (1, 2, 3):
        state = record_tile_buffer(state, make_tile(tile_id))

    for count, tile_id in enumerate((1, 2, 3), start=1):
        assert not is_complete(state)
        state = record_placement(state, Position(tile_id, 0, 0), None)
        state = add_fragment(
            state, Fragment(Position(tile_id, 0, 0), tile_id, tile=state.tile_buffers[tile_id])
        )
        assert is_complete(state) is (count == 3)


def test_incomplete_while_placement_is_unresolved() -> None:
    state = record_tile_buffer(CaptureState(), make_tile(1))
    state = add_direct_fragment(state, 1, state.tile_buffers[1])
    assert is_complete(state)

    pending = record_placement(state, Position(0, 0, 0), None)
    pending = record_placement(pending, Position(1, 0, 0), None)
    assert not is_complete(pending)


def test_rotation_must_be_quarter_turns() -> None:
    with pytest.raises(ValueError):
        Fragment(ORIGIN, 1, rotation=4)


def test_description_counts() -> None:
    state = record_tile_buffer(CaptureState(), make_tile(1))
    assert state.description["tile_buffers"] == 1
    assert state.description["fragments"] == 0
