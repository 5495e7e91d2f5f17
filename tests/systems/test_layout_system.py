import pytest

from map_captcha.components import Position
from map_captcha.state import CaptureState
from map_captcha.systems.layout import (
    SINGLE_CELL,
    build_mapping,
    compute_layout,
    select_horizontal_axis,
)
from map_captcha.types import Orientation
from tests.test_utils import make_state


@pytest.mark.parametrize(
    "values",
    [[0], [3, 1, 2], [-4, 7, 0, 7], [10, 12], [5, 5, 6]],
)
def test_ascending_mapping_properties(values: list) -> None:
    mapping = build_mapping(values, orientation=Orientation.WEST)
    distinct = sorted(set(values))
    assert mapping.offsets[min(values)] == 0
    offsets = [mapping.offsets[v] for v in distinct]
    assert offsets == [i * 128 for i in range(len(distinct))]
    assert mapping.extent == 128 * (max(values) - min(values) + 1)


@pytest.mark.parametrize("orientation", [Orientation.WEST, Orientation.SOUTH])
def test_horizontal_ascending_orientations(orientation: Orientation) -> None:
    mapping = build_mapping([2, 0, 1], orientation=orientation)
    assert dict(mapping.offsets) == {0: 0, 1: 128, 2: 256}


@pytest.mark.parametrize("orientation", [Orientation.EAST, Orientation.NORTH, None])
def test_horizontal_descending_orientations(orientation: Orientation) -> None:
    mapping = build_mapping([2, 0, 1], orientation=orientation)
    assert dict(mapping.offsets) == {2: 0, 1: 128, 0: 256}


@pytest.mark.parametrize("orientation", list(Orientation) + [None])
def test_vertical_is_always_descending(orientation: Orientation) -> None:
    mapping = build_mapping([64, 65, 66], vertical=True, orientation=orientation)
    assert dict(mapping.offsets) == {66: 0, 65: 128, 64: 256}
    assert mapping.extent == 384


def test_unset_orientation_mapping_for_wide_coordinates() -> None:
    mapping = build_mapping([0, 128])
    assert dict(mapping.offsets) == {128: 0, 0: 128}
    assert mapping.extent == 128 * 129


def test_build_mapping_rejects_empty() -> None:
    with pytest.raises(ValueError):
        build_mapping([])


def test_select_horizontal_axis() -> None:
    assert select_horizontal_axis([4, 4, 4]) == "z"
    assert select_horizontal_axis([4, 5]) == "x"


def test_layout_without_placements_is_single_cell() -> None:
    layout = compute_layout(CaptureState())
    assert layout.horizontal == SINGLE_CELL
    assert layout.vertical == SINGLE_CELL
    assert layout.size == (128, 128)
    assert layout.offset(Position(0, 0, 0)) == (0, 0)


def test_layout_along_x() -> None:
    state = make_state([(0, 65, 5), (1, 65, 5), (0, 64, 5), (1, 64, 5)])
    layout = compute_layout(state)
    assert layout.axis == "x"
    assert layout.size == (256, 256)
    assert layout.offset(Position(1, 65, 5)) == (0, 0)
    assert layout.offset(Position(0, 64, 5)) == (128, 128)


def test_layout_along_z_when_x_is_constant() -> None:
    state = make_state([(7, 64, 10), (7, 64, 11), (7, 64, 12)], Orientation.SOUTH)
    layout = compute_layout(state)
    assert layout.axis == "z"
    assert layout.size == (384, 128)
    assert layout.offset(Position(7, 64, 10)) == (0, 0)
    assert layout.offset(Position(7, 64, 12)) == (256, 0)


def test_layout_offset_misses_unknown_cell() -> None:
    layout = compute_layout(make_state([(0, 64, 0), (1, 64, 0)]))
    assert layout.offset(Position(9, 64, 0)) == (None, 0)
