import numpy as np
import pytest

from periodic_reach import (
    AmbiguousStartError,
    GridError,
    Lattice,
    MalformedGridError,
    MissingStartError,
    ReachError,
    Window,
    parse_grid,
)


def test_parse_example(example):
    assert example.shape == (11, 11)
    assert example.start == (5, 5)
    assert example.is_open(example.start)
    assert not example.is_open((1, 5))
    assert example.cells.sum() == 121 - 40


def test_start_is_open_and_roundtrips(example, example_text):
    assert example.to_text() == example_text.strip()
    assert parse_grid(example.to_text()) == example


def test_trailing_blank_lines_and_crlf_ignored():
    lattice = parse_grid("S.\r\n.#\r\n\n\n")
    assert lattice.shape == (2, 2)
    assert lattice.start == (0, 0)
    assert not lattice.is_open((1, 1))


def test_ragged_rows_rejected():
    with pytest.raises(MalformedGridError, match="row 1"):
        parse_grid("S..\n..\n...")


def test_unknown_character_rejected():
    with pytest.raises(MalformedGridError, match="'x'"):
        parse_grid("S.\n.x")


def test_empty_grid_rejected():
    with pytest.raises(MalformedGridError):
        parse_grid("\n\n")


def test_missing_start():
    with pytest.raises(MissingStartError):
        parse_grid("..\n..")


def test_ambiguous_start_reports_positions():
    with pytest.raises(AmbiguousStartError) as info:
        parse_grid("S.\n.S")
    assert info.value.positions == [(0, 0), (1, 1)]


def test_grid_errors_share_a_base():
    for exc in (MalformedGridError, MissingStartError, AmbiguousStartError):
        assert issubclass(exc, GridError)
        assert issubclass(exc, ReachError)
        assert issubclass(exc, ValueError)


def test_lattice_is_immutable(example):
    with pytest.raises(ValueError):
        example.cells[0, 0] = False
    with pytest.raises(AttributeError):
        example.start = (0, 0)


def test_constructor_opens_start_and_copies():
    cells = np.zeros((3, 3), dtype=bool)
    lattice = Lattice(cells=cells, start=(1, 1))
    assert lattice.is_open((1, 1))
    assert not cells[1, 1]


@pytest.mark.parametrize("start", [(3, 0), (0, 3), (-1, 1)])
def test_start_outside_grid_is_malformed(start):
    cells = np.ones((3, 3), dtype=bool)
    with pytest.raises(MalformedGridError, match="outside the grid"):
        Lattice(cells=cells, start=start)


def test_equal_content_hashes_equal(example_text):
    a = parse_grid(example_text)
    b = parse_grid(example_text)
    assert a is not b
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_open_lines(example, open5):
    assert example.open_rows() == [0, 10]
    assert example.open_cols() == [0, 10]
    assert example.has_open_border()
    assert not example.has_open_cross()
    assert open5.has_open_border()
    assert open5.has_open_cross()


def test_window_geometry():
    window = Window.centered((2, 3), 2)
    assert window.shape == (5, 5)
    assert (window.top, window.left) == (0, 1)
    assert window.contains((4, 5))
    assert not window.contains((5, 5))
    assert window.to_index((2, 3)) == (2, 2)
    assert window.to_plane((0, 0)) == (0, 1)
    with pytest.raises(ValueError):
        Window.centered((0, 0), -1)
