import math

import pytest

from vttpreview.domain.errors import ConfigurationError
from vttpreview.domain.policies.layout import cell_origin, compute_grid, sprite_dimensions


@pytest.mark.parametrize("n", list(range(1, 200)) + [999, 1000, 1024, 1025, 10**6, 10**6 + 1])
def test_compute_grid_is_ceil_sqrt(n):
    columns, rows = compute_grid(n)
    assert columns == rows == math.ceil(math.sqrt(n))
    assert columns * rows >= n
    # no smaller square would fit
    assert (columns - 1) ** 2 < n


def test_compute_grid_ten_thumbnails_is_four_by_four():
    assert compute_grid(10) == (4, 4)


def test_compute_grid_perfect_squares():
    assert compute_grid(1) == (1, 1)
    assert compute_grid(9) == (3, 3)
    assert compute_grid(16) == (4, 4)


@pytest.mark.parametrize("bad", [0, -1, 2.5, "4", True])
def test_compute_grid_rejects_bad_counts(bad):
    with pytest.raises(ConfigurationError):
        compute_grid(bad)


def test_cell_origin_row_major():
    # columns=4, thumb 120x68, index 5 -> column 1, row 1
    assert cell_origin(5, 4, 120, 68) == (120, 68)
    assert cell_origin(0, 4, 120, 68) == (0, 0)
    assert cell_origin(3, 4, 120, 68) == (360, 0)
    assert cell_origin(15, 4, 120, 68) == (360, 204)


def test_sprite_dimensions():
    assert sprite_dimensions(4, 4, 120, 68) == (480, 272)
