import numpy as np

from evatool.common.nibble import (
    pack_pair, unpack_pair, level_to_gray, gray_to_level, is_tile_aligned,
)


def test_pack_pair_puts_odd_pixel_in_high_nibble():
    assert pack_pair(3, 5) == 0x53
    assert pack_pair(0xF, 0) == 0x0F
    assert pack_pair(0, 0xF) == 0xF0

def test_unpack_pair_returns_even_then_odd():
    assert unpack_pair(0x53) == (3, 5)
    assert unpack_pair(0xA0) == (0, 10)

def test_helpers_work_on_arrays():
    packed = np.array([0x53, 0xFF, 0x00], dtype=np.uint8)
    even, odd = unpack_pair(packed)
    np.testing.assert_array_equal(even, [3, 15, 0])
    np.testing.assert_array_equal(odd, [5, 15, 0])
    np.testing.assert_array_equal(pack_pair(even, odd), packed)

def test_gray_levels():
    assert [level_to_gray(v) for v in (0, 1, 15)] == [0, 17, 255]
    assert all(gray_to_level(level_to_gray(v)) == v for v in range(16))

def test_is_tile_aligned():
    assert is_tile_aligned(8)
    assert is_tile_aligned(64)
    assert not is_tile_aligned(0)
    assert not is_tile_aligned(-8)
    assert not is_tile_aligned(12)
