"""Tile codec for DS Evangelion 4bpp images.

Converts between the game's headerless tiled binary format and 8-bit
grayscale images.

Binary format (no header, pure pixel data):
  The image is split into 8x8 tiles written sequentially, left to right,
  top to bottom across the tile grid:
    Tile1 Tile2 Tile3
    Tile4 Tile5 Tile6

  Each tile is 8 rows of 4 bytes (32 bytes). Every byte packs two
  horizontally adjacent pixels, right pixel in the high nibble, left pixel
  in the low nibble, so pixel numbering inside a tile reads:
     2  1  4  3  6  5  8  7
    10  9 12 11 14 13 16 15
    ...
    58 57 60 59 62 61 64 63

  The format stores no dimensions. Width must be supplied; height is
  derived from the byte count (width * height / 2 bytes in total).

Grayscale format:
  Any image Pillow can open. Only the red channel is read and each of the
  16 levels maps to 0x11 * level (0, 17, 34, ... 255).
"""

from enum import Enum

import numpy as np
from PIL import Image

from evatool.common.nibble import (
    TILE_SIZE, NIBBLE_MASK, pack_pair, unpack_pair,
    level_to_gray, gray_to_level, is_tile_aligned,
)


class TileCodecError(ValueError):
    pass

class InvalidDimension(TileCodecError):
    pass

class TruncatedData(TileCodecError):
    pass

class UnsupportedFormat(TileCodecError):
    pass


def _check_dimensions(width, height):
    if not is_tile_aligned(width):
        raise InvalidDimension(f"Width must be a positive multiple of {TILE_SIZE}, got {width}")
    if not is_tile_aligned(height):
        raise InvalidDimension(f"Height must be a positive multiple of {TILE_SIZE}, got {height}")


class PixelGrid:
    """
    A width x height grid of 4-bit pixel values, indexed pixels[x, y].
    Both dimensions are positive multiples of 8.
    """

    def __init__(self, width, height, pixels=None):
        _check_dimensions(width, height)
        self.width = width
        self.height = height

        if pixels is None:
            self.pixels = np.zeros((width, height), dtype=np.uint8)
            return

        arr = np.asarray(pixels)
        if arr.shape != (width, height):
            raise ValueError(f"Pixel array shape {arr.shape} does not match ({width}, {height})")
        if arr.size and (arr.min() < 0 or arr.max() > NIBBLE_MASK):
            raise ValueError(f"Pixel values must be in 0-{NIBBLE_MASK}")
        self.pixels = arr.astype(np.uint8)

    @property
    def tile_count(self):
        return (self.width // TILE_SIZE) * (self.height // TILE_SIZE)

    def get(self, x, y):
        return int(self.pixels[x, y])

    def set(self, x, y, value):
        if not 0 <= value <= NIBBLE_MASK:
            raise ValueError(f"Pixel value {value} out of range 0-{NIBBLE_MASK}")
        self.pixels[x, y] = value

    def __eq__(self, other):
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.pixels, other.pixels))

    def __repr__(self):
        return f"PixelGrid({self.width}x{self.height}, {self.tile_count} tiles)"


class ImageType(Enum):
    BINARY = 'bin'
    PNG = 'png'

    @classmethod
    def from_token(cls, token):
        try:
            return cls(token)
        except ValueError:
            supported = ', '.join(t.value for t in cls)
            raise UnsupportedFormat(
                f"Unsupported file format: {token}. Supported values are {supported}."
            ) from None


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def blank(width, height):
    """Create an all-zero grid."""
    return PixelGrid(width, height)


def decode_tiled(data, width):
    """Decode headerless tiled 4bpp data into a PixelGrid of the given width.

    Raises TruncatedData if the byte count does not cover whole pixel rows.
    """
    if not is_tile_aligned(width):
        raise InvalidDimension(f"Width must be a positive multiple of {TILE_SIZE}, got {width}")

    row_bytes = width // 2
    if len(data) % row_bytes != 0:
        raise TruncatedData(
            f"Binary data truncated: {len(data)} bytes is not a whole number "
            f"of {row_bytes}-byte rows for width {width}"
        )
    height = len(data) // row_bytes
    _check_dimensions(width, height)

    tiles_x = width // TILE_SIZE
    tiles_y = height // TILE_SIZE

    # [tile_y, tile_x, row, pair]
    packed = np.frombuffer(bytes(data), dtype=np.uint8).reshape(
        tiles_y, tiles_x, TILE_SIZE, TILE_SIZE // 2)
    even, odd = unpack_pair(packed)
    # interleave back to [tile_y, tile_x, row, column]
    tiles = np.stack((even, odd), axis=-1).reshape(tiles_y, tiles_x, TILE_SIZE, TILE_SIZE)
    rows = tiles.transpose(0, 2, 1, 3).reshape(height, width)

    return PixelGrid(width, height, rows.T)


def encode_tiled(grid):
    """Encode a PixelGrid to tiled 4bpp bytes (width * height / 2 of them)."""
    tiles_x = grid.width // TILE_SIZE
    tiles_y = grid.height // TILE_SIZE

    rows = grid.pixels.T
    tiles = rows.reshape(tiles_y, TILE_SIZE, tiles_x, TILE_SIZE).transpose(0, 2, 1, 3)
    pairs = tiles.reshape(tiles_y, tiles_x, TILE_SIZE, TILE_SIZE // 2, 2)
    packed = pack_pair(pairs[..., 0], pairs[..., 1])

    return packed.astype(np.uint8).tobytes()


def decode_grayscale(image):
    """Quantize a Pillow image to a PixelGrid using its red channel."""
    width, height = image.size
    _check_dimensions(width, height)

    red = np.asarray(image.convert('RGB'))[:, :, 0]
    return PixelGrid(width, height, gray_to_level(red).T)


def encode_grayscale(grid):
    """Render a PixelGrid as an 8-bit grayscale ('L') Pillow image."""
    gray = level_to_gray(grid.pixels.T).astype(np.uint8)
    return Image.fromarray(np.ascontiguousarray(gray))


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def _load_binary(path, width):
    if not width:
        raise InvalidDimension("Width not specified for binary format")
    with open(path, 'rb') as f:
        data = f.read()
    return decode_tiled(data, width)

def _load_png(path, width):
    with Image.open(path) as img:
        return decode_grayscale(img)

def _save_binary(grid, path):
    with open(path, 'wb') as f:
        f.write(encode_tiled(grid))

def _save_png(grid, path):
    encode_grayscale(grid).save(path, 'PNG')


_LOADERS = {
    ImageType.BINARY: _load_binary,
    ImageType.PNG: _load_png,
}

_SAVERS = {
    ImageType.BINARY: _save_binary,
    ImageType.PNG: _save_png,
}


def load_file(path, image_type, width=0):
    """Load a PixelGrid from disk. `width` is required for ImageType.BINARY."""
    return _LOADERS[image_type](path, width)


def save_file(grid, path, image_type):
    _SAVERS[image_type](grid, path)
