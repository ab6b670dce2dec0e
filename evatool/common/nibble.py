TILE_SIZE = 8
NIBBLE_MASK = 0x0F
GRAY_STEP = 0x11  # 16 levels spread evenly over 0-255


def pack_pair(even, odd):
    """
    Pack two horizontally adjacent 4-bit pixels into one byte.
    The odd (right) pixel goes in the high nibble, the even (left) pixel in the low one.
    """
    return ((odd & NIBBLE_MASK) << 4) | (even & NIBBLE_MASK)

def unpack_pair(val):
    """Inverse of pack_pair. Returns (even, odd)."""
    return val & NIBBLE_MASK, (val >> 4) & NIBBLE_MASK

def level_to_gray(level):
    return level * GRAY_STEP

def gray_to_level(gray):
    return gray // GRAY_STEP

def is_tile_aligned(val):
    return val > 0 and val % TILE_SIZE == 0
