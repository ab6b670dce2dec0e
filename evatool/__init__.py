"""DS Evangelion image tool: 4bpp tiled binary <-> grayscale PNG."""

__version__ = '1.0.0'
