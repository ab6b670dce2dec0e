#!/usr/bin/env python3
"""DS Evangelion image conversion tool.

Creates blank images and converts between the game's 4bpp tiled binary
format and grayscale PNG.

Usage:
  evatool n <bin | png> <width> <height> <filename>
      Creates a new blank image and saves it

  evatool c <bin | png> [<width>] <input file> <bin | png> <output file>
      Converts an <input file> image to <output file>
      <width> required for binary format

  -v / --verbose  Show image details and tracebacks for errors

Exit status is 0 on success (or when only this help is printed), 1 on error.
"""

import argparse
import sys
import traceback

from evatool.tilecodec import (
    ImageType, TileCodecError, UnsupportedFormat,
    blank, load_file, save_file,
)

COMMANDS = ('n', 'c')


def print_info():
    print("DS Evangelion image conversion tool.")
    print()
    print("Usage:")
    print("  evatool n <bin | png> <width> <height> <filename>")
    print("  Creates a new blank image and saves it")
    print()
    print("  evatool c <bin | png> [<width>] <input file> <bin | png> <output file>")
    print("  Converts an <input file> image to <output file>")
    print("  <width> required for binary format")


def _report_error(e, verbose):
    print(f"Error: {e}")
    if verbose:
        traceback.print_exc()


def _save(grid, path, image_type, verbose):
    save_file(grid, path, image_type)
    if verbose:
        print(f"  {image_type.value}: {grid.width}x{grid.height}, {grid.tile_count} tiles")
    print(f"Wrote {path}")


def cmd_new(params, fmt, verbose):
    try:
        width, height = int(params[2]), int(params[3])
    except ValueError:
        print("Error parsing width and height.")
        return 1

    try:
        grid = blank(width, height)
        _save(grid, params[-1], fmt, verbose)
    except (TileCodecError, OSError) as e:
        _report_error(e, verbose)
        return 1
    return 0


def cmd_convert(params, in_fmt, verbose):
    width = 0
    if in_fmt is ImageType.BINARY:
        try:
            width = int(params[2])
        except ValueError:
            print("Width required for binary input.")
            return 1

    input_file, out_token, output_file = params[-3:]
    try:
        out_fmt = ImageType.from_token(out_token)
    except UnsupportedFormat as e:
        print(e)
        return 1

    try:
        grid = load_file(input_file, in_fmt, width)
        if verbose:
            print(f"Loaded {input_file} ({in_fmt.value}): {grid.width}x{grid.height}")
        _save(grid, output_file, out_fmt, verbose)
    except (TileCodecError, OSError) as e:
        _report_error(e, verbose)
        return 1
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='evatool',
        description='Convert DS Evangelion 4bpp tiled images to and from grayscale PNG.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Usage:', 1)[1],
    )
    parser.add_argument('command', nargs='?', help='n (new) or c (convert)')
    parser.add_argument('params', nargs='*', help='Command arguments, see below')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show image details and error tracebacks')
    return parser


def main(argv=None):
    args = build_parser().parse_intermixed_args(argv)
    params = [args.command] + args.params if args.command else []

    if len(params) < 5:
        print_info()
        return 0

    try:
        fmt = ImageType.from_token(params[1])
    except UnsupportedFormat as e:
        print(e)
        return 1

    if params[0] == 'n':
        return cmd_new(params, fmt, args.verbose)
    if params[0] == 'c':
        return cmd_convert(params, fmt, args.verbose)

    print(f"Unrecognized parameter: {params[0]}. Supported values are: {', '.join(COMMANDS)}.")
    return 1


if __name__ == '__main__':
    sys.exit(main())
