"""Command-line interface for pixie-stitch."""

import argparse
import sys
from pathlib import Path

from .config import SPLIT_SEGMENT_HEIGHT, SPLIT_SEGMENT_WIDTH, PatternConfig
from .core import create_all_patterns
from .errors import PixieStitchError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create printable cross stitch patterns from pixel art images"
    )
    parser.add_argument("inputs", nargs="+", help="Input PNG or GIF image paths")
    parser.add_argument("-o", "--output-dir", help="Directory for the pattern folders (default: next to each image)")
    parser.add_argument("-r", "--resources", help="Resource directory with symbols and stitch textures")
    parser.add_argument("--font", help="TrueType font for labels (default: Pillow's built-in font)")
    parser.add_argument("--segment-width", type=int, default=SPLIT_SEGMENT_WIDTH, help="Stitches per page horizontally")
    parser.add_argument("--segment-height", type=int, default=SPLIT_SEGMENT_HEIGHT, help="Stitches per page vertically")
    parser.add_argument("--no-centered", action="store_true", help="Skip the patterns centered on the image middle")
    parser.add_argument("--no-preview", action="store_true", help="Skip the stitched preview")
    parser.add_argument("-j", "--jobs", type=int, help="Number of render threads")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress output")
    return parser


def config_from_args(args: argparse.Namespace) -> PatternConfig:
    return PatternConfig(
        output_root=Path(args.output_dir) if args.output_dir else None,
        resource_dir=Path(args.resources) if args.resources else None,
        font_path=Path(args.font) if args.font else None,
        segment_width=args.segment_width,
        segment_height=args.segment_height,
        centered=not args.no_centered,
        preview=not args.no_preview,
        max_workers=args.jobs,
        verbose=not args.quiet,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        create_all_patterns(args.inputs, config)
    except PixieStitchError as e:
        print(f"Pixie Stitch Error\n\n{e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Pixie Stitch Error\n\n{type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print("Finished creating patterns. Enjoy!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
