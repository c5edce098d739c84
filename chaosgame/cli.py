import argparse

from chaosgame.settings import OUTPUT_FORMATS


def parse_size(text):
    try:
        width, height = (int(value) for value in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None
    return width, height


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Animates the chaos game on a regular polygon.",
        epilog="Frames are assembled with ffmpeg, which must be on the PATH.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--load", type=str, metavar="PATH", help="Path to a settings file.", default=None
    )
    parser.add_argument(
        "--save", type=str, metavar="PATH", help="Write the effective settings to a file.", default=None
    )
    parser.add_argument("--vertices", "-n", type=int, help="Number of polygon vertices.")
    parser.add_argument("--duration", type=float, help="Animation length in seconds.")
    parser.add_argument("--fps", type=int, help="Frames per second.")
    parser.add_argument("--seed", type=int, help="Random seed.")
    parser.add_argument("--size", type=parse_size, metavar="WxH", help="Frame size in pixels.")
    parser.add_argument("--output", type=str, metavar="DIR", help="Output directory.")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Animation container.")
    parser.add_argument("--workers", type=int, default=1, help="Processes used to render frames.")
    parser.add_argument("--no-encode", action="store_true", help="Only write the frames.")
    parser.add_argument(
        "--encode-only", action="store_true", help="Re-encode frames from a previous run without simulating."
    )
    return parser.parse_args(argv)
