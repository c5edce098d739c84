import sys
import logging

from chaosgame.animation import AnimationDriver
from chaosgame.cli import parse_args
from chaosgame.errors import EncodingFailure, InvalidConfiguration, RenderFailure
from chaosgame.settings import default_settings, load_settings, override_settings, save_settings

LOG_FILE = "log.txt"

EXIT_OK = 0
EXIT_CONFIGURATION = 1
EXIT_RENDER = 2
EXIT_ENCODING = 3


def setup_logging(log_file=LOG_FILE):
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(console_formatter)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.INFO)
    file_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(file_formatter)
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


def build_settings(args):
    """Defaults, then the settings file, then the command line."""
    settings = load_settings(args.load) if args.load else default_settings
    width, height = args.size if args.size else (None, None)
    return override_settings(
        settings,
        vertices=args.vertices,
        duration=args.duration,
        frame_rate=args.fps,
        seed=args.seed,
        width=width,
        height=height,
        output_dir=args.output,
        output_format=args.format,
    )


def main(argv=None):
    args = parse_args(argv)
    try:
        settings = build_settings(args)
        driver = AnimationDriver(settings, workers=args.workers)
    except (InvalidConfiguration, OSError) as error:
        logging.error(f"Invalid configuration: {error}")
        return EXIT_CONFIGURATION

    if args.save:
        try:
            save_settings(settings, args.save)
        except OSError as error:
            logging.error(f"Cannot save settings: {error}")
            return EXIT_CONFIGURATION
        logging.info(f"Settings saved to {args.save}")

    if not args.encode_only:
        try:
            driver.run()
        except RenderFailure as error:
            logging.error(f"Rendering failed, the simulation has to be run again: {error}")
            return EXIT_RENDER

    if args.no_encode:
        return EXIT_OK

    try:
        animation_path = driver.encode()
    except EncodingFailure as error:
        logging.error(f"{error}")
        logging.error(f"Frames are kept in {driver.frames_dir}. Retry with --encode-only.")
        return EXIT_ENCODING

    logging.info(f"Animation saved to {animation_path}")
    return EXIT_OK


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
