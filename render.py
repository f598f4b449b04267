import logging
import sys
import time
from argparse import ArgumentParser, ArgumentTypeError
from dataclasses import dataclass
from pathlib import Path

import PIL.Image

from mandelblocks import MODES, RenderError, RenderParameters, parse_rect, parse_size, render_frame
from mandelblocks.blocks import BLOCK_HEIGHT, BLOCK_WIDTH, THRESHOLD
from mandelblocks.renderer import MAX_ITERATIONS
from mandelblocks.viewport import DEFAULT_RECT, DEFAULT_SIZE

logger = logging.getLogger("mandelblocks.cli")

LOG_FORMAT = "%(asctime)s - %(threadName)s - %(levelname)s - %(message)s"
RECT_FLAGS = ("-r", "--rect")


@dataclass
class OutputConfig:
    path: Path
    image_format: str


def _size(text):
    try:
        return parse_size(text)
    except ValueError as exc:
        raise ArgumentTypeError(str(exc)) from exc


def _rect(text):
    try:
        return parse_rect(text)
    except ValueError as exc:
        raise ArgumentTypeError(str(exc)) from exc


def _positive_int(text):
    try:
        value = int(text)
    except ValueError as exc:
        raise ArgumentTypeError(f"'{text}' is not an integer") from exc
    if value < 1:
        raise ArgumentTypeError(f"'{text}' must be at least 1")
    return value


def build_parser():
    parser = ArgumentParser(description="Render an escape-time fractal into a lossless image.")

    parser.add_argument('-s', '--size', type=_size,
                        dest='size', help='size of the output image, WIDTHxHEIGHT',
                        metavar='WxH', default=DEFAULT_SIZE)

    parser.add_argument('-t', '--tasks', type=_positive_int,
                        dest='tasks', help='max number of parallel workers',
                        metavar='N', default=2)

    parser.add_argument('-o', '--out', type=str,
                        dest='out', help='name of the output image file',
                        metavar='PATH', default='mandelbrot.png')

    parser.add_argument('--mode', choices=MODES, default='seq',
                        help='scheduler: seq (sequential), px (one job per pixel), '
                             'row (one job per row) or workers (adaptive blocks)')

    parser.add_argument('-r', '--rect', type=_rect,
                        dest='rect', help='part of the complex plane, xMin:xMax:yMin:yMax',
                        metavar='RECT', default=DEFAULT_RECT)

    parser.add_argument('-q', '--quiet', action='store_true',
                        help='suppress progress logging while rendering')

    parser.add_argument('--max-iterations', type=_positive_int,
                        dest='max_iterations', help='iteration limit of the escape-time test',
                        metavar='MAX_ITERATIONS', default=MAX_ITERATIONS)

    parser.add_argument('--block-size', type=_size,
                        dest='block_size', help='initial block size of the workers mode, WIDTHxHEIGHT',
                        metavar='WxH', default=f"{BLOCK_WIDTH}x{BLOCK_HEIGHT}")

    parser.add_argument('--threshold', type=_positive_int,
                        dest='threshold', help='blocks with both sides at most this long are evaluated per pixel',
                        metavar='N', default=THRESHOLD)

    parser.add_argument('--format', type=str,
                        dest='format', help='file format of the output. Can be any lossless format supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging, including per-pixel jobs.')

    return parser


def parse_args(parser: ArgumentParser, argv=None):
    """Parse ``argv``, keeping a viewport such as ``-r -2:2:-1:1`` attached to its flag.

    argparse would read a value starting with a minus sign as another option.
    """

    args = list(sys.argv[1:] if argv is None else argv)
    joined = []
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in RECT_FLAGS and index + 1 < len(args):
            joined.append(f"--rect={args[index + 1]}")
            index += 2
        else:
            joined.append(arg)
            index += 1
    return parser.parse_args(joined)


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    image_format = (opt.format or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    output_path = Path(opt.out).expanduser()
    if str(opt.out).endswith("/") or (output_path.exists() and output_path.is_dir()):
        parser.error("--out must point to a file, not a directory.")

    expected_suffix = f".{image_format}"
    if output_path.suffix:
        if output_path.suffix.lower() != expected_suffix.lower():
            parser.error(f"--out extension {output_path.suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(expected_suffix)

    return OutputConfig(path=output_path.resolve(), image_format=image_format)


def build_params(opt, parser: ArgumentParser) -> RenderParameters:
    width, height = opt.size
    block_width, block_height = opt.block_size
    try:
        return RenderParameters(
            width=width,
            height=height,
            viewport=opt.rect,
            mode=opt.mode,
            tasks=opt.tasks,
            max_iterations=opt.max_iterations,
            block_width=block_width,
            block_height=block_height,
            threshold=opt.threshold,
            quiet=opt.quiet,
        )
    except ValueError as exc:
        parser.error(str(exc))


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )


def main(argv=None):
    start = time.perf_counter()

    parser = build_parser()
    opt = parse_args(parser, argv)

    configure_logging(opt.verbose)

    output_config = resolve_output_config(opt, parser)
    params = build_params(opt, parser)

    try:
        result = render_frame(params)
    except RenderError as exc:
        logger.error("%s", exc)
        return 1

    try:
        write_single_image(result.to_image(), output_config.path, output_config.image_format)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("could not write %s: %s", output_config.path, exc)
        return 1

    logger.info("Execution took %.6fs", time.perf_counter() - start)
    return 0


if __name__ == '__main__':
    sys.exit(main())
