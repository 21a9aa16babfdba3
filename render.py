import sys
import warnings
from argparse import ArgumentParser
from pathlib import Path

from fractal import (
    ComplexWindow,
    EncodingFailure,
    FractalError,
    Point,
    ProgressBar,
    RenderConfig,
    RenderFailure,
    available_parallelism,
    colormap_palette,
    generate_color_palette,
    render,
    write_indexed_image,
)
from fractal.config import DEFAULT_WINDOW, INDEXED_COLOR_DEPTH

VERBOSE = False


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set in parallel vertical strips.')
    defaults = RenderConfig(parallelism=1)

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=defaults.width)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=defaults.height)

    parser.add_argument('--start-x', type=float,
                        dest='start_x', help='real part of the complex point mapped to the left edge',
                        metavar='START_X', default=DEFAULT_WINDOW.start.x)

    parser.add_argument('--start-y', type=float,
                        dest='start_y', help='imaginary part of the complex point mapped to the top edge',
                        metavar='START_Y', default=DEFAULT_WINDOW.start.y)

    parser.add_argument('--end-x', type=float,
                        dest='end_x', help='real part of the complex point mapped to the right edge',
                        metavar='END_X', default=DEFAULT_WINDOW.end.x)

    parser.add_argument('--end-y', type=float,
                        dest='end_y', help='imaginary part of the complex point mapped to the bottom edge',
                        metavar='END_Y', default=DEFAULT_WINDOW.end.y)

    parser.add_argument('--bailout', type=float,
                        dest='bailout', help='escape radius of the orbit',
                        metavar='BAILOUT', default=defaults.bailout)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per pixel',
                        metavar='MAX_ITERATIONS', default=defaults.max_iterations)

    parser.add_argument('--parallelism', type=int,
                        dest='parallelism', help='number of strips rendered concurrently (default: CPU count)',
                        metavar='PARALLELISM', default=None)

    parser.add_argument('--color-depth', type=int,
                        dest='color_depth', help=f'number of palette colours, at most {INDEXED_COLOR_DEPTH}',
                        metavar='COLOR_DEPTH', default=defaults.color_depth)

    parser.add_argument('--saturation', type=float,
                        dest='saturation', help='saturation of the hue-cycle palette',
                        metavar='SATURATION', default=defaults.saturation)

    parser.add_argument('--value', type=float,
                        dest='value', help='brightness of the hue-cycle palette',
                        metavar='VALUE', default=defaults.value)

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap to use instead of the hue cycle (e.g. "viridis")',
                        metavar='COLORMAP', default=None)

    parser.add_argument('--output', type=str,
                        dest='output', help='destination image file',
                        metavar='OUTPUT', default=str(defaults.output))

    parser.add_argument('--format', type=str,
                        dest='format', help='file format of the output. Any format supported by Pillow. Default: "png".',
                        metavar='FORMAT', default=defaults.image_format)

    parser.add_argument('--no-progress', dest='show_progress', action='store_false',
                        help='do not print the progress percentage while rendering')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging.')

    return parser


def resolve_config(opt, parser: ArgumentParser) -> RenderConfig:
    image_format = (opt.format or "png").lower().lstrip(".") or "png"
    output_path = Path(opt.output).expanduser()
    if not output_path.suffix:
        output_path = output_path.with_suffix(f".{image_format}")

    if opt.colormap is not None and (
        opt.saturation != parser.get_default('saturation') or opt.value != parser.get_default('value')
    ):
        warnings.warn("--saturation and --value are ignored when --colormap is set.", UserWarning, stacklevel=2)

    config = RenderConfig(
        width=opt.width,
        height=opt.height,
        window=ComplexWindow(start=Point(opt.start_x, opt.start_y), end=Point(opt.end_x, opt.end_y)),
        bailout=opt.bailout,
        max_iterations=opt.max_iterations,
        parallelism=opt.parallelism if opt.parallelism is not None else available_parallelism(),
        color_depth=opt.color_depth,
        saturation=opt.saturation,
        value=opt.value,
        colormap=opt.colormap,
        output=output_path,
        image_format=image_format,
    )

    try:
        config.validate()
    except (FractalError, ValueError) as exc:
        parser.error(str(exc))
    return config


def build_palette(config: RenderConfig, parser: ArgumentParser):
    if config.colormap is None:
        return generate_color_palette(config.color_depth, config.saturation, config.value)
    try:
        return colormap_palette(config.colormap, config.color_depth)
    except ValueError as exc:
        parser.error(str(exc))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = resolve_config(opt, parser)
    palette = build_palette(config, parser)

    log("Rendering %dx%d pixels, window (%g, %g) to (%g, %g)" % (
        config.width, config.height,
        config.window.start.x, config.window.start.y,
        config.window.end.x, config.window.end.y,
    ))
    log("bailout=%g max_iterations=%d strips=%d" % (config.bailout, config.max_iterations, config.parallelism))

    progress_bar = ProgressBar(config.total_pixels()) if opt.show_progress else None

    try:
        result = render(config, on_progress=progress_bar)
    except RenderFailure as exc:
        print(file=sys.stderr)
        parser.exit(1, f"Rendering failed: {exc}\n")

    print("\rFinished Rendering in {0:.3f}s on {1} CPUs".format(result.elapsed, result.workers))

    try:
        path = write_indexed_image(result.pixels, palette, config.output, config.image_format)
    except EncodingFailure as exc:
        parser.exit(1, f"{exc}\n")
    log("Wrote %s" % path)
    return result


if __name__ == '__main__':
    main()
