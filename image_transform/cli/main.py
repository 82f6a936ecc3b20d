"""
Command-line interface for image transformations.

Each subcommand applies exactly one transformation: it reads INFILE (where
it takes one), transforms it, and writes OUTFILE in the format implied by
the file extension.
"""

import click
import sys
import time
import logging

from .. import __version__
from ..api import FractalRenderer, BACKENDS
from ..io.config import ConfigManager, load_config_from_args
from ..rendering import transforms
from ..rendering.coloring import ColorRGB
from ..rendering.image_output import ImageExporter, open_image

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Image Transform - apply one transformation to an image file.

    Blur, brighten, crop, rotate, invert or grayscale an existing image,
    generate a solid-color image, or render a Julia fractal.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Image Transform v{__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


def _fail(ctx, error):
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _apply(ctx, infile, outfile, operation, *args):
    """Open INFILE, apply one transform and save OUTFILE."""
    try:
        img = open_image(infile)
        result = operation(img, *args)
        ImageExporter().save_image(result, outfile)
        if not ctx.obj.get('quiet'):
            click.echo(f"Saved: {outfile}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.option('--amount', '-a', type=float, default=3.0, show_default=True,
              help='Blur amount (Gaussian sigma)')
@click.pass_context
def blur(ctx, infile, outfile, amount):
    """Blur the image."""
    _apply(ctx, infile, outfile, transforms.blur, amount)


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.option('--amount', '-a', type=int, default=10, show_default=True,
              help='Amount to add to each channel (negative darkens)')
@click.pass_context
def brighten(ctx, infile, outfile, amount):
    """Make the image brighter."""
    _apply(ctx, infile, outfile, transforms.brighten, amount)


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.argument('x', type=click.IntRange(min=0))
@click.argument('y', type=click.IntRange(min=0))
@click.argument('width', type=click.IntRange(min=1))
@click.argument('height', type=click.IntRange(min=1))
@click.pass_context
def crop(ctx, infile, outfile, x, y, width, height):
    """
    Crop the image.

    X, Y: top-left corner of the region; WIDTH, HEIGHT: region size
    """
    _apply(ctx, infile, outfile, transforms.crop, x, y, width, height)


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.option('--degrees', '-d', type=click.Choice(['90', '180', '270']), default='90',
              show_default=True, help='Clockwise rotation')
@click.pass_context
def rotate(ctx, infile, outfile, degrees):
    """Rotate the image clockwise."""
    _apply(ctx, infile, outfile, transforms.rotate, int(degrees))


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.pass_context
def invert(ctx, infile, outfile):
    """Invert the image colors."""
    _apply(ctx, infile, outfile, transforms.invert)


@main.command()
@click.argument('infile', type=click.Path())
@click.argument('outfile', type=click.Path())
@click.pass_context
def grayscale(ctx, infile, outfile):
    """Remove color from the image."""
    _apply(ctx, infile, outfile, transforms.grayscale)


@main.command()
@click.argument('outfile', type=click.Path())
@click.option('--width', '-w', type=int, default=800, show_default=True, help='Image width')
@click.option('--height', '-h', type=int, default=800, show_default=True, help='Image height')
@click.option('--color', '-c', default='0,0,0', show_default=True, help='Fill color "r,g,b"')
@click.pass_context
def generate(ctx, outfile, width, height, color):
    """Generate a solid-color image."""
    try:
        fill = ColorRGB.from_string(color)
        img = transforms.generate(width, height, fill)
        ImageExporter().save_image(img, outfile)
        if not ctx.obj.get('quiet'):
            click.echo(f"Saved: {outfile}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('outfile', type=click.Path(), default='output.png')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--backend', type=click.Choice(BACKENDS), help='Rendering backend')
@click.option('--processes', type=int, help='Number of processes for parallel rendering')
@click.option('--tile-size', type=int, help='Tile size for parallel rendering')
@click.option('--no-metadata', is_flag=True, help='Do not embed render metadata')
@click.pass_context
def fractal(ctx, outfile, width, height, backend, processes, tile_size, no_metadata):
    """
    Generate a fractal.

    OUTFILE: Output image file path (default: output.png)
    """
    try:
        render_config, parameters = load_config_from_args(ctx.obj.get('config_file'))

        # Apply command-line overrides
        if width is not None:
            parameters.width = width
        if height is not None:
            parameters.height = height
        if backend is not None:
            render_config.backend = backend
        if processes is not None:
            render_config.num_processes = processes
        if tile_size is not None:
            render_config.tile_size = tile_size
        if no_metadata:
            render_config.save_metadata = False

        renderer = FractalRenderer(render_config, parameters)

        if not ctx.obj.get('quiet'):
            click.echo(f"Rendering {parameters.width}x{parameters.height} fractal...")
        start_time = time.time()

        renderer.render(outfile)

        if not ctx.obj.get('quiet'):
            click.echo(f"Render complete: {time.time() - start_time:.2f}s")
            click.echo(f"Saved: {outfile}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option('--size', type=str, default='800x800', help='Benchmark image size (widthxheight)')
@click.pass_context
def benchmark(ctx, size):
    """
    Benchmark fractal rendering with every available backend.
    """
    try:
        try:
            width, height = map(int, size.split('x'))
        except ValueError:
            raise ValueError("Invalid size format. Use 'widthxheight'")

        render_config, parameters = load_config_from_args(ctx.obj.get('config_file'))
        parameters.width = width
        parameters.height = height

        renderer = FractalRenderer(render_config, parameters)
        results = renderer.benchmark_performance()

        click.echo("Configuration:")
        for key, value in results['config'].items():
            click.echo(f"  {key}: {value}")

        click.echo("\nPerformance Results:")
        for method, result in results['benchmarks'].items():
            click.echo(f"  {method.upper()}: {result['time']:.2f}s "
                       f"({result['pixels_per_second']:,.0f} pixels/sec)")
            if 'speedup' in result:
                click.echo(f"    Speedup: {result['speedup']:.2f}x")
                click.echo(f"    Identical output: {'yes' if result['matches_numpy'] else 'NO'}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def validate_config(ctx, config_file):
    """Validate a configuration file."""
    try:
        manager = ConfigManager()
        config_dict = manager.load_config(config_file)

        render_config = manager.create_render_config(config_dict)
        render_config.validate()

        parameters = manager.create_fractal_parameters(config_dict)
        parameters.validate()

        click.echo(f"Configuration file is valid: {config_file}")

    except Exception as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
