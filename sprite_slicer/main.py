#!/usr/bin/env python3
"""
Sprite Slicer - Command Line Interface

Splits a spritesheet into individual sprites. The most common color in the
image is taken as the background, and every connected group of other pixels
becomes a sprite, cropped to its bounding box.

Selected groups of sprites can be equalized to a common size, each sprite
centered on a transparent canvas as large as the biggest one in its group.
"""

import logging
from pathlib import Path

import click
import cv2

from sprite_slicer.api import debug_images
from sprite_slicer.errors import SpriteSlicerError
from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, MIN_SPRITE_SIZE, Color
from sprite_slicer.session import SlicerSession
from sprite_slicer.sprite_save import save_sprites


def parse_index_group(value: str) -> set[int]:
    """Parse a comma separated list of sprite indices, e.g. "0,2,3"."""
    try:
        return {int(part) for part in value.split(",") if part.strip()}
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a comma separated list of sprite indices")


@click.command(context_settings=dict(show_default=True))
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_dir', type=click.Path(file_okay=False))
@click.option('--alpha-threshold', '-a', type=click.IntRange(0, 255), default=ALPHA_THRESHOLD,
              help='Pixels with lower alpha are ignored when detecting the background color')
@click.option('--min-size', '-m', type=click.IntRange(0), default=MIN_SPRITE_SIZE,
              help='Sprites at most this many pixels wide or high are dropped as noise')
@click.option('--equalize', '-e', 'equalize_groups', multiple=True, metavar='INDICES',
              help='Comma separated sprite indices to equalize to a common size (repeatable)')
@click.option('--zip/--no-zip', 'create_archive', default=True, help='Write sprites.zip')
@click.option('--files', '-f', 'individual_files', is_flag=True,
              help='Also write each sprite as sprite_<index>.png')
@click.option('--debug', '-d', is_flag=True, help='Save intermediate images for debugging')
@click.option('--verbose', '-v', is_flag=True, help='Print debug log messages')
def main(input_path: str, output_dir: str, alpha_threshold: int, min_size: int,
         equalize_groups: tuple[str, ...], create_archive: bool, individual_files: bool,
         debug: bool, verbose: bool) -> None:
    """Split a spritesheet into individual sprites.

    INPUT_PATH is the path to the spritesheet image.

    OUTPUT_DIR is the directory where sprites.zip (and optionally the
    individual sprite files) will be saved.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    groups = [parse_index_group(group) for group in equalize_groups]
    session = SlicerSession(alpha_threshold=alpha_threshold, min_size=min_size)

    def show_background(color: Color) -> None:
        click.echo(f"Detected background: {color.css()}")

    try:
        session.load(input_path)
        click.echo(f"Loaded image with shape {session.source.shape}")

        session.extract(on_background=show_background)
        click.echo(f"Extracted {len(session.sprites)} sprite(s)")

        for group in groups:
            session.set_selection_mode(True)
            try:
                for index in sorted(group):
                    session.toggle_selection(index)
            except IndexError as e:
                raise click.BadParameter(str(e), param_hint="'--equalize'")
            if session.equalize():
                size = session.sprites[min(group)].shape
                click.echo(f"Equalized sprites {sorted(group)} to {size[1]}x{size[0]}")
            else:
                session.set_selection_mode(False)
                click.echo(f"Skipped equalizing {sorted(group)}: select at least two sprites")

        if debug:
            debug_dir = Path(output_dir) / "debug"
            debug_dir.mkdir(parents=True, exist_ok=True)
            num_debug_images = 0
            # Reuse the session's analysis rather than running it again
            for result in debug_images(session.source, session.background, session.boxes):
                image = result.image
                if image.ndim == 3:
                    image = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
                cv2.imwrite(str(debug_dir / f"{result.name}.png"), image)
                num_debug_images += 1
            click.echo(f"Saved {num_debug_images} debug image(s) to {debug_dir}")

        if not session.sprites:
            click.echo("No sprites found, nothing to save")
            return

        written = save_sprites(session.sprites, output_dir,
                               create_archive=create_archive, individual_files=individual_files)
    except SpriteSlicerError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Saved {len(written)} file(s) to {output_dir}")


if __name__ == "__main__":
    main()
