"""Capture compositor.

Decodes each fragment's tile, rotates it by its quarter turns and
alpha-composites it onto an opaque canvas sized by the capture
:class:`map_captcha.systems.layout.Layout`. Fragments are drawn in the order
they were recorded, so a later fragment covers an earlier one where they
overlap.
"""

import logging
from typing import Iterable, Optional

from PIL import Image

from map_captcha.components import Fragment
from map_captcha.renderer.palette import RGBA, Palette
from map_captcha.systems.layout import Layout

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND: RGBA = (255, 255, 255, 255)


def rotate_tile(tile: Image.Image, rotation: int) -> Image.Image:
    """Rotate clockwise by ``90 * rotation`` degrees."""
    if rotation % 4 == 0:
        return tile
    return tile.rotate(-90 * rotation, expand=True)


def fragment_image(fragment: Fragment, palette: Palette) -> Optional[Image.Image]:
    if fragment.tile is None:
        return None
    return rotate_tile(palette.decode_to_image(fragment.tile.data), fragment.rotation)


def assemble(
    fragments: Iterable[Fragment],
    layout: Layout,
    palette: Palette,
    background: RGBA = DEFAULT_BACKGROUND,
) -> Image.Image:
    """Composite all fragments onto a fresh canvas.

    Fragments without a resolved tile leave their cell as background. A
    fragment whose coordinates have no cell in the layout is drawn at the
    canvas edge (offset 0) on that axis.
    """
    canvas = Image.new("RGBA", layout.size, background)
    for fragment in fragments:
        tile = fragment_image(fragment, palette)
        if tile is None:
            logger.debug("Tile %s has no data; leaving its cell blank", fragment.tile_id)
            continue

        left, top = layout.offset(fragment.position)
        if left is None or top is None:
            logger.debug(
                "No layout cell for tile %s at %s; using edge offset",
                fragment.tile_id,
                fragment.position,
            )
        canvas.alpha_composite(tile, (left or 0, top or 0))
    return canvas
