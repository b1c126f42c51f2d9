"""Preview helpers: step through the frames of a composited sheet."""

import pathlib
from typing import Dict, Iterator

from PIL import Image

from catalog import AssetCatalog
from character import CharacterDefinition
from compositor import load_layer, new_sheet
from geometry import (
    ANIMATIONS,
    FRAME_SIZE,
    SHEET_WIDTH,
    animation_height,
    frame_count,
    frame_duration,
    row_count,
    row_offset,
)

DIRECTIONS = ["up", "left", "down", "right"]


def _row(animation: str, direction: str) -> int:
    """Pixel row of one facing, single-row animations only face one way."""
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction: {direction}")
    if row_count(animation) == 1:
        return row_offset(animation)
    return row_offset(animation) + DIRECTIONS.index(direction) * FRAME_SIZE


def frame(sheet: Image.Image, animation: str, direction: str = "down", index: int = 0) -> Image.Image:
    """Crop one frame, the index wraps around the animation's frame count."""
    x = (index % frame_count(animation)) * FRAME_SIZE
    y = _row(animation, direction)
    return sheet.crop((x, y, x + FRAME_SIZE, y + FRAME_SIZE))


def frames(sheet: Image.Image, animation: str, direction: str = "down") -> Iterator[Image.Image]:
    for index in range(frame_count(animation)):
        yield frame(sheet, animation, direction, index)


def split_animations(sheet: Image.Image) -> Dict[str, Image.Image]:
    """Cut the sheet into one image per animation band."""
    bands = {}
    for animation in ANIMATIONS:
        y = row_offset(animation)
        bands[animation] = sheet.crop((0, y, SHEET_WIDTH, y + animation_height(animation)))
    return bands


def split_item_animations(
    definition: CharacterDefinition, catalog: AssetCatalog
) -> Dict[str, Dict[str, Image.Image]]:
    """Each drawn layer on its own, one band per animation it supports.

    Keys are slots; layers without any image are left out.
    """
    items = {}
    for variant in definition.layers():
        bands = {}
        for animation in ANIMATIONS:
            path = catalog.resolve_image(variant, animation)
            if path is not None:
                bands[animation] = load_layer(variant, animation, path)
        if bands:
            items[variant.slot] = bands
    return items


def split_items(definition: CharacterDefinition, catalog: AssetCatalog) -> Dict[str, Image.Image]:
    """One full transparent sheet per drawn layer, keyed by slot."""
    sheets = {}
    for slot, bands in split_item_animations(definition, catalog).items():
        sheet = new_sheet()
        for animation, band in bands.items():
            sheet.alpha_composite(band, dest=(0, row_offset(animation)))
        sheets[slot] = sheet
    return sheets


def save_gif(
    sheet: Image.Image,
    animation: str,
    path: str | pathlib.Path,
    direction: str = "down",
    loop: int = 0,
) -> pathlib.Path:
    """Export one facing of an animation to an animated GIF."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    images = []
    for img in frames(sheet, animation, direction):
        # Palette index 255 stands for transparent pixels
        mask = Image.eval(img.split()[3], lambda a: 255 if a < 128 else 0)
        img_p = img.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE, colors=255)
        img_p.paste(255, mask)
        images.append(img_p)

    images[0].save(
        path,
        save_all=True,
        append_images=images[1:],
        duration=frame_duration(animation),
        loop=loop,
        transparency=255,
        disposal=2,
    )
    return path
