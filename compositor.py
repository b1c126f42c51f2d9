"""Stack the layers of a character onto one sprite sheet."""
import pathlib
from typing import List, NamedTuple

from PIL import Image, features

from catalog import AssetCatalog
from character import AssetVariant, CharacterDefinition
from credits import CreditRecord, merge
from errors import DependencyUnavailable, ResourceFailure
from geometry import ANIMATIONS, SHEET_HEIGHT, SHEET_WIDTH, animation_height, row_offset


class Gap(NamedTuple):
    """A selected layer with no image for one animation."""

    slot: str
    variant_id: str
    animation: str


class Composite(NamedTuple):
    sheet: Image.Image
    credits: List[CreditRecord]
    gaps: List[Gap]


def check_raster() -> None:
    """Fail early when Pillow cannot write PNG sheets."""
    if not features.check_codec("zlib"):
        raise DependencyUnavailable(
            "Pillow was built without zlib support, PNG sheets cannot be written"
        )


def new_sheet() -> Image.Image:
    return Image.new("RGBA", (SHEET_WIDTH, SHEET_HEIGHT), (0, 0, 0, 0))


def load_layer(variant: AssetVariant, animation: str, path: pathlib.Path) -> Image.Image:
    """Read one animation band of a layer as RGBA, clipped to the band."""
    try:
        with Image.open(path) as img:
            img.load()
            layer = img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ResourceFailure(variant.id, animation, path, str(e)) from e

    if layer.width == 0 or layer.height == 0:
        raise ResourceFailure(variant.id, animation, path, "empty image")

    width = min(layer.width, SHEET_WIDTH)
    height = min(layer.height, animation_height(animation))
    if (width, height) != layer.size:
        layer = layer.crop((0, 0, width, height))
    return layer


def compose(definition: CharacterDefinition, catalog: AssetCatalog) -> Composite:
    """Composite every selected layer of a character onto a fresh sheet.

    Layers are drawn lowest z-rank first, one animation band at a time, with
    source-over blending. A layer missing an animation leaves that band
    untouched. An unreadable image aborts this character with
    ResourceFailure.

    Args:
        definition: Character to draw
        catalog: Catalog resolving each layer's images

    Returns:
        Composite with the sheet, merged credits and skipped animations
    """
    sheet = new_sheet()
    layers = list(definition.layers())
    drawn = set()
    gaps = []

    for animation in ANIMATIONS:
        y = row_offset(animation)
        for variant in layers:
            path = catalog.resolve_image(variant, animation)
            if path is None:
                gaps.append(Gap(variant.slot, variant.id, animation))
                continue

            layer = load_layer(variant, animation, path)
            sheet.alpha_composite(layer, dest=(0, y))
            drawn.add(variant)

    credits = merge(catalog.credit_for(variant) for variant in drawn)
    return Composite(sheet, credits, gaps)


def compose_to_file(
    definition: CharacterDefinition, catalog: AssetCatalog, path: pathlib.Path
) -> Composite:
    """Composite a character and save the sheet as PNG."""
    result = compose(definition, catalog)
    result.sheet.save(path, "PNG")
    return result
