from __future__ import annotations

import pathlib
import struct
import zlib
from typing import Iterable, Optional, Sequence

from PIL import Image

from catalog import AssetCatalog
from character import AssetVariant
from config import SLOTS, UNIVERSAL
from geometry import ANIMATIONS, FRAME_SIZE, SHEET_WIDTH, animation_height

COLORS = {
    "light": (250, 220, 190, 255),
    "tan": (210, 160, 120, 255),
    "brown": (120, 80, 40, 255),
    "black": (10, 10, 10, 255),
    "white": (240, 240, 240, 255),
    "blonde": (230, 200, 90, 255),
    "red": (200, 30, 30, 255),
    "blue": (30, 30, 200, 255),
}


def slot_column(slot: str) -> tuple[int, int]:
    """Each slot paints its own frame column in the fixture tree."""
    left = SLOTS.index(slot) * FRAME_SIZE
    return left, left + FRAME_SIZE


def write_band(
    path: pathlib.Path,
    animation: str,
    rgba: tuple[int, int, int, int],
    box: Optional[tuple[int, int, int, int]] = None,
) -> pathlib.Path:
    """Write a transparent animation band with one filled rectangle."""
    path.parent.mkdir(parents=True, exist_ok=True)
    height = animation_height(animation)
    img = Image.new("RGBA", (SHEET_WIDTH, height), (0, 0, 0, 0))
    left, top, right, bottom = box or (0, 0, FRAME_SIZE, height)
    img.paste(rgba, (left, top, right, min(bottom, height)))
    img.save(path)
    return path


def write_oversized_header(path: pathlib.Path, width: int = 20000, height: int = 20000) -> pathlib.Path:
    """A 1x1 PNG whose IHDR claims a far larger size, with a valid CRC."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (1, 1)).save(path)
    data = bytearray(path.read_bytes())
    # IHDR: type at 12..16, width and height at 16..24, CRC over 12..29
    data[16:24] = struct.pack(">II", width, height)
    data[29:33] = struct.pack(">I", zlib.crc32(bytes(data[12:29])))
    path.write_bytes(bytes(data))
    return path


def write_variant(
    root: pathlib.Path,
    directory: str,
    family: str,
    bucket: str,
    color: str,
    slot: str,
    skip: Iterable[str] = (),
) -> None:
    left, right = slot_column(slot)
    for animation in ANIMATIONS:
        if animation in skip:
            continue
        path = root / directory / family / bucket / animation / f"{color}.png"
        write_band(path, animation, COLORS[color], (left, 0, right, animation_height(animation)))


def band_variant(
    tmp_path: pathlib.Path,
    slot: str,
    family: str,
    color: str,
    box: tuple[int, int, int, int],
    bucket: str = UNIVERSAL,
    animations: Sequence[str] = ANIMATIONS,
) -> AssetVariant:
    """A variant painting `box` in every listed animation band."""
    images = {}
    for animation in animations:
        path = tmp_path / slot / family / bucket / animation / f"{color}.png"
        images[animation] = write_band(path, animation, COLORS[color], box)
    ordered = tuple((a, images[a]) for a in ANIMATIONS if a in images)
    return AssetVariant(slot, family, color, bucket, ordered)


def catalog_of(*variants: AssetVariant, credits=None) -> AssetCatalog:
    return AssetCatalog(variants, credits)
