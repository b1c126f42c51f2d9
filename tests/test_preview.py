import pytest
from PIL import Image

from character import AssetVariant, CharacterDefinition
from compositor import new_sheet
from geometry import (
    ANIMATIONS,
    FRAME_SIZE,
    SHEET_HEIGHT,
    SHEET_WIDTH,
    animation_height,
    frame_count,
    row_offset,
)
from preview import (
    frame,
    frames,
    save_gif,
    split_animations,
    split_item_animations,
    split_items,
)
from tests.helpers import slot_column


def marked_sheet():
    """Sheet with one red pixel at the top-left of walk frame 2, facing left."""
    sheet = new_sheet()
    sheet.putpixel((2 * FRAME_SIZE, row_offset("walk") + FRAME_SIZE), (255, 0, 0, 255))
    return sheet


def test_frame_crops_direction_and_index():
    img = frame(marked_sheet(), "walk", "left", 2)
    assert img.size == (FRAME_SIZE, FRAME_SIZE)
    assert img.getpixel((0, 0)) == (255, 0, 0, 255)
    # Index wraps around the frame count
    wrapped = frame(marked_sheet(), "walk", "left", 2 + frame_count("walk"))
    assert wrapped.tobytes() == img.tobytes()


def test_single_row_animation_ignores_direction():
    sheet = new_sheet()
    sheet.putpixel((0, row_offset("hurt")), (0, 255, 0, 255))
    assert frame(sheet, "hurt", "right").getpixel((0, 0)) == (0, 255, 0, 255)


def test_unknown_direction():
    with pytest.raises(ValueError):
        frame(new_sheet(), "walk", "sideways")


def test_frames_steps_through_animation():
    assert len(list(frames(new_sheet(), "shoot"))) == frame_count("shoot")


def test_split_animations():
    bands = split_animations(marked_sheet())
    assert list(bands) == ANIMATIONS
    assert bands["walk"].size == (SHEET_WIDTH, 4 * FRAME_SIZE)
    assert bands["climb"].size == (SHEET_WIDTH, FRAME_SIZE)
    assert bands["walk"].getpixel((2 * FRAME_SIZE, FRAME_SIZE)) == (255, 0, 0, 255)


def test_save_gif(tmp_path):
    sheet = new_sheet()
    # A pixel that moves every frame, so no two frames are identical
    for index in range(frame_count("walk")):
        x = index * FRAME_SIZE + index
        sheet.putpixel((x, row_offset("walk") + FRAME_SIZE + 10), (255, 0, 0, 255))

    path = save_gif(sheet, "walk", tmp_path / "gif" / "walk.gif", direction="left")
    with Image.open(path) as img:
        assert img.n_frames == frame_count("walk")
        assert img.info["duration"] == 125


def dressed(catalog):
    variants = [catalog.find("body", "body", "tan", "female"), catalog.find("head", "human", "tan", "female")]
    for slot in ("legs", "feet", "torso", "hair"):
        variants.append(catalog.list_variants(slot, "female")[0])
    # Not in the catalog, so it has no image for any animation
    variants.append(AssetVariant("facial", "monocle", "gold"))
    return CharacterDefinition.build("female", "tan", variants)


def test_split_item_animations(catalog):
    items = split_item_animations(dressed(catalog), catalog)
    assert set(items) == {"body", "head", "legs", "feet", "torso", "hair"}
    assert list(items["body"]) == ANIMATIONS
    assert "jump" not in items["feet"]
    for bands in items.values():
        for animation, band in bands.items():
            assert band.size == (SHEET_WIDTH, animation_height(animation))


def test_split_items_one_sheet_per_layer(catalog):
    sheets = split_items(dressed(catalog), catalog)
    assert set(sheets) == {"body", "head", "legs", "feet", "torso", "hair"}
    for sheet in sheets.values():
        assert sheet.size == (SHEET_WIDTH, SHEET_HEIGHT)

    feet_x = slot_column("feet")[0]
    assert sheets["feet"].getpixel((feet_x, row_offset("walk")))[3] == 255
    assert sheets["feet"].getpixel((feet_x, row_offset("jump")))[3] == 0

    # Each layer keeps only its own pixels
    body_left, body_right = slot_column("body")
    assert sheets["body"].getbbox() == (body_left, 0, body_right, SHEET_HEIGHT)
    assert sheets["legs"].getpixel((body_left, row_offset("walk")))[3] == 0
