"""Sheet geometry shared by the interactive preview and the prefab generator."""
from typing import Dict, List

FRAME_SIZE = 64
FRAME_DURATION_MS = 125

# Canonical order: (name, direction rows, frames per row)
_ANIMATION_TABLE = [
    ("spellcast", 4, 7),
    ("thrust", 4, 8),
    ("walk", 4, 9),
    ("slash", 4, 6),
    ("shoot", 4, 13),
    ("hurt", 1, 6),
    ("climb", 1, 6),
    ("idle", 4, 2),
    ("jump", 4, 5),
    ("sit", 4, 3),
    ("emote", 4, 3),
    ("run", 4, 8),
    ("combat_idle", 4, 2),
    ("backslash", 4, 13),
    ("halfslash", 4, 7),
]

ANIMATIONS: List[str] = [name for name, _, _ in _ANIMATION_TABLE]

_ROW_COUNTS: Dict[str, int] = {name: rows for name, rows, _ in _ANIMATION_TABLE}
_FRAME_COUNTS: Dict[str, int] = {name: frames for name, _, frames in _ANIMATION_TABLE}
_ROW_OFFSETS: Dict[str, int] = {}

_offset = 0
for _name, _rows, _ in _ANIMATION_TABLE:
    _ROW_OFFSETS[_name] = _offset
    _offset += _rows * FRAME_SIZE

SHEET_WIDTH = max(_FRAME_COUNTS.values()) * FRAME_SIZE
SHEET_HEIGHT = _offset


def row_offset(animation: str) -> int:
    """Pixel offset of the first row of an animation."""
    return _ROW_OFFSETS[animation]


def row_count(animation: str) -> int:
    """Number of direction rows an animation occupies."""
    return _ROW_COUNTS[animation]


def frame_count(animation: str) -> int:
    return _FRAME_COUNTS[animation]


def frame_duration(animation: str) -> int:
    """Frame duration in milliseconds (constant for every animation)."""
    if animation not in _ROW_OFFSETS:
        raise KeyError(animation)
    return FRAME_DURATION_MS


def animation_height(animation: str) -> int:
    return _ROW_COUNTS[animation] * FRAME_SIZE
