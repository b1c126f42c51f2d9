import json
import pathlib
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from character import CharacterDefinition
from config import CREATURE_TYPE, SLOTS
from credits import CreditRecord
from geometry import ANIMATIONS, FRAME_SIZE, SHEET_HEIGHT, SHEET_WIDTH, frame_count, frame_duration

NONE_VALUE = "none"
METADATA_CSV = "metadata.csv"


def create_base_metadata(role: str) -> Dict[str, Any]:
    """Create the sidecar record every sheet shares, minus character details."""
    return {
        "role": role,
        "creatureType": CREATURE_TYPE,
        "frame": {
            "frameSize": FRAME_SIZE,
            "sheetWidth": SHEET_WIDTH,
            "sheetHeight": SHEET_HEIGHT,
        },
        "animations": [
            {"tag": tag, "frames": frame_count(tag), "timingMs": frame_duration(tag)}
            for tag in ANIMATIONS
        ],
    }


def build_metadata(
    identifier: str,
    definition: CharacterDefinition,
    credits: Iterable[CreditRecord] = (),
) -> Dict[str, Any]:
    """Sidecar record for one generated character."""
    item_metadata = create_base_metadata(definition.role)
    item_metadata["id"] = identifier
    if definition.name:
        item_metadata["name"] = definition.name
    item_metadata["bodyType"] = definition.bucket
    item_metadata["bodyColor"] = definition.body_color

    # Add traits (skip empty slots)
    item_metadata["traits"] = {
        slot: variant_id
        for slot, variant_id in definition.traits().items()
        if variant_id != NONE_VALUE
    }
    item_metadata["credits"] = [record._asdict() for record in credits]
    if definition.unmatched:
        item_metadata["unmatchedColors"] = sorted(definition.unmatched)
    return item_metadata


def write_metadata(path: pathlib.Path, item_metadata: Dict[str, Any]) -> pathlib.Path:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(item_metadata, f, indent=2, ensure_ascii=False)
    return path


def metadata_row(identifier: str, definition: CharacterDefinition) -> Dict[str, Optional[str]]:
    """Flat row for the run-wide metadata table."""
    row = {
        "id": identifier,
        "role": definition.role,
        "name": definition.name or NONE_VALUE,
        "body_type": definition.bucket,
        "body_color": definition.body_color,
    }
    row.update(definition.traits())
    return row


def save_run_metadata(output_path: pathlib.Path, rows: List[Dict]) -> pd.DataFrame:
    """Write one row per generated character to metadata.csv."""
    columns = ["id", "role", "name", "body_type", "body_color"] + SLOTS
    metadata_df = pd.DataFrame(rows, columns=columns)
    metadata_df.to_csv(output_path / METADATA_CSV, index=False)
    return metadata_df

