"""Asset catalog: which layer variants exist and where their images live."""
import json
import pathlib
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from character import AssetVariant
from config import CREDITS_FILE, LAYERS, UNIVERSAL, Z_RANK
from credits import CreditRecord
from geometry import ANIMATIONS

CREDIT_COLUMNS = ["authors", "licenses", "urls"]


class AssetCatalog:
    """Read-only index of asset variants, safe to share between workers."""

    def __init__(
        self,
        variants: Iterable[AssetVariant],
        credits: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        self._variants: Dict[Tuple[str, str, str, str], AssetVariant] = {}
        self._by_slot: Dict[str, List[AssetVariant]] = defaultdict(list)
        for variant in variants:
            if variant.slot not in Z_RANK:
                raise ValueError(f"Unknown slot: {variant.slot}")
            self._variants[_key(variant)] = variant
            self._by_slot[variant.slot].append(variant)
        for slot_variants in self._by_slot.values():
            slot_variants.sort(key=lambda v: v.id)
        self._credits = dict(credits or {})

    def __len__(self) -> int:
        return len(self._variants)

    def list_variants(self, slot: str, bucket: str) -> List[AssetVariant]:
        """Variants of a slot drawn for `bucket` (or for every bucket)."""
        return [v for v in self._by_slot.get(slot, []) if v.fits(bucket)]

    def resolve_image(self, variant: AssetVariant, animation: str) -> Optional[pathlib.Path]:
        registered = self._variants.get(_key(variant))
        if registered is None:
            return None
        return registered.image(animation)

    def find(self, slot: str, family: str, color: str, bucket: str) -> Optional[AssetVariant]:
        """Look up one variant of a family in a given color."""
        return self._variants.get((slot, family, bucket, color))

    def colors(self, slot: str, bucket: str) -> List[str]:
        return sorted({v.color for v in self.list_variants(slot, bucket)})

    def families(self, slot: str, bucket: str) -> List[str]:
        return sorted({v.family for v in self.list_variants(slot, bucket)})

    def credit_for(self, variant: AssetVariant) -> CreditRecord:
        info = self._credits.get(variant.id, {})
        return CreditRecord(
            variant.slot, variant.id, *(info.get(column, "") for column in CREDIT_COLUMNS)
        )

    @classmethod
    def from_manifest(cls, manifest, base: Optional[pathlib.Path] = None) -> "AssetCatalog":
        """Build a catalog from a static manifest.

        Args:
            manifest: Mapping slot -> list of variant entries, or a path to a
                JSON file holding that mapping. Each entry has `family`,
                `color`, optional `bucket`, `images` (animation -> path) and
                optional `credits` (authors/licenses/urls).
            base: Directory relative image paths are resolved against.
                Defaults to the manifest file's directory.

        Returns:
            AssetCatalog
        """
        if isinstance(manifest, (str, pathlib.Path)):
            manifest_path = pathlib.Path(manifest)
            base = base or manifest_path.parent
            with open(manifest_path, encoding="utf-8") as f:
                manifest = json.load(f)
        base = pathlib.Path(base or ".")

        variants = []
        credits = {}
        for slot, entries in manifest.items():
            for entry in entries:
                images = {}
                for animation, path in entry.get("images", {}).items():
                    if animation not in ANIMATIONS:
                        raise ValueError(f"Unknown animation {animation!r} in {slot}")
                    images[animation] = base / path
                variant = _variant(
                    slot,
                    entry["family"],
                    entry["color"],
                    entry.get("bucket", UNIVERSAL),
                    images,
                )
                variants.append(variant)
                if "credits" in entry:
                    credits[variant.id] = {
                        column: _join(entry["credits"].get(column, ""))
                        for column in CREDIT_COLUMNS
                    }
        return cls(variants, credits)

    @classmethod
    def from_directory(cls, root: pathlib.Path, layers=LAYERS) -> "AssetCatalog":
        """Scan a spritesheet tree laid out as
        <root>/<slot directory>/<family>/<bucket>/<animation>/<color>.png
        """
        root = pathlib.Path(root)
        variants = []
        relative_dirs = {}

        for slot, directory, _, _ in layers:
            slot_path = root / directory
            if not slot_path.exists():
                raise FileNotFoundError(f"Layer directory not found: {slot_path}")

            found = defaultdict(dict)
            for family_path in sorted(p for p in slot_path.iterdir() if p.is_dir()):
                for bucket_path in sorted(p for p in family_path.iterdir() if p.is_dir()):
                    for animation in ANIMATIONS:
                        for image in sorted((bucket_path / animation).glob("*.png")):
                            key = (family_path.name, bucket_path.name, image.stem)
                            found[key][animation] = image

            for (family, bucket, color), images in found.items():
                variant = _variant(slot, family, color, bucket, images)
                variants.append(variant)
                relative_dirs[variant.id] = f"{directory}/{family}/{bucket}"

        credits = _load_credits(root / CREDITS_FILE, relative_dirs)
        return cls(variants, credits)


def _key(variant: AssetVariant) -> Tuple[str, str, str, str]:
    return (variant.slot, variant.family, variant.bucket, variant.color)


def _variant(slot, family, color, bucket, images) -> AssetVariant:
    ordered = tuple((a, images[a]) for a in ANIMATIONS if a in images)
    return AssetVariant(slot, family, color, bucket, ordered)


def _join(value) -> str:
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    return str(value)


def _load_credits(credits_path: pathlib.Path, relative_dirs: Dict[str, str]):
    """Attribute variants to the credits.csv row with the longest matching path."""
    if not credits_path.exists():
        return {}

    df = pd.read_csv(credits_path, dtype=str).fillna("")
    if "path" not in df.columns:
        raise ValueError(f"{credits_path} has no 'path' column")
    for column in CREDIT_COLUMNS:
        if column not in df.columns:
            df[column] = ""
    df["path"] = df["path"].str.strip("/")
    df = df.sort_values("path", key=lambda s: s.str.len(), ascending=False)

    credits = {}
    for variant_id, relative in relative_dirs.items():
        for _, row in df.iterrows():
            if relative == row["path"] or relative.startswith(row["path"] + "/"):
                credits[variant_id] = {c: row[c] for c in CREDIT_COLUMNS}
                break
    return credits
