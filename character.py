"""Value types describing what a character is made of."""
import pathlib
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterator, Optional, Tuple

from config import UNIVERSAL, Z_RANK


@dataclass(frozen=True)
class AssetVariant:
    """One drawable layer: a family of images in one color for one slot.

    `images` maps animation name to the image file for that animation.
    Animations the layer does not support are simply absent.
    """

    slot: str
    family: str
    color: str
    bucket: str = UNIVERSAL
    images: Tuple[Tuple[str, pathlib.Path], ...] = field(default=(), compare=False)

    @property
    def id(self) -> str:
        return f"{self.slot}/{self.family}/{self.bucket}/{self.color}"

    @property
    def z_rank(self) -> int:
        return Z_RANK[self.slot]

    def image(self, animation: str) -> Optional[pathlib.Path]:
        for name, path in self.images:
            if name == animation:
                return path
        return None

    def fits(self, bucket: str) -> bool:
        return self.bucket in (bucket, UNIVERSAL)


@dataclass(frozen=True)
class CharacterDefinition:
    """Immutable selection of one variant per slot plus descriptive labels.

    Role and name only end up in metadata. `unmatched` lists color-linked
    slots whose selection could not follow the last body color change.
    """

    bucket: str
    body_color: str
    role: str = ""
    name: Optional[str] = None
    selection: Tuple[Tuple[str, AssetVariant], ...] = ()
    unmatched: FrozenSet[str] = frozenset()
    match_body_color: bool = True

    @classmethod
    def build(cls, bucket: str, body_color: str, variants=(), **labels):
        definition = cls(bucket=bucket, body_color=body_color, **labels)
        for variant in variants:
            definition = definition.with_variant(variant)
        return definition

    @property
    def variants(self) -> Dict[str, AssetVariant]:
        return dict(self.selection)

    def get(self, slot: str) -> Optional[AssetVariant]:
        return self.variants.get(slot)

    def layers(self) -> Iterator[AssetVariant]:
        """Selected variants, lowest z-rank first."""
        return iter(sorted((v for _, v in self.selection), key=lambda v: v.z_rank))

    def with_variant(self, variant: AssetVariant) -> "CharacterDefinition":
        if variant.slot not in Z_RANK:
            raise ValueError(f"Unknown slot: {variant.slot}")
        selection = dict(self.selection)
        selection[variant.slot] = variant
        return replace(
            self,
            selection=_ordered(selection),
            unmatched=self.unmatched - {variant.slot},
        )

    def without(self, slot: str) -> "CharacterDefinition":
        selection = dict(self.selection)
        selection.pop(slot, None)
        return replace(
            self, selection=_ordered(selection), unmatched=self.unmatched - {slot}
        )

    def traits(self) -> Dict[str, str]:
        """Slot -> variant id for every slot, "none" where nothing is selected."""
        variants = self.variants
        return {
            slot: variants[slot].id if slot in variants else "none" for slot in Z_RANK
        }


def _ordered(selection: Dict[str, AssetVariant]) -> Tuple[Tuple[str, AssetVariant], ...]:
    return tuple(sorted(selection.items(), key=lambda item: Z_RANK[item[0]]))
