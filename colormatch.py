"""Keep color-linked layers (head, ...) in the same color as the body."""
from dataclasses import replace

from catalog import AssetCatalog
from character import CharacterDefinition
from config import COLOR_LINKED


def linked_slots():
    return [slot for slot, linked in COLOR_LINKED.items() if linked]


def match_body_color(
    definition: CharacterDefinition, color: str, catalog: AssetCatalog
) -> CharacterDefinition:
    """Return a copy of `definition` with its body color set to `color`.

    Every selected color-linked layer is swapped for the same family in the
    new color. When the catalog has no such variant the previous selection
    is kept and its slot is listed in `unmatched`.
    """
    definition = replace(definition, body_color=color)
    if not definition.match_body_color:
        return definition

    unmatched = set(definition.unmatched)
    for slot in linked_slots():
        current = definition.get(slot)
        if current is None:
            continue
        if current.color == color:
            unmatched.discard(slot)
            continue
        matched = catalog.find(slot, current.family, color, current.bucket)
        if matched is None:
            unmatched.add(slot)
            continue
        definition = definition.with_variant(matched)
        unmatched.discard(slot)
    return replace(definition, unmatched=frozenset(unmatched))


def select(
    definition: CharacterDefinition, variant, catalog: AssetCatalog
) -> CharacterDefinition:
    """Select a variant the way a user click does.

    Picking a color-linked layer re-colors the other linked layers to its
    color, when color matching is switched on.
    """
    definition = definition.with_variant(variant)
    if definition.match_body_color and COLOR_LINKED.get(variant.slot):
        definition = match_body_color(definition, variant.color, catalog)
    return definition
