import argparse
import os
import pathlib
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from progressbar import progressbar
from scipy.stats import qmc

from catalog import AssetCatalog
from character import CharacterDefinition
from colormatch import match_body_color
from compositor import Gap, check_raster, compose_to_file
from credits import CreditRecord, credits_frame
from config import (
    ASSETS_PATH,
    BUCKETS,
    COLOR_LINKED,
    DEFAULT_COUNT,
    FIRST_NAMES,
    MAX_RETRIES,
    OUTPUT_PATH,
    PROBABILITY,
    ROLES,
    SLOTS,
)
from errors import CompositorError, IdentifierCollision, OutputUnavailable, ResourceFailure
from metadata import NONE_VALUE, build_metadata, metadata_row, save_run_metadata, write_metadata

CREDITS_CSV = "CREDITS.csv"

# Uniform draws per candidate: bucket, body color, name, then (gate, pick) per slot
NUM_DIMENSIONS = 3 + 2 * len(SLOTS)


@dataclass
class BatchReport:
    written: List[str] = field(default_factory=list)
    failures: List[Tuple[str, ResourceFailure]] = field(default_factory=list)
    gaps: Dict[str, List[Gap]] = field(default_factory=dict)
    cancelled: bool = False
    metadata: Optional[pd.DataFrame] = None


class TraitSampler:
    """Quasi-random uniform draws in [0, 1), one point per candidate character."""

    def __init__(self, seed=None):
        self.rng = np.random.default_rng(seed)
        self.halton = qmc.Halton(d=NUM_DIMENSIONS, seed=self.rng)

    def draw(self) -> np.ndarray:
        return self.halton.random(n=1)[0]


def pick_index(value: float, weights: Optional[Sequence[float]] = None, size: int = 0) -> int:
    """Inverse transform sampling of one index from (cumulative) weights.

    np.searchsorted with side='right' maps a uniform value to the first
    bucket whose cumulative weight exceeds it.
    """
    if weights is None:
        weights = [1.0] * size
    weights = np.asarray(weights, dtype=float)
    cum_weights = np.cumsum(weights / weights.sum())
    index = int(np.searchsorted(cum_weights, value, side="right"))
    return min(index, len(weights) - 1)


def make_identifier(index: int, role: str, name: Optional[str] = None) -> str:
    """Output stem of the character at 0-based `index`."""
    if name:
        return f"prefab_{index + 1:03d}_{name}_{role}"
    return f"prefab_{index + 1:03d}_{role}"


def sample_definition(
    index: int,
    catalog: AssetCatalog,
    draws: np.ndarray,
    roles: Sequence[str] = ROLES,
    buckets: Sequence[str] = BUCKETS,
    body_colors: Optional[Sequence[str]] = None,
    names: Optional[Sequence[str]] = None,
    probabilities: Optional[Dict[str, float]] = None,
) -> CharacterDefinition:
    """Turn one point of uniform draws into a character.

    The role is not sampled, it cycles through `roles` with the index.
    Optional slots are included when their draw falls under the slot's
    probability.
    """
    probabilities = {**PROBABILITY, **(probabilities or {})}

    role = roles[index % len(roles)]
    bucket = buckets[pick_index(draws[0], size=len(buckets))]

    colors = catalog.colors("body", bucket)
    if body_colors:
        colors = [c for c in colors if c in body_colors] or list(body_colors)
    body_color = colors[pick_index(draws[1], size=len(colors))] if colors else NONE_VALUE
    name = names[pick_index(draws[2], size=len(names))] if names else None

    definition = CharacterDefinition(bucket=bucket, body_color=body_color, role=role, name=name)

    for slot_idx, slot in enumerate(SLOTS):
        gate, choice = draws[3 + 2 * slot_idx], draws[4 + 2 * slot_idx]
        if gate >= probabilities.get(slot, 1.0):
            continue

        options = catalog.list_variants(slot, bucket)
        if COLOR_LINKED.get(slot):
            options = [v for v in options if v.color == body_color] or options
        if not options:
            continue

        definition = definition.with_variant(options[pick_index(choice, size=len(options))])

    return match_body_color(definition, body_color, catalog)


def generate_definitions(
    catalog: AssetCatalog,
    count: int,
    roles: Sequence[str] = ROLES,
    seed=None,
    names: Optional[Sequence[str]] = None,
    unique_looks: bool = False,
    max_retries: int = MAX_RETRIES,
    **pools,
) -> List[Tuple[str, CharacterDefinition]]:
    """Sample `count` characters with pairwise distinct identifiers.

    A candidate whose identifier (or, with `unique_looks`, whose trait
    combination) was already emitted is resampled for the same index.

    Args:
        catalog: Catalog the traits are drawn from
        count: Number of characters
        roles: Role labels, assigned cyclically
        seed: Seed making the batch reproducible
        names: Optional first names included in identifiers
        unique_looks: Also reject repeated trait combinations
        max_retries: Resamples allowed per index when `unique_looks` is set

    Returns:
        List of (identifier, definition) in index order
    """
    if not roles:
        raise ValueError("At least one role is required")

    sampler = TraitSampler(seed)
    emitted = set()
    looks = set()
    result = []

    for index in range(count):
        retries = 0
        while True:
            definition = sample_definition(
                index, catalog, sampler.draw(), roles=roles, names=names, **pools
            )
            identifier = make_identifier(index, definition.role, definition.name)
            look = (definition.bucket, tuple(definition.traits().items()))
            if identifier not in emitted and not (unique_looks and look in looks):
                break

            retries += 1
            if unique_looks and retries > max_retries:
                raise IdentifierCollision(
                    f"No new character for index {index} after {max_retries} retries, "
                    "the trait pools are too small for the requested count"
                )

        emitted.add(identifier)
        looks.add(look)
        result.append((identifier, definition))

    return result


def get_total_combinations(
    catalog: AssetCatalog,
    buckets: Sequence[str] = BUCKETS,
    body_colors: Optional[Sequence[str]] = None,
) -> int:
    """Get total number of distinct possible combinations.

    Linked layers follow the body color, so only their families count.
    `body_colors` restricts the body layers counted.
    """
    total = 0
    for bucket in buckets:
        combinations = 1
        for slot in SLOTS:
            if COLOR_LINKED[slot] and slot != "body":
                options = len(catalog.families(slot, bucket))
            elif slot == "body" and body_colors:
                options = len(
                    [v for v in catalog.list_variants(slot, bucket) if v.color in body_colors]
                )
            else:
                options = len(catalog.list_variants(slot, bucket))
            if PROBABILITY[slot] < 1.0 or options == 0:
                options += 1
            combinations *= options
        total += combinations
    return total


def prepare_output(output_path: pathlib.Path) -> pathlib.Path:
    """Create the output directory, failing before any character is drawn."""
    output_path = pathlib.Path(output_path)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputUnavailable(f"Cannot create output directory {output_path}: {e}") from e
    if not os.access(output_path, os.W_OK):
        raise OutputUnavailable(f"Output directory is not writable: {output_path}")
    return output_path


def render_character(
    identifier: str,
    definition: CharacterDefinition,
    catalog: AssetCatalog,
    output_path: pathlib.Path,
) -> Tuple[List[Gap], List[CreditRecord]]:
    """Composite one character and write its sheet and sidecar record."""
    result = compose_to_file(definition, catalog, output_path / f"{identifier}.png")
    write_metadata(
        output_path / f"{identifier}.json",
        build_metadata(identifier, definition, result.credits),
    )
    return result.gaps, result.credits


def generate_batch(
    catalog: AssetCatalog,
    count: int = DEFAULT_COUNT,
    output_path: pathlib.Path = OUTPUT_PATH,
    workers: int = 1,
    cancel: Optional[threading.Event] = None,
    **options,
) -> BatchReport:
    """Generate `count` characters into `output_path`.

    Run-level problems (raster backend, output directory) raise before the
    first character. A character whose images cannot be read is reported
    and skipped. `cancel` is checked between characters.
    """
    check_raster()
    output_path = prepare_output(output_path)

    definitions = generate_definitions(catalog, count, **options)
    report = BatchReport()
    completed = {}

    def task(identifier, definition):
        if cancel is not None and cancel.is_set():
            return None
        return render_character(identifier, definition, catalog, output_path)

    def record(identifier, outcome):
        if isinstance(outcome, ResourceFailure):
            report.failures.append((identifier, outcome))
            print(f"❌ {identifier}: {outcome.variant_id} [{outcome.animation}] {outcome.reason}")
        elif outcome is None:
            report.cancelled = True
        else:
            completed[identifier] = outcome

    if workers <= 1:
        for identifier, definition in progressbar(definitions):
            if cancel is not None and cancel.is_set():
                report.cancelled = True
                break
            try:
                record(identifier, task(identifier, definition))
            except ResourceFailure as e:
                record(identifier, e)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(task, i, d): i for i, d in definitions}
            for future in progressbar(as_completed(futures), max_value=len(futures)):
                exc = future.exception()
                if exc is not None and not isinstance(exc, ResourceFailure):
                    raise exc
                record(futures[future], exc if exc is not None else future.result())

    rows = []
    records = []
    for identifier, definition in definitions:
        if identifier in completed:
            gaps, credits = completed[identifier]
            report.written.append(identifier)
            report.gaps[identifier] = gaps
            records.extend(credits)
            rows.append(metadata_row(identifier, definition))

    report.metadata = save_run_metadata(output_path, rows)
    credits_frame(records).to_csv(output_path / CREDITS_CSV, index=False)
    print(f"Generated {len(report.written)} characters")
    return report


def generate_inclusion_stats(
    metadata_df: pd.DataFrame, probabilities: Optional[Dict[str, float]] = None
) -> float:
    """Display how often each slot was filled against its target probability."""
    probabilities = {**PROBABILITY, **(probabilities or {})}
    max_diff = 0.0
    if metadata_df.empty:
        return max_diff

    for slot in SLOTS:
        if slot not in metadata_df.columns:
            continue
        target_prob = probabilities[slot]
        actual_prob = float((metadata_df[slot] != NONE_VALUE).mean())
        diff = abs(actual_prob - target_prob)
        max_diff = max(max_diff, diff)
        print(
            f"  {slot}: {actual_prob:.4f} (target: {target_prob:.4f}, diff: {diff:.4f})"
        )

    print(f"  Body types: {metadata_df['body_type'].value_counts().to_dict()}")
    print(f"  Max difference: {max_diff:.4f}")
    return max_diff


def load_catalog(args) -> AssetCatalog:
    if args.manifest:
        return AssetCatalog.from_manifest(args.manifest)
    return AssetCatalog.from_directory(args.assets)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate layered humanoid sprite sheets with JSON metadata"
    )
    parser.add_argument("--count", type=int, default=DEFAULT_COUNT, help="characters to generate")
    parser.add_argument("--output", type=pathlib.Path, default=OUTPUT_PATH, help="output directory")
    parser.add_argument("--assets", type=pathlib.Path, default=ASSETS_PATH, help="spritesheet tree")
    parser.add_argument("--manifest", type=pathlib.Path, help="JSON manifest instead of a tree scan")
    parser.add_argument("--seed", type=int, help="seed for a reproducible batch")
    parser.add_argument("--names", action="store_true", help="include first names in ids")
    parser.add_argument("--workers", type=int, default=1, help="parallel compositing threads")
    parser.add_argument("--unique-looks", action="store_true", help="reject repeated trait sets")
    parser.add_argument("--bucket", action="append", choices=BUCKETS, help="restrict body types")
    parser.add_argument("--body-color", action="append", help="restrict body colors")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Prefab generation workflow."""
    args = parse_args(argv)

    print("Checking assets...")
    try:
        check_raster()
        catalog = load_catalog(args)
    except (CompositorError, FileNotFoundError, KeyError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    print(f"✅ {len(catalog)} asset variants found\n")

    buckets = args.bucket or BUCKETS
    total_combinations = get_total_combinations(catalog, buckets, args.body_color)
    print(f"You can create up to {total_combinations} distinct characters\n")

    print("Starting generation...")
    try:
        report = generate_batch(
            catalog,
            count=args.count,
            output_path=args.output,
            workers=args.workers,
            seed=args.seed,
            names=FIRST_NAMES if args.names else None,
            unique_looks=args.unique_looks,
            buckets=buckets,
            body_colors=args.body_color,
        )
    except CompositorError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    print("\n=== Slot Statistics ===")
    generate_inclusion_stats(report.metadata)

    if report.failures:
        print(f"\n❌ {len(report.failures)} characters failed")
        return 1
    print("✅ Task complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
