"""
Static definitions for board variants.
Each variant lives in data/variants/<variant_id>.json: id, display_name, description,
order (menu position) and starting_points ({side: {point_index: count}}).
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from backend.engine import PIECES_PER_SIDE, POINT_COUNT, SIDES
from backend.engine.errors import UnknownVariant

DATA_DIR = Path(__file__).parent.parent / "data"
VARIANTS_DIR = DATA_DIR / "variants"


def _default_variant_id() -> str:
    """Single place for default: backend.config.DEFAULT_VARIANT."""
    from backend.config import DEFAULT_VARIANT
    return DEFAULT_VARIANT


@dataclass(frozen=True)
class VariantDefinition:
    """Defines the immutable properties of a board variant."""
    id: str
    display_name: str
    description: str
    # side -> {point_index: piece count}
    starting_points: dict[str, dict[int, int]]
    order: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "description": self.description,
        }


def _parse_variant(data: dict, source: Path) -> VariantDefinition:
    starting_points: dict[str, dict[int, int]] = {}
    for side in SIDES:
        layout = {int(k): int(v) for k, v in data["starting_points"][side].items()}
        if any(not 0 <= i < POINT_COUNT for i in layout):
            raise ValueError(f"{source.name}: {side} point index out of range")
        if sum(layout.values()) != PIECES_PER_SIDE:
            raise ValueError(
                f"{source.name}: {side} starts with {sum(layout.values())} pieces, "
                f"expected {PIECES_PER_SIDE}"
            )
        starting_points[side] = layout
    shared = set(starting_points[SIDES[0]]) & set(starting_points[SIDES[1]])
    if shared:
        raise ValueError(f"{source.name}: both sides start on points {sorted(shared)}")
    return VariantDefinition(
        id=data["id"],
        display_name=data.get("display_name", data["id"]),
        description=data.get("description", ""),
        starting_points=starting_points,
        order=int(data.get("order", 0)),
    )


@lru_cache(maxsize=None)
def load_variants(data_dir: Path | str | None = None) -> dict[str, VariantDefinition]:
    """
    Load every variant definition.

    Args:
        data_dir: Directory of <variant_id>.json files. Defaults to data/variants/.

    Returns: {variant_id: VariantDefinition}, in menu order
    """
    directory = Path(data_dir) if data_dir is not None else VARIANTS_DIR
    variants = []
    for path in sorted(directory.glob("*.json")):
        with open(path, "r") as f:
            variants.append(_parse_variant(json.load(f), path))
    variants.sort(key=lambda v: (v.order, v.id))
    return {v.id: v for v in variants}


def list_variants() -> list[dict]:
    """Return [{ id, display_name, description }, ...] for all variants."""
    return [v.to_dict() for v in load_variants().values()]


def load_variant(variant_id: str | None = None) -> VariantDefinition:
    """Load a variant by id; None selects the configured default."""
    if variant_id is None:
        variant_id = _default_variant_id()
    variants = load_variants()
    if variant_id not in variants:
        raise UnknownVariant(
            f"Variant not found: {variant_id}. Known variants: {', '.join(variants)}"
        )
    return variants[variant_id]
