"""Materials — stackable inventory items dropped while tapping."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MaterialDef:
    id: str
    name: str
    description: str = ""


BARK_CHIP = MaterialDef("bark_chip", "Bark Chip", "Shaved off with every cut.")
LATEX_LUMP = MaterialDef("latex_lump", "Latex Lump", "Dried latex left in the cup.")
FERTILIZER = MaterialDef("fertilizer", "Fertilizer", "Speeds up a growing seedling.")

ALL_MATERIALS: dict[str, MaterialDef] = {
    m.id: m for m in (BARK_CHIP, LATEX_LUMP, FERTILIZER)
}
