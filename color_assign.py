from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import List, Optional, Protocol

from gantt_models import Task
from palettes import DEFAULT_PALETTE


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Independent generator; pass a seed for reproducible charts and tests."""
    return random.Random(seed)


def _candidates(palette: Sequence[str], previous: Optional[str]) -> List[str]:
    # Only the immediate predecessor is excluded. A single-color palette would
    # leave nothing to pick from, so it degrades to no exclusion.
    if previous is None:
        return list(palette)
    reduced = [c for c in palette if c != previous]
    return reduced or list(palette)


def assign_colors(n: int, palette: Sequence[str] = DEFAULT_PALETTE, *, rng: Optional[random.Random] = None) -> List[str]:
    """
    Randomly color n consecutive tasks so that no two neighbours share a color.

    Rules:
    - n <= 0 returns [].
    - Position 0 is chosen freely from the palette.
    - Every later position excludes exactly the color chosen just before it and
      picks uniformly from what is left.
    """
    if n <= 0:
        return []
    palette = list(palette) or list(DEFAULT_PALETTE)
    rng = rng or make_rng()

    out: List[str] = []
    previous: Optional[str] = None
    for _ in range(n):
        choice = rng.choice(_candidates(palette, previous))
        out.append(choice)
        previous = choice
    return out


# ---------------------------------------------------------------------------
# Fallback strategies (tasks with neither colorIndex nor color)
# ---------------------------------------------------------------------------

class ColorResolutionStrategy(Protocol):
    name: str

    def pick(self, position: int, previous: Optional[str], palette: Sequence[str]) -> str:
        ...


class ModuloIndexStrategy:
    """Tabular input: task i gets palette[i mod len(palette)]."""

    name = "modulo"

    def pick(self, position: int, previous: Optional[str], palette: Sequence[str]) -> str:
        return palette[position % len(palette)]


class AdjacencySafeRandomStrategy:
    """Declarative input: random color that differs from the previous task's color."""

    name = "adjacency_random"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or make_rng()

    def pick(self, position: int, previous: Optional[str], palette: Sequence[str]) -> str:
        return self.rng.choice(_candidates(palette, previous))


def strategy_for_format(source_format: str, rng: Optional[random.Random] = None) -> ColorResolutionStrategy:
    if source_format == "xlsx":
        return ModuloIndexStrategy()
    if source_format == "json":
        return AdjacencySafeRandomStrategy(rng)
    raise ValueError(f"No color strategy for source format {source_format!r}")


def palette_color_for_index(color_index: Optional[int], palette: Sequence[str]) -> Optional[str]:
    if color_index is None or not (0 <= color_index < len(palette)):
        return None
    return palette[color_index]


def resolve_task_colors(
    tasks: Iterable[Task],
    palette: Sequence[str],
    strategy: ColorResolutionStrategy,
) -> List[Task]:
    """
    Give every task a concrete color.

    Precedence per task:
      1) colorIndex in range -> palette[colorIndex] (wins over a direct color)
      2) direct color -> kept
      3) strategy.pick(position, previous task's color, palette)

    Returns copies; the input tasks are left untouched.
    """
    palette = list(palette) or list(DEFAULT_PALETTE)
    out: List[Task] = []
    previous: Optional[str] = None
    for position, task in enumerate(tasks):
        color = palette_color_for_index(task.color_index, palette) or task.color
        if color is None:
            color = strategy.pick(position, previous, palette)
        out.append(task.model_copy(update={"color": color}))
        previous = color
    return out
