import pytest

from color_assign import (
    AdjacencySafeRandomStrategy,
    ModuloIndexStrategy,
    assign_colors,
    make_rng,
    resolve_task_colors,
    strategy_for_format,
)
from gantt_models import Task
from palettes import DEFAULT_PALETTE

PALETTE = ["#AAAAAA", "#BBBBBB", "#CCCCCC"]


def test_assign_colors_never_repeats_neighbours():
    for seed in range(25):
        colors = assign_colors(40, DEFAULT_PALETTE, rng=make_rng(seed))
        assert len(colors) == 40
        assert all(c in DEFAULT_PALETTE for c in colors)
        assert all(a != b for a, b in zip(colors, colors[1:]))


def test_assign_colors_edge_sizes():
    assert assign_colors(0) == []
    assert assign_colors(-3) == []
    assert len(assign_colors(1, rng=make_rng(1))) == 1


def test_assign_colors_single_color_palette_repeats():
    assert assign_colors(4, ["#123456"], rng=make_rng(0)) == ["#123456"] * 4


def test_assign_colors_is_reproducible_with_seed():
    assert assign_colors(12, rng=make_rng(7)) == assign_colors(12, rng=make_rng(7))


def test_strategy_for_format():
    assert isinstance(strategy_for_format("xlsx"), ModuloIndexStrategy)
    assert isinstance(strategy_for_format("json", make_rng(0)), AdjacencySafeRandomStrategy)
    with pytest.raises(ValueError):
        strategy_for_format("csv")


def test_color_index_wins_over_direct_color():
    tasks = [Task(name="A", color="#FF0000", color_index=1)]
    out = resolve_task_colors(tasks, PALETTE, ModuloIndexStrategy())
    assert out[0].color == "#BBBBBB"
    # inputs are not mutated
    assert tasks[0].color == "#FF0000"


def test_out_of_range_index_falls_back_to_color_then_strategy():
    tasks = [
        Task(name="A", color="#FF0000", color_index=9),
        Task(name="B", color_index=-1),
        Task(name="C"),
    ]
    out = resolve_task_colors(tasks, PALETTE, ModuloIndexStrategy())
    assert [t.color for t in out] == ["#FF0000", "#BBBBBB", "#CCCCCC"]


def test_random_fallback_differs_from_previous_resolved_color():
    tasks = [Task(name="A", color="#AAAAAA")] + [Task(name=f"T{i}") for i in range(20)]
    out = resolve_task_colors(tasks, PALETTE, AdjacencySafeRandomStrategy(make_rng(3)))
    colors = [t.color for t in out]
    assert all(a != b for a, b in zip(colors, colors[1:]))
