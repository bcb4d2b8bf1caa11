#!/usr/bin/env python3
"""
Simple demo script showing puzzle generation and play.
"""

from py_mapcolor.config import settings
from py_mapcolor.core import (
    Difficulty, apply_color, attempt_color, count_distinct_colors_used, find_coloring,
    generate_puzzle, is_complete,
)
from py_mapcolor.logging_config import configure_logging

PALETTE = ["red", "green", "blue", "yellow", "purple", "orange"]


def main():
    """Demonstrate puzzle generation."""
    configure_logging(settings.log_level, "console")

    print("Py-MapColor Puzzle Generation Demo")
    print("=" * 40)

    for difficulty in Difficulty:
        print(f"\n{difficulty.value.upper()} tier:")
        print("-" * 30)

        for level in (1, 5):
            puzzle = generate_puzzle(difficulty, level=level, seed=f"demo-{difficulty.value}-{level}")
            regions = puzzle.regions
            degrees = [len(r.adjacent_regions) for r in regions]

            print(f"  Level {level} (seed {puzzle.seed}):")
            print(f"    Regions: {len(regions)}")
            print(f"    Complexity: {puzzle.config.complexity:.2f}")
            print(f"    Adjacent pairs: {sum(degrees) // 2}")
            print(f"    Degree range: {min(degrees)}-{max(degrees)}")
            print(f"    Minimum colors: {puzzle.minimum_colors} "
                  f"(greedy: {puzzle.greedy_colors}, target: {puzzle.config.target_colors}, "
                  f"certified: {puzzle.certified})")

    # Play an easy puzzle through to the end
    print("\n\nSolving an easy puzzle:")
    print("-" * 30)
    regions, minimum = generate_puzzle("easy", seed="demo-play")

    first, second = regions[0], sorted(regions[0].adjacent_regions)[0]
    result, regions = apply_color(first.id, "red", regions)
    print(f"  {first.id} <- red: accepted={result.accepted}")
    result = attempt_color(second, "red", regions)
    print(f"  {second} <- red: accepted={result.accepted} conflict={result.conflict}")

    coloring = find_coloring(regions, minimum)
    regions = [r.with_color(None) for r in regions]
    for region_id, color in coloring.items():
        result, regions = apply_color(region_id, PALETTE[color - 1], regions)

    print(f"  Complete: {is_complete(regions)}")
    print(f"  Colors used: {count_distinct_colors_used(regions)} (minimum {minimum})")


if __name__ == "__main__":
    main()
