"""
Tests for puzzle assembly and move handling.

These run the whole pipeline: synthesis, partition, adjacency and the
solver, then exercise the move API on the result.
"""

import pytest

from py_mapcolor.config import Settings
from py_mapcolor.core.adjacency import is_connected, is_symmetric
from py_mapcolor.core.alea_prng import AleaPRNG
from py_mapcolor.core.coloring import chromatic_number, find_coloring, greedy_upper_bound
from py_mapcolor.core.difficulty import Difficulty, DifficultyConfig
from py_mapcolor.core.geometry import Point, contains_point, is_simple_polygon
from py_mapcolor.core.graph_synthesis import Graph, node_id
from py_mapcolor.core.puzzle import (
    AttemptResult,
    Puzzle,
    Region,
    apply_color,
    attempt_color,
    build_puzzle,
    build_regions,
    count_distinct_colors_used,
    generate_puzzle,
    is_complete,
)


def path_graph(count):
    graph = Graph()
    for i in range(1, count + 1):
        graph.add_node(node_id(i))
    for i in range(1, count):
        graph.add_edge(node_id(i), node_id(i + 1))
    return graph


def hand_built(count, edges, colors=None):
    regions = [Region(id=node_id(i), vertices=[], center=Point(0, 0))
               for i in range(1, count + 1)]
    for a, b in edges:
        regions[a - 1].adjacent_regions.add(node_id(b))
        regions[b - 1].adjacent_regions.add(node_id(a))
    for region, color in zip(regions, colors or []):
        region.color = color
    return regions


@pytest.fixture(scope="module")
def easy_puzzle():
    return generate_puzzle("easy", seed="easy-fixture")


class TestScenarios:
    """End-to-end behaviour on small, controlled inputs."""

    @pytest.mark.parametrize("seed", ["path-a", "path-b", "path-c", "path-d"])
    def test_path_graph_regions_touch_in_order(self, seed):
        regions = build_regions(path_graph(4), 800, 600, 0.3, AleaPRNG(seed))
        assert [r.id for r in regions] == [node_id(i) for i in range(1, 5)]
        for i in range(1, 4):
            assert node_id(i + 1) in regions[i - 1].adjacent_regions

    def test_path_adjacency_needs_two_colors(self):
        regions = hand_built(4, [(1, 2), (2, 3), (3, 4)])
        assert chromatic_number(regions) == 2

    def test_single_region(self):
        config = DifficultyConfig(region_count=1, complexity=0.3)
        puzzle = build_puzzle(config, 800, 600, AleaPRNG("single"))
        assert len(puzzle.regions) == 1
        assert puzzle.minimum_colors == 1
        assert puzzle.regions[0].adjacent_regions == set()
        assert puzzle.certified

    def test_budget_exhaustion_is_flagged(self):
        config = DifficultyConfig(region_count=6, complexity=0.3)
        tight = Settings(_env_file=None, max_backtrack_steps=1)
        puzzle = build_puzzle(config, 800, 600, AleaPRNG("budget"), app_settings=tight)
        assert not puzzle.certified
        assert puzzle.minimum_colors == puzzle.greedy_colors
        assert puzzle.minimum_colors == greedy_upper_bound(puzzle.regions)

    def test_conflicting_attempt_rejected(self):
        regions = hand_built(2, [(1, 2)], colors=["red", None])
        assert attempt_color(node_id(2), "red", regions) == AttemptResult(False, True)
        assert regions[1].color is None

    def test_accepted_attempt(self):
        regions = hand_built(2, [(1, 2)], colors=["red", None])
        result = attempt_color(node_id(2), "blue", regions)
        assert result.accepted and not result.conflict
        assert regions[1].color is None


class TestGeneratePuzzle:
    """Properties of generated puzzles for every tier."""

    @pytest.mark.parametrize("difficulty,low,high", [
        (Difficulty.EASY, 4, 7),
        (Difficulty.MEDIUM, 8, 11),
        (Difficulty.HARD, 12, 15),
    ])
    def test_tier_properties(self, difficulty, low, high):
        puzzle = generate_puzzle(difficulty, seed=f"tier-{difficulty.value}")
        regions = puzzle.regions

        assert low <= len(regions) <= high
        assert len({r.id for r in regions}) == len(regions)
        for region in regions:
            assert is_simple_polygon(region.vertices)
            assert contains_point(region.vertices, region.center)
            assert region.color is None
        assert is_symmetric(regions)
        assert is_connected(regions)
        assert 1 <= puzzle.minimum_colors <= puzzle.greedy_colors
        assert puzzle.greedy_colors == greedy_upper_bound(regions)

    def test_minimum_is_exact(self, easy_puzzle):
        assert easy_puzzle.certified
        minimum = easy_puzzle.minimum_colors
        assert find_coloring(easy_puzzle.regions, minimum) is not None
        assert find_coloring(easy_puzzle.regions, minimum - 1) is None

    def test_region_shapes(self, easy_puzzle):
        for region in easy_puzzle.regions:
            assert region.polygon().is_valid
            assert region.area == pytest.approx(region.polygon().area)

    def test_unpacks_as_pair(self, easy_puzzle):
        regions, minimum = easy_puzzle
        assert regions is easy_puzzle.regions
        assert minimum == easy_puzzle.minimum_colors

    def test_same_seed_same_puzzle(self):
        first = generate_puzzle("medium", level=2, seed="replay")
        second = generate_puzzle("medium", level=2, seed="replay")
        assert [(r.id, r.vertices, r.adjacent_regions) for r in first.regions] == \
            [(r.id, r.vertices, r.adjacent_regions) for r in second.regions]
        assert first.minimum_colors == second.minimum_colors

    def test_seed_drawn_when_missing(self):
        puzzle = generate_puzzle("easy")
        assert isinstance(puzzle, Puzzle)
        assert puzzle.seed

    def test_board_size_override(self):
        puzzle = generate_puzzle("easy", board_width=400, board_height=300, seed="small")
        for region in puzzle.regions:
            for p in region.vertices:
                assert 0 <= p.x <= 400 and 0 <= p.y <= 300

    def test_settings_board_size(self):
        custom = Settings(board_width=500, board_height=500, board_margin=20)
        puzzle = generate_puzzle("easy", seed="settings", app_settings=custom)
        for region in puzzle.regions:
            for p in region.vertices:
                assert 0 <= p.x <= 500 and 0 <= p.y <= 500

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            generate_puzzle("impossible", seed="x")
        with pytest.raises(ValueError):
            generate_puzzle("easy", level=0, seed="x")


class TestMoves:
    """Applying colors and the completion queries."""

    def test_apply_accepted(self):
        regions = hand_built(2, [(1, 2)], colors=["red", None])
        result, updated = apply_color(node_id(2), "blue", regions)
        assert result.accepted
        assert [r.color for r in updated] == ["red", "blue"]
        assert regions[1].color is None

    def test_apply_conflict_leaves_regions(self):
        regions = hand_built(2, [(1, 2)], colors=["red", None])
        result, updated = apply_color(node_id(2), "red", regions)
        assert result.conflict
        assert [r.color for r in updated] == ["red", None]

    def test_apply_unknown_region(self):
        with pytest.raises(KeyError):
            apply_color("region-9", "red", hand_built(2, [(1, 2)]))

    def test_play_to_completion(self, easy_puzzle):
        coloring = find_coloring(easy_puzzle.regions, easy_puzzle.minimum_colors)
        palette = ["red", "green", "blue", "yellow", "purple", "orange"]

        regions = list(easy_puzzle.regions)
        assert not is_complete(regions)
        for region_id, color in coloring.items():
            result, regions = apply_color(region_id, palette[color - 1], regions)
            assert result.accepted

        assert is_complete(regions)
        assert count_distinct_colors_used(regions) == easy_puzzle.minimum_colors
        assert all(r.color is None for r in easy_puzzle.regions)

    def test_completion_queries(self):
        assert is_complete([])
        assert count_distinct_colors_used([]) == 0
        regions = hand_built(3, [], colors=["red", "red", None])
        assert not is_complete(regions)
        assert count_distinct_colors_used(regions) == 1
