"""
Puzzle assembly and the move-level queries used during play.

Pipeline:
1. get_difficulty_config() - region count and complexity for the tier
2. synthesize() - abstract connected graph
3. partition() - one organic polygon per node
4. resolve() - geometric adjacency, authoritative from here on
5. solve_chromatic() - minimum color count, flagged when only a bound
"""

import secrets
from dataclasses import dataclass, field, replace
from typing import Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

import structlog
from shapely.geometry import Polygon

from .adjacency import resolve
from .alea_prng import AleaPRNG
from .coloring import greedy_upper_bound, has_conflict, solve_chromatic
from .difficulty import Difficulty, DifficultyConfig, get_difficulty_config
from .geometry import Point, polygon_area, to_polygon
from .graph_synthesis import Graph, default_connectivity, synthesize
from .partition import PartitionOptions, partition
from ..config import Settings, settings as default_settings

logger = structlog.get_logger()


@dataclass
class Region:
    """A colorable polygon of the board."""
    id: str
    vertices: List[Point]
    center: Point
    color: Optional[str] = None
    adjacent_regions: Set[str] = field(default_factory=set)

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)

    @property
    def is_colored(self) -> bool:
        return self.color is not None

    def polygon(self) -> Polygon:
        """Shapely view of the outline."""
        return to_polygon(self.vertices)

    def with_color(self, color: Optional[str]) -> "Region":
        return replace(self, color=color, adjacent_regions=set(self.adjacent_regions))


class AttemptResult(NamedTuple):
    accepted: bool
    conflict: bool


@dataclass
class Puzzle:
    """Playable region set with its minimum color count.

    ``certified`` is False when the solver ran out of budget and
    ``minimum_colors`` holds the greedy bound instead of a proven minimum.
    Unpacks as ``regions, minimum_colors``.
    """
    regions: List[Region]
    minimum_colors: int
    greedy_colors: int
    config: DifficultyConfig
    seed: str
    certified: bool = True

    def __iter__(self) -> Iterator:
        return iter((self.regions, self.minimum_colors))


def partition_options(config: Settings) -> PartitionOptions:
    return PartitionOptions(
        margin=config.board_margin,
        split_attempts=config.split_attempts,
        alignment_tolerance=config.adjacency_tolerance,
        alignment_reach_factor=config.adjacency_reach_factor,
    )


def build_regions(graph: Graph, board_width: float, board_height: float,
                  complexity: float, prng: AleaPRNG,
                  options: Optional[PartitionOptions] = None,
                  tolerance: float = 15.0, reach_factor: float = 2.2) -> List[Region]:
    """
    Turn a graph into resolved regions, one per node and with the node's id.

    The graph's own edges are discarded; adjacency comes from geometry.
    """
    outlines = partition(graph, board_width, board_height, complexity, prng, options)
    regions = [
        Region(id=node.id, vertices=list(vertices), center=center)
        for node, (vertices, center) in zip(graph.nodes(), outlines)
    ]
    return resolve(regions, tolerance=tolerance, reach_factor=reach_factor)


def build_puzzle(config: DifficultyConfig, board_width: float, board_height: float,
                 prng: AleaPRNG, seed: str = "",
                 app_settings: Optional[Settings] = None) -> Puzzle:
    """Generate a puzzle for an explicit configuration."""
    app_settings = app_settings or default_settings
    count = config.region_count

    graph = synthesize(count, default_connectivity(count), prng)
    regions = build_regions(graph, board_width, board_height, config.complexity, prng,
                            partition_options(app_settings),
                            tolerance=app_settings.adjacency_tolerance,
                            reach_factor=app_settings.adjacency_reach_factor)

    minimum, certified = solve_chromatic(regions, max_steps=app_settings.max_backtrack_steps)
    greedy = greedy_upper_bound(regions)

    logger.info("Puzzle generated",
                seed=seed,
                regions=len(regions),
                complexity=config.complexity,
                minimum_colors=minimum,
                certified=certified,
                greedy_colors=greedy,
                synthesized_edges=graph.edge_count,
                resolved_edges=sum(len(r.adjacent_regions) for r in regions) // 2)
    return Puzzle(regions=regions, minimum_colors=minimum, greedy_colors=greedy,
                  config=config, seed=seed, certified=certified)


def generate_puzzle(difficulty: Union[str, Difficulty], level: int = 1,
                    board_width: Optional[float] = None,
                    board_height: Optional[float] = None,
                    seed: Optional[str] = None,
                    app_settings: Optional[Settings] = None) -> Puzzle:
    """
    Generate a new puzzle end to end.

    Args:
        difficulty: "easy", "medium" or "hard"
        level: Progression level within the tier, from 1
        board_width: Board width, defaults to settings
        board_height: Board height, defaults to settings
        seed: Replay seed; a fresh one is drawn when omitted
        app_settings: Settings override

    Returns:
        Puzzle, also unpackable as (regions, minimum_colors)
    """
    app_settings = app_settings or default_settings
    width = board_width if board_width is not None else app_settings.board_width
    height = board_height if board_height is not None else app_settings.board_height
    seed = seed if seed is not None else secrets.token_hex(8)

    prng = AleaPRNG(seed)
    config = get_difficulty_config(difficulty, level, prng)
    logger.info("Generating puzzle",
                difficulty=str(getattr(difficulty, "value", difficulty)), level=level,
                regions=config.region_count, width=width, height=height, seed=seed)
    return build_puzzle(config, width, height, prng, seed=seed, app_settings=app_settings)


def attempt_color(region_id: str, color: Optional[str],
                  regions: Sequence[Region]) -> AttemptResult:
    """Check a coloring move; the regions are never modified."""
    conflict = has_conflict(region_id, color, regions)
    return AttemptResult(accepted=not conflict, conflict=conflict)


def apply_color(region_id: str, color: Optional[str],
                regions: Sequence[Region]) -> Tuple[AttemptResult, List[Region]]:
    """
    Attempt a move and return the resulting region list.

    On conflict the returned list holds the original, unchanged regions.
    """
    result = attempt_color(region_id, color, regions)
    if not result.accepted:
        return result, list(regions)
    return result, [r.with_color(color) if r.id == region_id else r for r in regions]


def is_complete(regions: Sequence[Region]) -> bool:
    return all(r.color is not None for r in regions)


def count_distinct_colors_used(regions: Sequence[Region]) -> int:
    return len({r.color for r in regions if r.color is not None})
