"""
Core puzzle generation functionality.
"""

from .alea_prng import AleaPRNG
from .graph_synthesis import Graph, Node, synthesize, default_connectivity
from .geometry import Point, is_simple_polygon
from .partition import PartitionOptions, PartitionError, partition
from .adjacency import resolve, is_connected
from .coloring import (
    chromatic_number, solve_chromatic, greedy_upper_bound, has_conflict, find_coloring,
)
from .difficulty import Difficulty, DifficultyConfig, get_difficulty_config
from .puzzle import (
    Region, Puzzle, AttemptResult, build_regions, build_puzzle, generate_puzzle,
    attempt_color, apply_color, is_complete, count_distinct_colors_used,
)

__all__ = ['AleaPRNG', 'Graph', 'Node', 'synthesize', 'default_connectivity',
           'Point', 'is_simple_polygon', 'PartitionOptions', 'PartitionError', 'partition',
           'resolve', 'is_connected', 'chromatic_number', 'solve_chromatic', 'greedy_upper_bound',
           'has_conflict', 'find_coloring', 'Difficulty', 'DifficultyConfig',
           'get_difficulty_config', 'Region', 'Puzzle', 'AttemptResult', 'build_regions',
           'build_puzzle', 'generate_puzzle', 'attempt_color', 'apply_color',
           'is_complete', 'count_distinct_colors_used']
