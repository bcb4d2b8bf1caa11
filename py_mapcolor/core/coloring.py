"""
Graph coloring over resolved regions.

Exact chromatic number by backtracking, a Welsh-Powell upper bound, and the
direct-adjacency conflict check used to validate moves. All functions are
stateless and read only ``id``, ``color`` and ``adjacent_regions``.
"""

import re
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import structlog

logger = structlog.get_logger()

Coloring = Dict[str, int]

_TRAILING_NUMBER = re.compile(r"^(.*?)(\d+)$")


class SearchBudgetExceeded(Exception):
    """Backtracking used more steps than allowed."""


def region_sort_key(region_id: str):
    """Natural order for ids such as region-2 < region-10."""
    match = _TRAILING_NUMBER.match(region_id)
    if match:
        return match.group(1), int(match.group(2)), region_id
    return region_id, -1, region_id


def _ordered(regions: Sequence) -> List:
    return sorted(regions, key=lambda r: region_sort_key(r.id))


def _adjacency(regions: Sequence) -> Dict[str, set]:
    known = {r.id for r in regions}
    return {r.id: {a for a in r.adjacent_regions if a in known} for r in regions}


class _Backtracker:
    """Depth-first k-coloring search with an optional shared step budget."""

    def __init__(self, regions: Sequence, max_steps: Optional[int] = None):
        self.order = [r.id for r in _ordered(regions)]
        self.adjacency = _adjacency(regions)
        self.max_steps = max_steps
        self.steps = 0

    def color(self, k: int) -> Optional[Coloring]:
        coloring: Coloring = {}
        if self._extend(0, k, coloring):
            return coloring
        return None

    def _safe(self, region_id: str, color: int, coloring: Coloring) -> bool:
        return all(coloring.get(other) != color for other in self.adjacency[region_id])

    def _extend(self, index: int, k: int, coloring: Coloring) -> bool:
        if index == len(self.order):
            return True

        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise SearchBudgetExceeded(self.steps)

        region_id = self.order[index]
        for color in range(1, k + 1):
            if self._safe(region_id, color, coloring):
                coloring[region_id] = color
                if self._extend(index + 1, k, coloring):
                    return True
                del coloring[region_id]
        return False


def find_coloring(regions: Sequence, k: int,
                  max_steps: Optional[int] = None) -> Optional[Coloring]:
    """
    A proper coloring with colors 1..k, or None if none exists.

    Raises:
        SearchBudgetExceeded: When ``max_steps`` is given and exhausted
    """
    if k < 1:
        return {} if not regions else None
    return _Backtracker(regions, max_steps).color(k)


def solve_chromatic(regions: Sequence,
                    max_steps: Optional[int] = None) -> Tuple[int, bool]:
    """
    Minimum number of colors for the regions' adjacency.

    Tries k = 1, 2, ... and returns the first k that admits a complete
    coloring; k = len(regions) always succeeds. With ``max_steps`` set, a
    search that runs over budget falls back to ``greedy_upper_bound``.

    Returns:
        (colors, certified) where ``certified`` is False when the count is
        the greedy bound rather than a proven minimum
    """
    if not regions:
        return 0, True
    if len(regions) == 1:
        return 1, True

    search = _Backtracker(regions, max_steps)
    try:
        for k in range(1, len(regions) + 1):
            if search.color(k) is not None:
                logger.debug("Chromatic number found", k=k, steps=search.steps)
                return k, True
    except SearchBudgetExceeded:
        bound = greedy_upper_bound(regions)
        logger.warning("Backtracking budget exhausted, using greedy bound",
                       regions=len(regions), max_steps=max_steps, greedy=bound)
        return bound, False

    return len(regions), True


def chromatic_number(regions: Sequence, max_steps: Optional[int] = None) -> int:
    """Exact minimum color count, or the greedy bound once over budget."""
    return solve_chromatic(regions, max_steps)[0]


def greedy_coloring(regions: Sequence) -> Coloring:
    """
    Welsh-Powell coloring: highest degree first, smallest free color.

    Ties keep natural id order.
    """
    adjacency = _adjacency(regions)
    ordered = sorted(_ordered(regions), key=lambda r: -len(adjacency[r.id]))

    coloring: Coloring = {}
    for region in ordered:
        used = {coloring[a] for a in adjacency[region.id] if a in coloring}
        color = 1
        while color in used:
            color += 1
        coloring[region.id] = color
    return coloring


def greedy_upper_bound(regions: Sequence) -> int:
    """Number of colors used by ``greedy_coloring``; not guaranteed minimal."""
    coloring = greedy_coloring(regions)
    return max(coloring.values(), default=0)


def is_proper_coloring(coloring: Dict[str, Hashable], regions: Sequence) -> bool:
    """Every region colored and no adjacent pair sharing a color."""
    for region in regions:
        color = coloring.get(region.id)
        if color is None:
            return False
        for other in region.adjacent_regions:
            if coloring.get(other) == color:
                return False
    return True


def has_conflict(region_id: str, proposed_color: Optional[Hashable],
                 regions: Sequence) -> bool:
    """
    Whether a region adjacent to ``region_id`` already holds ``proposed_color``.

    Only direct neighbours count. Clearing a color (None) never conflicts.

    Raises:
        KeyError: If ``region_id`` is not among ``regions``
    """
    by_id = {r.id: r for r in regions}
    region = by_id[region_id]
    if proposed_color is None:
        return False
    for adjacent_id in region.adjacent_regions:
        adjacent = by_id.get(adjacent_id)
        if adjacent is not None and adjacent.color == proposed_color:
            logger.debug("Color conflict",
                         region=region_id, neighbor=adjacent_id, color=proposed_color)
            return True
    return False
