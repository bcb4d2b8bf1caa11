"""
Geometric adjacency resolution.

The synthesized graph only guides the layout; once polygons exist, which
regions touch is recomputed from their geometry and that relation is the
one used for coloring and move validation.
"""

from typing import Dict, List, Sequence, Set

import numpy as np
import structlog
from scipy.spatial.distance import cdist

from .geometry import shares_border

logger = structlog.get_logger()

DEFAULT_TOLERANCE = 15.0
DEFAULT_REACH_FACTOR = 2.2


def resolve(regions: List, tolerance: float = DEFAULT_TOLERANCE,
            reach_factor: float = DEFAULT_REACH_FACTOR) -> List:
    """
    Populate ``adjacent_regions`` of every region from its geometry.

    Existing adjacency is discarded first, so resolving twice gives the same
    result. Regions left without any neighbour are linked to the region with
    the nearest center.

    Args:
        regions: Regions with ``id``, ``vertices``, ``center`` and
            ``adjacent_regions``; mutated in place
        tolerance: Distance under which borders count as shared
        reach_factor: Multiplier on summed radii for the cheap rejection

    Returns:
        The same list
    """
    for region in regions:
        region.adjacent_regions = set()

    pairs_checked = 0
    pairs_touching = 0
    for i in range(len(regions)):
        a = regions[i]
        for j in range(i + 1, len(regions)):
            b = regions[j]
            pairs_checked += 1
            if shares_border(a.vertices, a.center, b.vertices, b.center,
                             tolerance, reach_factor):
                a.adjacent_regions.add(b.id)
                b.adjacent_regions.add(a.id)
                pairs_touching += 1

    repaired = repair_isolated(regions)
    bridged = bridge_components(regions)

    logger.info("Adjacency resolved",
                regions=len(regions),
                pairs_checked=pairs_checked,
                adjacent_pairs=pairs_touching,
                repaired=repaired,
                bridged=bridged)
    return regions


def repair_isolated(regions: Sequence) -> int:
    """
    Link every region without neighbours to its nearest-center region.

    Returns:
        Number of regions repaired
    """
    if len(regions) < 2:
        return 0

    centers = np.array([[r.center[0], r.center[1]] for r in regions], dtype=float)
    distances = cdist(centers, centers)
    np.fill_diagonal(distances, np.inf)

    repaired = 0
    for i, region in enumerate(regions):
        if region.adjacent_regions:
            continue
        nearest = regions[int(np.argmin(distances[i]))]
        region.adjacent_regions.add(nearest.id)
        nearest.adjacent_regions.add(region.id)
        repaired += 1
        logger.debug("Isolated region linked", region=region.id, nearest=nearest.id)
    return repaired


def components(regions: Sequence) -> List[List[int]]:
    """Connected components as lists of region indices."""
    index = {r.id: i for i, r in enumerate(regions)}
    seen: Set[int] = set()
    result = []
    for i in range(len(regions)):
        if i in seen:
            continue
        component = []
        stack = [i]
        seen.add(i)
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbor in regions[current].adjacent_regions:
                j = index.get(neighbor)
                if j is not None and j not in seen:
                    seen.add(j)
                    stack.append(j)
        result.append(sorted(component))
    return result


def bridge_components(regions: Sequence) -> int:
    """
    Join disconnected groups of regions through their closest centers.

    A subdivision of one board is connected already; this only matters for
    hand-built region sets.

    Returns:
        Number of edges added
    """
    groups = components(regions)
    if len(groups) < 2:
        return 0

    centers = np.array([[r.center[0], r.center[1]] for r in regions], dtype=float)
    added = 0
    main = groups[0]
    for group in groups[1:]:
        distances = cdist(centers[main], centers[group])
        i, j = np.unravel_index(int(np.argmin(distances)), distances.shape)
        a, b = regions[main[i]], regions[group[j]]
        a.adjacent_regions.add(b.id)
        b.adjacent_regions.add(a.id)
        main = main + group
        added += 1
    return added


def adjacency_map(regions: Sequence) -> Dict[str, Set[str]]:
    """Region id to a copy of its adjacent ids."""
    return {r.id: set(r.adjacent_regions) for r in regions}


def is_symmetric(regions: Sequence) -> bool:
    adjacency = adjacency_map(regions)
    return all(a in adjacency.get(b, ()) for a, others in adjacency.items() for b in others)


def is_connected(regions: Sequence) -> bool:
    """Whether every region is reachable from the first through adjacency."""
    if not regions:
        return True
    adjacency = adjacency_map(regions)
    start = regions[0].id
    seen = {start}
    stack = [start]
    while stack:
        for neighbor in adjacency[stack.pop()]:
            if neighbor not in seen and neighbor in adjacency:
                seen.add(neighbor)
                stack.append(neighbor)
    return len(seen) == len(adjacency)
