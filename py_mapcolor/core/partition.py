"""
Region partitioning by recursive organic subdivision.

The board is first outlined by a slightly wobbly perimeter, then the
largest region is repeatedly cut in two along a noisy polyline until there
is one region per graph node:

1. ``organic_perimeter()`` - star-shaped outline of the working rectangle
2. ``division_line()`` - sinusoidally perturbed cut across the longer axis
3. ``split_region()`` - stitch the cut into the outline (Shapely split),
   validate, retry with less jitter, then degrade to a straight cut
4. ``align_to_graph()`` - order the polygons so that synthesized edges
   land on polygons that actually touch
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog
from shapely.geometry import LineString, Polygon
from shapely.geometry.polygon import orient
from shapely.ops import split, unary_union

from .alea_prng import AleaPRNG
from .geometry import (
    Point,
    Bounds,
    from_polygon,
    get_bounds,
    is_simple_polygon,
    polygon_area,
    polygon_centroid,
    shares_border,
    to_polygon,
)
from .graph_synthesis import Graph

logger = structlog.get_logger()

Outline = Tuple[List[Point], Point]  # (vertices, center)


class PartitionError(RuntimeError):
    """No region of the current subdivision could be split."""


@dataclass
class PartitionOptions:
    """Geometry knobs for the partitioner."""

    margin: float = 60.0  # Board inset, capped at 10% of the short side
    perimeter_steps: int = 48  # Angular samples of the outline
    perimeter_jitter: float = 0.012  # Outline wobble, fraction of short side
    perimeter_waves: int = 3  # Sinusoid periods around the outline

    cut_samples: int = 8  # Segments of a dividing polyline
    cut_position: Tuple[float, float] = (0.3, 0.7)  # Fraction of the span
    cut_variation: float = 0.1  # Max sideways wobble, fraction of the span
    connector_jitter: float = 0.08  # Midpoint displacement per segment length
    max_connector_jitter: float = 6.0  # Absolute cap on that displacement

    split_attempts: int = 8  # Organic attempts before the straight cut
    min_area_fraction: float = 0.15  # Smallest accepted child vs parent

    alignment_tolerance: float = 15.0
    alignment_reach_factor: float = 2.2
    alignment_budget: int = 5000  # Search nodes for graph alignment


def _complexity_scale(complexity: float) -> float:
    """Jitter multiplier: 0.5 at complexity 0, 1.5 at complexity 1."""
    return 0.5 + complexity


def working_bounds(board_width: float, board_height: float,
                   options: PartitionOptions) -> Bounds:
    margin = min(options.margin, 0.1 * min(board_width, board_height))
    return Bounds(margin, margin, board_width - margin, board_height - margin)


def organic_perimeter(bounds: Bounds, complexity: float, prng: AleaPRNG,
                      options: PartitionOptions) -> List[Point]:
    """
    Closed outline approximating ``bounds``.

    Points are sampled at fixed angular steps from the centre (the four
    corner directions are always included) and displaced radially by a
    sinusoid plus uniform noise. Radii stay positive and angles strictly
    increase, so the outline is star-shaped and therefore simple.
    """
    cx = (bounds.min_x + bounds.max_x) / 2
    cy = (bounds.min_y + bounds.max_y) / 2
    hw = bounds.width / 2
    hh = bounds.height / 2

    corner = math.atan2(hh, hw)
    angles = []
    for theta in sorted([2 * math.pi * k / options.perimeter_steps
                         for k in range(options.perimeter_steps)]
                        + [corner, math.pi - corner, math.pi + corner, 2 * math.pi - corner]):
        if not angles or theta - angles[-1] > 1e-9:
            angles.append(theta)

    amplitude = options.perimeter_jitter * min(bounds.width, bounds.height) \
        * _complexity_scale(complexity)
    phase = prng.uniform(0, 2 * math.pi)

    vertices = []
    for theta in angles:
        dx, dy = math.cos(theta), math.sin(theta)
        reach_x = hw / abs(dx) if abs(dx) > 1e-12 else math.inf
        reach_y = hh / abs(dy) if abs(dy) > 1e-12 else math.inf
        radius = min(reach_x, reach_y)
        wobble = amplitude * (0.5 * math.sin(options.perimeter_waves * theta + phase)
                              + (prng.random() - 0.5))
        radius = max(radius + wobble, radius * 0.5)
        vertices.append(Point(cx + radius * dx, cy + radius * dy))

    return vertices


def division_line(bounds: Bounds, vertical: bool, divide_at: float,
                  prng: AleaPRNG, jitter_scale: float,
                  options: PartitionOptions) -> List[Point]:
    """
    Noisy polyline crossing ``bounds`` at ``divide_at`` of its span.

    A vertical line runs top to bottom (splitting left from right); a
    horizontal one runs left to right. The ends are pushed slightly past
    the bounds so the cut crosses the whole region.
    """
    samples = options.cut_samples
    pad_x = 1.0 + 0.01 * bounds.width
    pad_y = 1.0 + 0.01 * bounds.height
    points = []

    if vertical:
        base = bounds.min_x + bounds.width * divide_at
        max_variation = bounds.width * options.cut_variation * jitter_scale
        for i in range(samples + 1):
            t = i / samples
            y = bounds.min_y + bounds.height * t
            variation = math.sin(t * math.pi * 2) * max_variation * (prng.random() - 0.5)
            points.append(Point(base + variation, y))
        points[0] = Point(points[0].x, bounds.min_y - pad_y)
        points[-1] = Point(points[-1].x, bounds.max_y + pad_y)
    else:
        base = bounds.min_y + bounds.height * divide_at
        max_variation = bounds.height * options.cut_variation * jitter_scale
        for i in range(samples + 1):
            t = i / samples
            x = bounds.min_x + bounds.width * t
            variation = math.sin(t * math.pi * 2) * max_variation * (prng.random() - 0.5)
            points.append(Point(x, base + variation))
        points[0] = Point(bounds.min_x - pad_x, points[0].y)
        points[-1] = Point(bounds.max_x + pad_x, points[-1].y)

    return points


def jitter_segments(line: Sequence[Point], prng: AleaPRNG, jitter_scale: float,
                    options: PartitionOptions) -> List[Point]:
    """
    Insert a perpendicularly displaced midpoint into every segment.

    Displacement is proportional to the segment length and capped at
    ``options.max_connector_jitter``. A result that crosses itself is
    discarded in favour of the input line.
    """
    if jitter_scale <= 0:
        return list(line)

    result = [line[0]]
    for p, q in zip(line, line[1:]):
        dx, dy = q.x - p.x, q.y - p.y
        length = math.hypot(dx, dy)
        if length > 0:
            limit = min(length * options.connector_jitter * jitter_scale,
                        options.max_connector_jitter)
            offset = (prng.random() - 0.5) * 2 * limit
            nx, ny = -dy / length, dx / length
            result.append(Point((p.x + q.x) / 2 + nx * offset,
                                (p.y + q.y) / 2 + ny * offset))
        result.append(q)

    if not LineString(result).is_simple:
        return list(line)
    return result


def _pieces(polygon: Polygon, cut: Sequence[Point]) -> List[Polygon]:
    collection = split(polygon, LineString(cut))
    return [orient(g, 1.0) for g in collection.geoms if isinstance(g, Polygon)]


def _valid_piece(piece: Polygon, parent_area: float, min_fraction: float) -> bool:
    if not piece.is_valid or piece.interiors:
        return False
    if piece.area < parent_area * min_fraction:
        return False
    vertices = from_polygon(piece)
    if not is_simple_polygon(vertices):
        return False
    return piece.contains(piece.centroid)


def _merge_pieces(pieces: List[Polygon]) -> Optional[List[Polygon]]:
    """
    Fold surplus pieces of a cut into touching neighbours until two remain.

    A straight cut through a non-convex region can leave several pieces;
    neighbouring pieces share a cut segment, so their union is one polygon.
    """
    pieces = sorted(pieces, key=lambda p: p.area, reverse=True)
    while len(pieces) > 2:
        smallest = pieces.pop()
        for i, other in enumerate(pieces):
            if smallest.intersection(other).length <= 0:
                continue
            merged = unary_union([smallest, other])
            if isinstance(merged, Polygon) and not merged.interiors:
                pieces[i] = orient(merged, 1.0)
                break
        else:
            return None
        pieces.sort(key=lambda p: p.area, reverse=True)
    return pieces


def _outline(piece: Polygon) -> Outline:
    vertices = from_polygon(piece)
    center = polygon_centroid(vertices)
    if not piece.contains(piece.centroid):
        rep = piece.representative_point()
        center = Point(float(rep.x), float(rep.y))
    return vertices, center


def split_region(vertices: Sequence[Point], complexity: float, prng: AleaPRNG,
                 options: PartitionOptions) -> Optional[Tuple[Outline, Outline]]:
    """
    Split one region in two.

    Organic attempts use linearly decaying jitter; when every attempt fails
    validation a straight cut through the middle is used and any surplus
    pieces are merged back.

    Returns:
        Two (vertices, center) outlines, or None if even the straight cut
        failed
    """
    polygon = to_polygon(vertices)
    parent_area = polygon.area
    bounds = get_bounds(vertices)
    vertical = bounds.width > bounds.height
    low, high = options.cut_position

    for attempt in range(options.split_attempts):
        jitter_scale = _complexity_scale(complexity) * (1 - attempt / options.split_attempts)
        divide_at = prng.uniform(low, high)
        cut = division_line(bounds, vertical, divide_at, prng, jitter_scale, options)
        cut = jitter_segments(cut, prng, jitter_scale, options)
        pieces = _pieces(polygon, cut)

        if len(pieces) == 2 and all(
                _valid_piece(p, parent_area, options.min_area_fraction) for p in pieces):
            return _outline(pieces[0]), _outline(pieces[1])

        logger.debug("Split attempt rejected",
                     attempt=attempt, pieces=len(pieces), jitter_scale=round(jitter_scale, 3))

    logger.info("Falling back to straight cut", area=round(parent_area, 1))
    cut = division_line(bounds, vertical, 0.5, prng, 0.0, options)
    pieces = _pieces(polygon, cut)
    if len(pieces) > 2:
        pieces = _merge_pieces(pieces)
    if not pieces or len(pieces) != 2:
        return None
    if not all(is_simple_polygon(from_polygon(p)) for p in pieces):
        return None
    return _outline(pieces[0]), _outline(pieces[1])


def subdivide(outline: Outline, target_count: int, complexity: float,
              prng: AleaPRNG, options: PartitionOptions) -> List[Outline]:
    """
    Split the largest region until there are ``target_count`` regions.

    Each split replaces the parent in place with its two children.
    """
    regions = [outline]
    while len(regions) < target_count:
        by_area = sorted(range(len(regions)),
                         key=lambda i: polygon_area(regions[i][0]), reverse=True)
        for index in by_area:
            children = split_region(regions[index][0], complexity, prng, options)
            if children is not None:
                regions[index:index + 1] = list(children)
                break
            logger.warning("Region could not be split, trying next largest", index=index)
        else:
            raise PartitionError(f"No region could be split at count {len(regions)}")
    return regions[:target_count]


def _touch_matrix(outlines: Sequence[Outline], options: PartitionOptions) -> np.ndarray:
    n = len(outlines)
    touching = np.zeros((n, n), dtype=bool)
    for i in range(n):
        for j in range(i + 1, n):
            if shares_border(outlines[i][0], outlines[i][1],
                             outlines[j][0], outlines[j][1],
                             options.alignment_tolerance,
                             options.alignment_reach_factor):
                touching[i, j] = touching[j, i] = True
    return touching


def align_to_graph(graph: Graph, outlines: List[Outline],
                   options: PartitionOptions) -> List[Outline]:
    """
    Reorder outlines so graph edges fall on touching polygons where possible.

    Depth-first assignment of polygons to nodes in BFS order from the
    highest-degree node, preferring polygons that touch the polygons of
    already placed neighbours. The search keeps the best score seen, stops
    on a perfect match and gives up after ``options.alignment_budget``
    search nodes.
    """
    ids = graph.node_ids()
    n = len(ids)
    if n <= 1:
        return list(outlines)

    index = {node: i for i, node in enumerate(ids)}
    neighbors = [[index[m] for m in graph[node].neighbors] for node in ids]
    edges = graph.edges()
    total = len(edges)
    touching = _touch_matrix(outlines, options)

    # BFS order over the synthesized graph
    start = max(range(n), key=lambda i: (len(neighbors[i]), -i))
    order, seen = [], {start}
    frontier = [start]
    while frontier:
        current = frontier.pop(0)
        order.append(current)
        for m in sorted(neighbors[current]):
            if m not in seen:
                seen.add(m)
                frontier.append(m)
    order.extend(i for i in range(n) if i not in seen)

    identity = list(range(n))
    best_score = sum(1 for a, b in edges if touching[index[a], index[b]])
    best = identity[:]
    assignment = [-1] * n
    used = [False] * n
    steps = 0

    def search(depth: int, score: int, remaining: int) -> bool:
        nonlocal best_score, best, steps
        steps += 1
        if score > best_score:
            best_score = score
            best = assignment[:]
            if best_score == total:
                return True
        if depth == n or steps >= options.alignment_budget:
            return False
        if score + remaining <= best_score:
            return False

        node = order[depth]
        placed = [m for m in neighbors[node] if assignment[m] >= 0]

        def gain(poly: int) -> int:
            return sum(1 for m in placed if touching[poly, assignment[m]])

        candidates = sorted((p for p in range(n) if not used[p]),
                            key=lambda p: (-gain(p), p))
        for poly in candidates:
            g = gain(poly)
            assignment[node] = poly
            used[poly] = True
            if search(depth + 1, score + g, remaining - len(placed)):
                return True
            used[poly] = False
            assignment[node] = -1
            if steps >= options.alignment_budget:
                break
        return False

    search(0, 0, total)
    if -1 in best:
        # Best score came from a partial assignment: fill the gaps in order
        free = [p for p in range(n) if p not in best]
        best = [p if p >= 0 else free.pop(0) for p in best]

    logger.info("Regions aligned to graph",
                preserved_edges=best_score, total_edges=total, search_steps=steps)
    return [outlines[best[i]] for i in range(n)]


def partition(graph: Graph, board_width: float, board_height: float,
              complexity: float, prng: AleaPRNG,
              options: Optional[PartitionOptions] = None) -> List[Outline]:
    """
    Divide the board into one simple polygon per graph node.

    Args:
        graph: Synthesized graph; output is aligned with ``graph.nodes()``
        board_width: Board width
        board_height: Board height
        complexity: Organic jitter level in [0, 1]
        prng: Random source
        options: Geometry options

    Returns:
        List of (vertices, center) in node order
    """
    if board_width <= 0 or board_height <= 0:
        raise ValueError(f"Board must have positive size, got {board_width}x{board_height}")
    if not 0.0 <= complexity <= 1.0:
        raise ValueError(f"complexity must be in [0, 1], got {complexity}")

    options = options or PartitionOptions()
    count = len(graph)
    if count == 0:
        return []

    bounds = working_bounds(board_width, board_height, options)
    perimeter = organic_perimeter(bounds, complexity, prng, options)
    outlines = subdivide((perimeter, polygon_centroid(perimeter)),
                         count, complexity, prng, options)

    logger.info("Board partitioned",
                regions=len(outlines), width=board_width, height=board_height,
                complexity=complexity)
    return align_to_graph(graph, outlines, options)
