"""
Planar geometry helpers shared by the partitioner and the adjacency resolver.

Polygons are plain vertex sequences (no closing point repeated). Heavy
pairwise distance work is vectorised with NumPy; validity checks lean on
Shapely.
"""

from typing import List, NamedTuple, Sequence

import numpy as np
from scipy.spatial.distance import cdist
from shapely.geometry import LinearRing, Polygon
from shapely.geometry import Point as ShapelyPoint


class Point(NamedTuple):
    """2D coordinate."""
    x: float
    y: float


class Bounds(NamedTuple):
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def as_array(vertices: Sequence) -> np.ndarray:
    """Vertices as a float (n, 2) array."""
    return np.asarray(vertices, dtype=float).reshape(-1, 2)


def signed_area(vertices: Sequence) -> float:
    """Shoelace area; positive for counter-clockwise winding."""
    pts = as_array(vertices)
    if len(pts) < 3:
        return 0.0
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_area(vertices: Sequence) -> float:
    return abs(signed_area(vertices))


def polygon_centroid(vertices: Sequence) -> Point:
    """Area centroid of a polygon.

    Falls back to the vertex mean for degenerate (zero-area) input.
    """
    pts = as_array(vertices)
    if len(pts) < 3:
        mean = pts.mean(axis=0)
        return Point(float(mean[0]), float(mean[1]))

    x, y = pts[:, 0], pts[:, 1]
    xn, yn = np.roll(x, -1), np.roll(y, -1)
    cross = x * yn - xn * y
    area = cross.sum() * 0.5

    if abs(area) < 1e-10:
        mean = pts.mean(axis=0)
        return Point(float(mean[0]), float(mean[1]))

    cx = ((x + xn) * cross).sum() / (6.0 * area)
    cy = ((y + yn) * cross).sum() / (6.0 * area)
    return Point(float(cx), float(cy))


def get_bounds(vertices: Sequence) -> Bounds:
    pts = as_array(vertices)
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    return Bounds(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))


def max_radius(vertices: Sequence, center: Sequence) -> float:
    """Largest vertex-to-center distance."""
    pts = as_array(vertices)
    return float(np.max(np.hypot(pts[:, 0] - center[0], pts[:, 1] - center[1])))


def to_polygon(vertices: Sequence) -> Polygon:
    return Polygon(as_array(vertices))


def from_polygon(polygon: Polygon) -> List[Point]:
    """Exterior ring of a shapely polygon as a vertex list.

    The closing point and consecutive duplicates are dropped.
    """
    coords = list(polygon.exterior.coords)[:-1]
    result: List[Point] = []
    for x, y in coords:
        p = Point(float(x), float(y))
        if not result or p != result[-1]:
            result.append(p)
    if len(result) > 1 and result[0] == result[-1]:
        result.pop()
    return result


def is_simple_polygon(vertices: Sequence) -> bool:
    """
    True when the vertices describe a closed, non-self-intersecting polygon
    with at least three corners and non-zero area.
    """
    pts = as_array(vertices)
    if len(pts) < 3 or not np.all(np.isfinite(pts)):
        return False
    if polygon_area(pts) <= 1e-9:
        return False
    ring = LinearRing(pts)
    return bool(ring.is_simple and Polygon(ring).is_valid)


def contains_point(vertices: Sequence, point: Sequence) -> bool:
    return bool(to_polygon(vertices).contains(ShapelyPoint(point[0], point[1])))


def point_segment_distances(points: np.ndarray, starts: np.ndarray,
                            ends: np.ndarray) -> np.ndarray:
    """
    Distance from every point to every segment.

    Args:
        points: (k, 2) array
        starts: (m, 2) segment start points
        ends: (m, 2) segment end points

    Returns:
        (k, m) array of distances, projecting onto the segment and clamping
        to its endpoints
    """
    d = ends - starts                                   # (m, 2)
    len_sq = np.einsum("ij,ij->i", d, d)                # (m,)
    rel = points[:, None, :] - starts[None, :, :]       # (k, m, 2)
    dot = np.einsum("kmj,mj->km", rel, d)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(len_sq > 0, dot / len_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)
    proj = starts[None, :, :] + t[..., None] * d[None, :, :]
    return np.linalg.norm(points[:, None, :] - proj, axis=2)


def polygon_edges(vertices: Sequence):
    """Start and end arrays for the closed polygon's edges."""
    pts = as_array(vertices)
    return pts, np.roll(pts, -1, axis=0)


def edge_distances(vertices_a: Sequence, vertices_b: Sequence) -> np.ndarray:
    """
    Minimum distance between each edge of A and each edge of B.

    Uses the four endpoint-to-segment projections per edge pair; crossing
    edges are not special-cased since polygons of a subdivision never cross.
    """
    a0, a1 = polygon_edges(vertices_a)
    b0, b1 = polygon_edges(vertices_b)
    d_a0 = point_segment_distances(a0, b0, b1)
    d_a1 = point_segment_distances(a1, b0, b1)
    d_b0 = point_segment_distances(b0, a0, a1).T
    d_b1 = point_segment_distances(b1, a0, a1).T
    return np.minimum(np.minimum(d_a0, d_a1), np.minimum(d_b0, d_b1))


def shares_border(vertices_a: Sequence, center_a: Sequence,
                  vertices_b: Sequence, center_b: Sequence,
                  tolerance: float = 15.0, reach_factor: float = 2.2) -> bool:
    """
    Whether two polygons touch within ``tolerance``.

    Pairs whose centers are further apart than ``reach_factor`` times the
    sum of their radii are rejected without looking at edges.
    """
    reach = reach_factor * (max_radius(vertices_a, center_a) +
                            max_radius(vertices_b, center_b))
    if np.hypot(center_a[0] - center_b[0], center_a[1] - center_b[1]) > reach:
        return False

    pts_a = as_array(vertices_a)
    pts_b = as_array(vertices_b)
    if np.min(cdist(pts_a, pts_b)) < tolerance:
        return True

    return bool(np.min(edge_distances(pts_a, pts_b)) < tolerance)
