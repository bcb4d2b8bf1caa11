"""Random connected graph synthesis with a planar edge-count guard."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set

import structlog

from .alea_prng import AleaPRNG

logger = structlog.get_logger()

NODE_ID_PREFIX = "region-"


def node_id(index: int) -> str:
    """Id of the 1-based node ``index``."""
    return f"{NODE_ID_PREFIX}{index}"


@dataclass
class Node:
    """Abstract puzzle unit with its neighbor ids."""
    id: str
    neighbors: Set[str] = field(default_factory=set)

    @property
    def degree(self) -> int:
        return len(self.neighbors)


class Graph:
    """
    Undirected simple graph keyed by node id.

    Edges are always stored on both endpoints. Node iteration follows
    insertion order, which the partitioner relies on for alignment.
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: str) -> bool:
        return node in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __getitem__(self, node: str) -> Node:
        return self._nodes[node]

    def add_node(self, node: str) -> Node:
        if node not in self._nodes:
            self._nodes[node] = Node(node)
        return self._nodes[node]

    def add_edge(self, a: str, b: str) -> None:
        """Add the undirected edge a-b, creating missing endpoints."""
        if a == b:
            raise ValueError(f"Self-edge on {a} is not allowed")
        self.add_node(a).neighbors.add(b)
        self.add_node(b).neighbors.add(a)

    def are_adjacent(self, a: str, b: str) -> bool:
        node = self._nodes.get(a)
        return node is not None and b in node.neighbors

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def node_ids(self) -> List[str]:
        return list(self._nodes)

    def degree(self, node: str) -> int:
        return self._nodes[node].degree

    @property
    def edge_count(self) -> int:
        return sum(n.degree for n in self._nodes.values()) // 2

    def edges(self) -> List[tuple]:
        """Each undirected edge once, in node insertion order."""
        order = {n: i for i, n in enumerate(self._nodes)}
        result = []
        for node in self._nodes.values():
            for other in sorted(node.neighbors, key=order.__getitem__):
                if order[node.id] < order[other]:
                    result.append((node.id, other))
        return result

    def is_connected(self) -> bool:
        if not self._nodes:
            return True
        start = next(iter(self._nodes))
        seen = {start}
        stack = [start]
        while stack:
            for neighbor in self._nodes[stack.pop()].neighbors:
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        return len(seen) == len(self._nodes)


def default_connectivity(node_count: int) -> int:
    """Extra-edge density used by puzzle generation."""
    return max(2, int(node_count * 0.4))


def max_extra_edges(node_count: int, target_connectivity: float) -> int:
    """
    Number of extra-edge attempts after the spanning tree.

    A simple planar graph has at most 3n - 6 edges; the spanning tree
    already used n - 1 of them. This is a density guard, not a planarity
    proof.
    """
    planar_budget = 3 * node_count - 6 - (node_count - 1)
    return max(0, int(min(target_connectivity * node_count / 2, planar_budget)))


def synthesize(node_count: int, target_connectivity: float, prng: AleaPRNG) -> Graph:
    """
    Build a random connected graph over ``node_count`` nodes.

    Args:
        node_count: Number of nodes, named region-1 .. region-N
        target_connectivity: Desired average extra edges per node beyond
            the spanning tree
        prng: Random source

    Returns:
        Connected Graph with no self or duplicate edges
    """
    if node_count < 0:
        raise ValueError(f"node_count must be >= 0, got {node_count}")
    if target_connectivity < 0:
        raise ValueError(f"target_connectivity must be >= 0, got {target_connectivity}")

    graph = Graph()
    for i in range(1, node_count + 1):
        graph.add_node(node_id(i))

    # Random spanning tree: each node hooks onto an earlier one
    ids = graph.node_ids()
    for i in range(1, node_count):
        graph.add_edge(ids[i], prng.choice(ids[:i]))

    attempts = max_extra_edges(node_count, target_connectivity)
    added = 0
    for _ in range(attempts):
        a = prng.randint(1, node_count)
        b = prng.randint(1, node_count)
        if a != b and not graph.are_adjacent(node_id(a), node_id(b)):
            graph.add_edge(node_id(a), node_id(b))
            added += 1

    logger.info("Graph synthesized",
                nodes=node_count,
                tree_edges=max(0, node_count - 1),
                extra_edges=added,
                attempts=attempts)
    return graph
