"""
Connectivity graph between skill nodes.

Two interchangeable algorithms:
1. Convex hull (ConnectionMode.AUTO): brute-force exact hull over all index
   triples. O(N^3) plane tests with an O(N) side check each; N is tens.
2. Nearest neighbours (ConnectionMode.FIXED): each node links to its k
   closest nodes, adjacency is symmetrised, and faces are inferred from
   closed triangles in the adjacency.

Both return edges and faces keyed by node id. Node indices are only used
inside a single pass.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple
import logging

import numpy as np
from scipy.spatial.distance import cdist

from common.config import (
    ConnectionMode,
    ConnectionStyle,
    CURVE_SCALE,
    HULL_EPSILON,
    DEGENERATE_NORMAL_TOLERANCE,
)
from .nodes import SkillNode, node_positions

logger = logging.getLogger(__name__)


@dataclass
class Edge:
    """Undirected edge; a < b by string order."""
    a: str
    b: str
    start: np.ndarray  # Position of a
    end: np.ndarray  # Position of b
    control_point: np.ndarray
    color: Tuple[float, float, float]

    @property
    def key(self) -> Tuple[str, str]:
        return (self.a, self.b)


@dataclass
class Face:
    """
    Triangular patch between three nodes.

    node_ids are sorted; corners, colors follow the same order and
    control_points[i] belongs to the side (corner i, corner (i+1) % 3).
    """
    node_ids: Tuple[str, str, str]
    corners: Tuple[np.ndarray, np.ndarray, np.ndarray]
    control_points: Tuple[np.ndarray, np.ndarray, np.ndarray]
    colors: Tuple[Tuple[float, float, float], ...]

    @property
    def edge_keys(self) -> List[Tuple[str, str]]:
        a, b, c = self.node_ids
        return [(a, b), (b, c), (a, c)]


@dataclass
class GraphParams:
    """Parameters shared by both graph algorithms."""
    connection_style: ConnectionStyle = ConnectionStyle.CURVE_IN
    neighbors: int = 3


@dataclass
class GraphResult:
    edges: List[Edge] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)

    @property
    def edge_keys(self) -> Set[Tuple[str, str]]:
        return {e.key for e in self.edges}

    @property
    def face_keys(self) -> Set[Tuple[str, str, str]]:
        return {f.node_ids for f in self.faces}


def edge_control_point(
    p1: np.ndarray,
    p2: np.ndarray,
    style: ConnectionStyle
) -> np.ndarray:
    """
    Quadratic Bezier control point for the edge p1-p2.

    The midpoint is scaled radially: 0.7 for CURVE_IN, 1.3 for CURVE_OUT,
    unchanged otherwise.
    """
    mid = (np.asarray(p1, dtype=np.float64) + np.asarray(p2, dtype=np.float64)) * 0.5
    scale = CURVE_SCALE.get(style)
    if scale is not None:
        mid = mid * scale
    return mid


def _make_edge(
    first: SkillNode,
    second: SkillNode,
    style: ConnectionStyle
) -> Edge:
    """Canonical edge; colour comes from the node that emitted it (first)."""
    lo, hi = (first, second) if first.id < second.id else (second, first)
    return Edge(
        a=lo.id,
        b=hi.id,
        start=lo.position,
        end=hi.position,
        control_point=edge_control_point(lo.position, hi.position, style),
        color=first.color
    )


def _make_face(
    trio: Sequence[SkillNode],
    style: ConnectionStyle
) -> Face:
    """Face with its corners sorted by node id."""
    n1, n2, n3 = sorted(trio, key=lambda n: n.id)
    p1, p2, p3 = n1.position, n2.position, n3.position
    return Face(
        node_ids=(n1.id, n2.id, n3.id),
        corners=(p1, p2, p3),
        control_points=(
            edge_control_point(p1, p2, style),
            edge_control_point(p2, p3, style),
            edge_control_point(p3, p1, style),
        ),
        colors=(n1.color, n2.color, n3.color)
    )


def is_hull_face(
    points: np.ndarray,
    i: int,
    j: int,
    k: int,
    epsilon: float = HULL_EPSILON
) -> bool:
    """
    Check whether triple (i, j, k) spans a supporting plane of points.

    Signed distances within epsilon are ignored; all others must share one
    sign. Degenerate triples (zero-length normal) are never faces.
    """
    p1 = points[i]
    normal = np.cross(points[j] - p1, points[k] - p1)
    length = np.linalg.norm(normal)
    if length < DEGENERATE_NORMAL_TOLERANCE:
        return False
    normal = normal / length

    mask = np.ones(len(points), dtype=bool)
    mask[[i, j, k]] = False
    distances = (points[mask] - p1) @ normal
    significant = distances[np.abs(distances) > epsilon]

    if len(significant) == 0:
        return True
    return bool(np.all(significant > 0) or np.all(significant < 0))


def compute_convex_hull(
    nodes: Sequence[SkillNode],
    style: ConnectionStyle = ConnectionStyle.CURVE_IN,
    epsilon: float = HULL_EPSILON
) -> GraphResult:
    """
    Brute-force convex hull over node tip positions.

    Args:
        nodes: Nodes in a stable order for this pass
        style: Connection style for control points
        epsilon: Plane-side tolerance

    Returns:
        GraphResult; empty for fewer than 4 nodes
    """
    n = len(nodes)
    result = GraphResult()
    if n < 4:
        return result

    points = node_positions(nodes)
    seen_edges: Set[Tuple[str, str]] = set()

    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                if not is_hull_face(points, i, j, k, epsilon):
                    continue

                result.faces.append(_make_face((nodes[i], nodes[j], nodes[k]), style))

                for a, b in ((i, j), (j, k), (i, k)):
                    edge = _make_edge(nodes[a], nodes[b], style)
                    if edge.key not in seen_edges:
                        seen_edges.add(edge.key)
                        result.edges.append(edge)

    logger.debug(f"Convex hull: {n} nodes -> {len(result.faces)} faces, {len(result.edges)} edges")
    return result


def clamp_neighbors(neighbors: int, n_nodes: int) -> int:
    """Clamp k to [1, N-1]."""
    return max(1, min(n_nodes - 1, int(neighbors)))


def compute_nearest_neighbor_graph(
    nodes: Sequence[SkillNode],
    neighbors: int = 3,
    style: ConnectionStyle = ConnectionStyle.CURVE_IN
) -> GraphResult:
    """
    k-nearest-neighbour graph with inferred faces.

    Each node picks its k nearest others (ties broken by input order). An
    edge exists if either endpoint picked the other. A face is any triple
    that is pairwise adjacent. A connected but unfilled result is valid.

    Args:
        nodes: Nodes in a stable order for this pass
        neighbors: Requested k; clamped to [1, N-1]
        style: Connection style for control points
    """
    n = len(nodes)
    result = GraphResult()
    if n < 2:
        return result

    k = clamp_neighbors(neighbors, n)
    points = node_positions(nodes)
    distances = cdist(points, points)
    index_of = {node.id: idx for idx, node in enumerate(nodes)}

    adjacency: Dict[str, Set[str]] = {node.id: set() for node in nodes}
    seen_edges: Set[Tuple[str, str]] = set()

    for i, node_a in enumerate(nodes):
        order = np.argsort(distances[i], kind="stable")
        picked = [j for j in order if j != i][:k]

        for j in picked:
            node_b = nodes[j]
            adjacency[node_a.id].add(node_b.id)
            adjacency[node_b.id].add(node_a.id)

            edge = _make_edge(node_a, node_b, style)
            if edge.key not in seen_edges:
                seen_edges.add(edge.key)
                result.edges.append(edge)

    seen_faces: Set[Tuple[str, str, str]] = set()
    for edge in result.edges:
        common = adjacency[edge.a] & adjacency[edge.b]
        for c_id in sorted(common, key=index_of.__getitem__):
            key = tuple(sorted((edge.a, edge.b, c_id)))
            if key in seen_faces:
                continue
            seen_faces.add(key)
            trio = (nodes[index_of[edge.a]], nodes[index_of[edge.b]], nodes[index_of[c_id]])
            result.faces.append(_make_face(trio, style))

    logger.debug(f"Nearest neighbours (k={k}): {n} nodes -> {len(result.edges)} edges, "
                 f"{len(result.faces)} faces")
    return result


def build_graph(
    nodes: Sequence[SkillNode],
    mode: ConnectionMode,
    params: GraphParams
) -> GraphResult:
    """
    Build edges and faces for the given connection mode.

    Style NONE disables connectivity. Hull mode below 4 nodes returns an
    empty graph; falling back to FIXED is left to the caller.
    """
    if params.connection_style == ConnectionStyle.NONE:
        return GraphResult()
    if mode == ConnectionMode.AUTO:
        return compute_convex_hull(nodes, params.connection_style)
    return compute_nearest_neighbor_graph(nodes, params.neighbors, params.connection_style)
