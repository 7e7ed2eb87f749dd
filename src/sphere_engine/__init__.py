"""
Skill sphere geometry engine.

Capabilities are laid out on a sphere, connected by a convex hull or a
k-nearest-neighbour graph, and the resulting faces are tessellated into
curved Bezier patches.

Pipeline:
    distribute_points_on_sphere -> spherical_to_cartesian -> build_graph -> tessellate
"""

from .layout import distribute_points_on_sphere, spherical_to_cartesian
from .nodes import Capability, SkillNode, assign_layout, build_nodes, update_scores
from .graph import (
    Edge, Face, GraphParams, GraphResult,
    build_graph, compute_convex_hull, compute_nearest_neighbor_graph, edge_control_point,
)
from .tessellate import SurfaceBuffer, tessellate, tessellate_face
from .labels import compute_label_font_size, label_anchor
from .engine import SphereEngine, SphereGeometry, GeometryCache, geometry_fingerprint, compute_geometry

__version__ = "1.0.0"

__all__ = [
    'distribute_points_on_sphere', 'spherical_to_cartesian',
    'Capability', 'SkillNode', 'assign_layout', 'build_nodes', 'update_scores',
    'Edge', 'Face', 'GraphParams', 'GraphResult',
    'build_graph', 'compute_convex_hull', 'compute_nearest_neighbor_graph', 'edge_control_point',
    'SurfaceBuffer', 'tessellate', 'tessellate_face',
    'compute_label_font_size', 'label_anchor',
    'SphereEngine', 'SphereGeometry', 'GeometryCache', 'geometry_fingerprint', 'compute_geometry',
]
