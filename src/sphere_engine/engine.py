"""
Skill sphere geometry engine.

Pipeline:
1. Place capabilities at tip / surface positions
2. Build the connectivity graph (hull or k-NN)
3. Tessellate faces into a surface buffer

Results are memoised by a content fingerprint over everything that affects
geometry. The cache holds one entry and is replaced wholesale on any change.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

from common.colors import hex_to_rgb
from common.config import SphereSettings, FillColorMode
from .nodes import Capability, SkillNode, build_nodes
from .graph import Edge, Face, GraphParams, build_graph
from .tessellate import SurfaceBuffer, tessellate, is_opaque

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SphereGeometry:
    """
    Everything a renderer needs for one frame of the sphere.

    Cached results are handed out as-is, so geometry is read-only: the
    collections are tuples and the buffers must not be written to.
    """
    nodes: Tuple[SkillNode, ...]
    edges: Tuple[Edge, ...]
    faces: Tuple[Face, ...]
    surface: SurfaceBuffer
    fingerprint: str

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)


def geometry_fingerprint(
    capabilities: Sequence[Capability],
    settings: SphereSettings
) -> str:
    """
    Composite key over every input that changes geometry.

    Covers the radii, per-capability id/score/colour/angles, and the
    connection and fill settings.
    """
    node_key = "|".join(
        f"{c.id}:{c.score!r}:{c.color}:{c.phi!r}:{c.theta!r}" for c in capabilities
    )
    if settings.fill_color_mode == FillColorMode.GRADIENT:
        color_key = "grad"
    else:
        color_key = settings.reference_color
    return (
        f"R{settings.core_radius!r}-S{settings.score_scale!r}-B{settings.bar_base_length!r}"
        f"-N{len(capabilities)}[{node_key}]"
        f"-{settings.connection_mode.value}-{settings.connection_neighbors}"
        f"-{settings.connection_style.value}"
        f"-{int(settings.fill_mesh)}-{settings.fill_color_mode.value}-{color_key}"
        f"-{settings.fill_opacity!r}"
    )


@dataclass
class GeometryCache:
    """Single-entry cache keyed by fingerprint."""
    key: Optional[str] = None
    value: Optional[SphereGeometry] = None
    hits: int = 0
    misses: int = 0

    def get(self, key: str) -> Optional[SphereGeometry]:
        if self.key == key and self.value is not None:
            self.hits += 1
            return self.value
        self.misses += 1
        return None

    def put(self, key: str, value: SphereGeometry) -> None:
        self.key = key
        self.value = value

    def clear(self) -> None:
        self.key = None
        self.value = None


def compute_geometry(
    capabilities: Sequence[Capability],
    settings: SphereSettings
) -> SphereGeometry:
    """
    Uncached pipeline run.

    Args:
        capabilities: Capabilities with assigned angles
        settings: Style configuration

    Returns:
        SphereGeometry with nodes, edges, faces and surface buffer
    """
    nodes = build_nodes(capabilities, settings)

    graph = build_graph(
        nodes,
        settings.connection_mode,
        GraphParams(
            connection_style=settings.connection_style,
            neighbors=settings.connection_neighbors
        )
    )

    if settings.fill_mesh:
        # Gradient fill never reads the reference colour
        reference_color = None
        if settings.fill_color_mode != FillColorMode.GRADIENT:
            reference_color = hex_to_rgb(settings.reference_color)

        surface = tessellate(
            graph.faces,
            settings.connection_style,
            settings.fill_color_mode,
            reference_color=reference_color,
            opacity=settings.fill_opacity
        )
    else:
        surface = SurfaceBuffer.empty(is_opaque=is_opaque(settings.fill_opacity))

    geometry = SphereGeometry(
        nodes=tuple(nodes),
        edges=tuple(graph.edges),
        faces=tuple(graph.faces),
        surface=surface,
        fingerprint=geometry_fingerprint(capabilities, settings)
    )

    logger.info(f"Sphere geometry: {len(nodes)} nodes, {len(graph.edges)} edges, "
                f"{len(graph.faces)} faces, {surface.n_vertices} surface vertices "
                f"({settings.connection_mode.value}/{settings.connection_style.value})")
    return geometry


class SphereEngine:
    """
    Memoised front end to the geometry pipeline.

    Each engine owns its cache; separate engines share nothing.
    """

    def __init__(self, settings: Optional[SphereSettings] = None):
        """
        Initialize engine.

        Args:
            settings: Default settings for build() calls (a fresh
                SphereSettings when omitted)
        """
        self.settings = settings or SphereSettings()
        self.cache = GeometryCache()

    def build(
        self,
        capabilities: Sequence[Capability],
        settings: Optional[SphereSettings] = None
    ) -> SphereGeometry:
        """
        Build geometry, reusing the cached result when nothing changed.
        """
        settings = settings or self.settings
        key = geometry_fingerprint(capabilities, settings)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Geometry cache hit")
            return cached

        logger.debug("Geometry cache miss, recomputing")
        geometry = compute_geometry(capabilities, settings)
        self.cache.put(key, geometry)
        return geometry

    def invalidate(self) -> None:
        self.cache.clear()
