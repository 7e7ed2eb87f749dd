"""
Surface tessellation of graph faces.

Each face becomes either one flat triangle (STRAIGHT style) or a quadratic
triangular Bezier patch:

    P(u,v,w) = u^2 P1 + v^2 P2 + w^2 P3 + 2uv E12 + 2vw E23 + 2wu E31

sampled on a barycentric grid with PATCH_SEGMENTS subdivisions per side
(segments^2 triangles per face). Output is a non-indexed float32 triangle
soup: every 3 consecutive vertices form one triangle.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Tuple
import logging

import numpy as np

from common.config import (
    ConnectionStyle,
    FillColorMode,
    PATCH_SEGMENTS,
    OPAQUE_THRESHOLD,
)
from .graph import Face

logger = logging.getLogger(__name__)


@dataclass
class SurfaceBuffer:
    """Flat vertex/colour buffer ready for a renderer."""
    positions: np.ndarray  # (V, 3) float32
    colors: np.ndarray  # (V, 3) float32
    is_opaque: bool

    @property
    def n_vertices(self) -> int:
        return len(self.positions)

    @property
    def n_triangles(self) -> int:
        return len(self.positions) // 3

    @property
    def triangles(self) -> np.ndarray:
        """(T, 3) vertex indices for the triangle soup."""
        return np.arange(self.n_vertices, dtype=np.int64).reshape(-1, 3)

    @classmethod
    def empty(cls, is_opaque: bool = False) -> "SurfaceBuffer":
        return cls(
            positions=np.empty((0, 3), dtype=np.float32),
            colors=np.empty((0, 3), dtype=np.float32),
            is_opaque=is_opaque
        )


def is_opaque(opacity: float) -> bool:
    """Only effectively full opacity counts as opaque."""
    return opacity >= OPAQUE_THRESHOLD


def patch_vertex_count(segments: int = PATCH_SEGMENTS) -> int:
    """Vertices emitted for one curved patch: 3 per triangle, segments^2 triangles."""
    return 3 * segments * segments


@lru_cache(maxsize=8)
def barycentric_grid(segments: int = PATCH_SEGMENTS) -> np.ndarray:
    """
    Barycentric (u, v, w) for every emitted vertex of one patch.

    For each cell (i, j) with k = segments - i - j, an "up" triangle
    (i,j,k), (i+1,j,k-1), (i,j+1,k-1) is always emitted; a "down" triangle
    (i+1,j,k-1), (i+1,j+1,k-2), (i,j+1,k-1) only while i + j + 1 < segments.

    Returns:
        (V, 3) float64 array, read-only
    """
    lattice = []
    for i in range(segments):
        for j in range(segments - i):
            k = segments - i - j
            p1 = (i, j, k)
            p2 = (i + 1, j, k - 1)
            p3 = (i, j + 1, k - 1)
            lattice.extend((p1, p2, p3))
            if i + j + 1 < segments:
                p4 = (i + 1, j + 1, k - 2)
                lattice.extend((p2, p4, p3))

    grid = np.array(lattice, dtype=np.float64) / segments
    grid.setflags(write=False)
    return grid


def bezier_patch_weights(bary: np.ndarray) -> np.ndarray:
    """
    Quadratic Bezier triangle basis for each (u, v, w).

    Columns match control rows (P1, P2, P3, E12, E23, E31).
    """
    u, v, w = bary[:, 0], bary[:, 1], bary[:, 2]
    return np.column_stack([u * u, v * v, w * w, 2 * u * v, 2 * v * w, 2 * w * u])


def _face_colors(
    face: Face,
    color_mode: FillColorMode,
    reference_color: Optional[Tuple[float, float, float]]
) -> np.ndarray:
    """(3, 3) corner colours for the face under the given colour mode."""
    if color_mode == FillColorMode.GRADIENT:
        return np.array(face.colors, dtype=np.float64)
    return np.tile(np.asarray(reference_color, dtype=np.float64), (3, 1))


def tessellate_face(
    face: Face,
    curved: bool,
    color_mode: FillColorMode = FillColorMode.GRADIENT,
    reference_color: Optional[Tuple[float, float, float]] = (1.0, 1.0, 1.0),
    segments: int = PATCH_SEGMENTS
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Tessellate a single face.

    Args:
        face: Face with corners, control points and corner colours
        curved: Bezier patch if True, one flat triangle otherwise
        color_mode: GRADIENT interpolates corner colours; SOLID / CORE use
            reference_color everywhere
        reference_color: RGB used by the non-gradient modes
        segments: Barycentric subdivisions per side

    Returns:
        (positions, colors) as float64 (V, 3) arrays
    """
    corner_colors = _face_colors(face, color_mode, reference_color)
    corners = np.array(face.corners, dtype=np.float64)

    if not curved:
        return corners, corner_colors

    bary = barycentric_grid(segments)
    control = np.vstack([corners, np.array(face.control_points, dtype=np.float64)])
    positions = bezier_patch_weights(bary) @ control
    colors = bary @ corner_colors

    return positions, colors


def tessellate(
    faces: Sequence[Face],
    style: ConnectionStyle,
    color_mode: FillColorMode = FillColorMode.GRADIENT,
    reference_color: Optional[Tuple[float, float, float]] = (1.0, 1.0, 1.0),
    opacity: float = 1.0,
    segments: int = PATCH_SEGMENTS
) -> SurfaceBuffer:
    """
    Tessellate all faces into one triangle-soup buffer.

    STRAIGHT style gives flat triangles, CURVE_IN / CURVE_OUT give Bezier
    patches, NONE gives an empty buffer.

    Args:
        faces: Faces from build_graph
        style: Connection style
        color_mode: Fill colour mode
        reference_color: RGB for SOLID / CORE modes; unused (may be None) for GRADIENT
        opacity: Fill opacity; only used to decide is_opaque
        segments: Barycentric subdivisions for curved patches

    Returns:
        SurfaceBuffer with float32 positions and colours
    """
    opaque = is_opaque(opacity)
    if style == ConnectionStyle.NONE or len(faces) == 0:
        return SurfaceBuffer.empty(is_opaque=opaque)

    curved = style != ConnectionStyle.STRAIGHT
    all_positions = []
    all_colors = []

    for face in faces:
        positions, colors = tessellate_face(
            face, curved, color_mode, reference_color, segments
        )
        all_positions.append(positions)
        all_colors.append(colors)

    buffer = SurfaceBuffer(
        positions=np.vstack(all_positions).astype(np.float32),
        colors=np.vstack(all_colors).astype(np.float32),
        is_opaque=opaque
    )

    logger.debug(f"Tessellated {len(faces)} faces ({'curved' if curved else 'flat'}): "
                 f"{buffer.n_vertices} vertices")
    return buffer
