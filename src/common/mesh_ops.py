"""
Mesh operation utilities.

Conversion of surface buffers to trimesh meshes, and mesh statistics.
"""

import numpy as np
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False


def colors_to_rgba8(colors: np.ndarray) -> np.ndarray:
    """Convert (V, 3) float colours in [0, 1] to (V, 4) uint8 RGBA."""
    colors = np.asarray(colors, dtype=np.float64)
    rgb = np.clip(np.round(colors * 255.0), 0, 255).astype(np.uint8)
    alpha = np.full((len(rgb), 1), 255, dtype=np.uint8)
    return np.hstack([rgb, alpha])


def surface_to_trimesh(
    positions: np.ndarray,
    colors: np.ndarray,
    merge: bool = False
) -> "trimesh.Trimesh":
    """
    Build a mesh from a triangle-soup buffer.

    Args:
        positions: (V, 3) vertices, 3 per triangle
        colors: (V, 3) float vertex colours
        merge: Weld duplicate vertices (shared patch seams) if True

    Returns:
        Mesh with per-vertex colours
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for mesh creation")

    positions = np.asarray(positions, dtype=np.float64)
    if len(positions) == 0:
        return trimesh.Trimesh()

    faces = np.arange(len(positions), dtype=np.int64).reshape(-1, 3)
    mesh = trimesh.Trimesh(
        vertices=positions,
        faces=faces,
        vertex_colors=colors_to_rgba8(colors),
        process=False
    )

    if merge:
        mesh.merge_vertices()

    logger.info(f"Surface mesh: {len(mesh.vertices)} verts, {len(mesh.faces)} faces")
    return mesh


def compute_mesh_stats(mesh: "trimesh.Trimesh") -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Args:
        mesh: Trimesh mesh object

    Returns:
        Dictionary of mesh statistics
    """
    if len(mesh.vertices) == 0:
        return {
            "n_vertices": 0,
            "n_faces": 0,
            "bounds": None,
            "extents": None,
            "max_extent": 0.0,
            "surface_area": 0.0,
            "is_watertight": False
        }

    bounds = mesh.bounds
    extents = mesh.extents

    return {
        "n_vertices": len(mesh.vertices),
        "n_faces": len(mesh.faces),
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "surface_area": float(mesh.area),
        "is_watertight": bool(mesh.is_watertight)
    }
