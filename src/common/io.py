"""
Mesh export utilities.

Writes tessellated sphere surfaces with a JSON metadata sidecar. Capability
and task data are not persisted here.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from .config import SurfaceMetadata

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False
    logger.warning("trimesh not available")


def save_mesh(
    mesh: "trimesh.Trimesh",
    path: Path,
    metadata: SurfaceMetadata
) -> None:
    """
    Save mesh to file with metadata sidecar.

    Args:
        mesh: Trimesh mesh object
        path: Output path (.glb, .ply, .obj, ...)
        metadata: SurfaceMetadata object (saved as .json sidecar)
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for saving meshes")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    mesh.export(str(path))
    logger.info(f"Saved mesh: {path} ({metadata.n_vertices} verts, {metadata.n_triangles} tris)")

    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")


def load_mesh(path: Path) -> Tuple["trimesh.Trimesh", Optional[SurfaceMetadata]]:
    """
    Load mesh and its metadata sidecar.

    Args:
        path: Path to mesh file

    Returns:
        Tuple of (mesh, metadata) - metadata may be None if not found
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for loading meshes")

    path = Path(path)
    mesh = trimesh.load(str(path), force="mesh", process=False)

    meta_path = path.with_suffix('.json')
    metadata = None
    if meta_path.exists():
        with open(meta_path) as f:
            metadata = SurfaceMetadata.from_dict(json.load(f))

    return mesh, metadata
