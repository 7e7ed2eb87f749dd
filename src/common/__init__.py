"""
Common modules shared by the sphere engine and its drivers.

Style Model:
- SphereSettings carries radii, connection and fill options
- Colours enter as hex strings and are converted once to RGB floats
- Surfaces leave as trimesh meshes with a JSON metadata sidecar
"""

from .config import (
    SphereSettings, SurfaceMetadata,
    ConnectionMode, ConnectionStyle, FillColorMode,
)
from .colors import hex_to_rgb
from .io import save_mesh, load_mesh
from .mesh_ops import surface_to_trimesh, compute_mesh_stats

__all__ = [
    'SphereSettings', 'SurfaceMetadata',
    'ConnectionMode', 'ConnectionStyle', 'FillColorMode',
    'hex_to_rgb',
    'save_mesh', 'load_mesh',
    'surface_to_trimesh', 'compute_mesh_stats',
]
