"""
Configuration and constants for skill sphere geometry.

Style Model:
- connection_mode picks the graph algorithm (AUTO = convex hull, FIXED = k-NN)
- connection_style picks the curvature of edges and the patch style
- fill_color_mode picks how the surface patches are coloured
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import json
from pathlib import Path


class ConnectionMode(Enum):
    """
    Graph algorithm used to connect nodes.

    AUTO: global convex hull over all tip positions
    FIXED: each node connects to its k nearest neighbours
    """
    AUTO = "auto"
    FIXED = "fixed"


class ConnectionStyle(Enum):
    """
    Edge curvature style.

    NONE disables connectivity entirely. STRAIGHT draws lines and flat
    triangles. CURVE_IN / CURVE_OUT pull the quadratic control point toward
    or away from the core.
    """
    NONE = "none"
    STRAIGHT = "straight"
    CURVE_IN = "curve-in"
    CURVE_OUT = "curve-out"


class FillColorMode(Enum):
    """Surface colouring: one solid colour, per-corner gradient, or the core colour."""
    SOLID = "solid"
    GRADIENT = "gradient"
    CORE = "core"


# Control-point radial scale per curve style
CURVE_SCALE = {
    ConnectionStyle.CURVE_IN: 0.7,
    ConnectionStyle.CURVE_OUT: 1.3,
}

# Barycentric subdivisions per curved patch
PATCH_SEGMENTS = 12

# Plane-side tolerance for the brute-force hull
HULL_EPSILON = 1e-4

# Cross products shorter than this are treated as degenerate triples
DEGENERATE_NORMAL_TOLERANCE = 1e-12

# Fill opacity at or above which the surface is drawn as opaque
OPAQUE_THRESHOLD = 0.99

# Label scaling
LABEL_DISTANCE_FACTOR = 15.0
LABEL_FONT_CEILING = 1500.0
LABEL_TIP_OFFSET = 0.4


@dataclass
class SurfaceMetadata:
    """
    Metadata written next to every exported surface mesh.
    """
    n_nodes: int
    n_edges: int
    n_faces: int
    n_vertices: int
    n_triangles: int
    is_opaque: bool
    fingerprint: str
    settings: Dict[str, Any] = field(default_factory=dict)
    mesh_stats: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_nodes": self.n_nodes,
            "n_edges": self.n_edges,
            "n_faces": self.n_faces,
            "n_vertices": self.n_vertices,
            "n_triangles": self.n_triangles,
            "is_opaque": self.is_opaque,
            "fingerprint": self.fingerprint,
            "settings": self.settings,
            "mesh_stats": self.mesh_stats
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SurfaceMetadata":
        return cls(**data)


@dataclass
class SphereSettings:
    """
    Style configuration consumed by the geometry engine.

    Radii are in scene units; colours are hex strings ("#rrggbb").
    """

    # Core and bars
    core_radius: float = 1.0
    bar_base_length: float = 0.5  # Length of a bar at score 0
    score_scale: float = 0.3  # Extra length per score point
    core_color: str = "#6366f1"

    # Connectivity
    connection_style: ConnectionStyle = ConnectionStyle.CURVE_IN
    connection_mode: ConnectionMode = ConnectionMode.AUTO
    connection_neighbors: int = 3

    # Surface fill
    fill_mesh: bool = True
    fill_color_mode: FillColorMode = FillColorMode.GRADIENT
    fill_solid_color: str = "#6366f1"
    fill_opacity: float = 0.2

    # Labels
    label_size: float = 12.0
    min_label_size: float = 8.0

    # Paths (relative to project root)
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    @property
    def reference_color(self) -> str:
        """Colour used when the fill is not a gradient."""
        if self.fill_color_mode == FillColorMode.CORE:
            return self.core_color
        return self.fill_solid_color

    def tip_radius(self, score: float) -> float:
        """Radius of a node's tip for a given score."""
        return self.core_radius + self.bar_base_length + score * self.score_scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "core_radius": self.core_radius,
            "bar_base_length": self.bar_base_length,
            "score_scale": self.score_scale,
            "core_color": self.core_color,
            "connection_style": self.connection_style.value,
            "connection_mode": self.connection_mode.value,
            "connection_neighbors": self.connection_neighbors,
            "fill_mesh": self.fill_mesh,
            "fill_color_mode": self.fill_color_mode.value,
            "fill_solid_color": self.fill_solid_color,
            "fill_opacity": self.fill_opacity,
            "label_size": self.label_size,
            "min_label_size": self.min_label_size
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SphereSettings":
        """Build settings from a plain dict; enum fields accept their string values."""
        data = dict(data)
        data["connection_style"] = ConnectionStyle(data.get("connection_style", "curve-in"))
        data["connection_mode"] = ConnectionMode(data.get("connection_mode", "auto"))
        data["fill_color_mode"] = FillColorMode(data.get("fill_color_mode", "gradient"))
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "SphereSettings":
        """Load settings from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save settings to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
