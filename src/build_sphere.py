#!/usr/bin/env python3
"""
Skill Sphere - Surface builder

Lay out a set of capabilities, connect them, tessellate the surface and
export it as a mesh with a metadata sidecar.

Usage:
    python src/build_sphere.py --count 8 --mode auto --style curve-out
    python src/build_sphere.py --scores 3 5 1 7 2 --mode fixed --neighbors 2 -o outputs/demo.glb
    python src/build_sphere.py --settings settings.json --count 12
    python src/build_sphere.py --inspect outputs/sphere_8.glb
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from common.config import (
    SphereSettings, SurfaceMetadata,
    ConnectionMode, ConnectionStyle, FillColorMode,
)
from common.io import save_mesh, load_mesh
from common.mesh_ops import surface_to_trimesh, compute_mesh_stats
from sphere_engine import Capability, SphereEngine, SphereGeometry, assign_layout

logger = logging.getLogger(__name__)

# Palette cycled over generated capabilities
DEMO_PALETTE = [
    ("Strength", "#ef4444"),
    ("Intellect", "#3b82f6"),
    ("Creativity", "#a855f7"),
    ("Willpower", "#eab308"),
    ("Health", "#22c55e"),
    ("Focus", "#f97316"),
    ("Empathy", "#ec4899"),
    ("Craft", "#14b8a6"),
]


def make_capabilities(count: int, scores: Optional[List[float]] = None) -> List[Capability]:
    """
    Generate a laid-out demo capability set.

    Args:
        count: Number of capabilities (ignored when scores are given)
        scores: Optional explicit score per capability
    """
    if scores is not None:
        count = len(scores)
    else:
        scores = [0.0] * count

    caps = []
    for i in range(count):
        name, color = DEMO_PALETTE[i % len(DEMO_PALETTE)]
        if i >= len(DEMO_PALETTE):
            name = f"{name} {i // len(DEMO_PALETTE) + 1}"
        caps.append(Capability(id=str(i + 1), name=name, color=color, score=float(scores[i])))

    return assign_layout(caps)


def export_geometry(
    geometry: SphereGeometry,
    settings: SphereSettings,
    output_path: Path
) -> SurfaceMetadata:
    """Export the tessellated surface and its metadata."""
    mesh = surface_to_trimesh(geometry.surface.positions, geometry.surface.colors)
    stats = compute_mesh_stats(mesh)

    metadata = SurfaceMetadata(
        n_nodes=geometry.n_nodes,
        n_edges=len(geometry.edges),
        n_faces=len(geometry.faces),
        n_vertices=geometry.surface.n_vertices,
        n_triangles=geometry.surface.n_triangles,
        is_opaque=geometry.surface.is_opaque,
        fingerprint=geometry.fingerprint,
        settings=settings.to_dict(),
        mesh_stats=stats
    )

    if geometry.surface.n_vertices == 0:
        logger.warning("Surface is empty, writing metadata only")
        metadata.save(output_path.with_suffix('.json'))
    else:
        save_mesh(mesh, output_path, metadata)

    return metadata


def inspect_mesh(path: Path) -> dict:
    """
    Reload an exported surface and report its statistics.

    Args:
        path: Mesh written by export_geometry

    Returns:
        Dict with mesh statistics and the sidecar metadata (None if missing)
    """
    mesh, metadata = load_mesh(path)
    stats = compute_mesh_stats(mesh)

    if metadata is None:
        logger.warning(f"No metadata sidecar next to {path}")
    elif metadata.n_triangles != stats["n_faces"]:
        logger.warning(f"Sidecar lists {metadata.n_triangles} triangles, mesh has {stats['n_faces']}")

    return {
        "path": str(path),
        "mesh_stats": stats,
        "metadata": metadata.to_dict() if metadata is not None else None
    }


def main():
    parser = argparse.ArgumentParser(
        description="Skill Sphere - Build and export a capability surface"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        default=5,
        help="Number of capabilities to generate"
    )
    parser.add_argument(
        "--scores",
        type=float,
        nargs="+",
        default=None,
        help="Explicit scores (overrides --count)"
    )
    parser.add_argument(
        "--settings", "-s",
        type=Path,
        default=None,
        help="Settings JSON file"
    )
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in ConnectionMode],
        default=None,
        help="Connection mode (auto = convex hull, fixed = nearest neighbours)"
    )
    parser.add_argument(
        "--style",
        choices=[s.value for s in ConnectionStyle],
        default=None,
        help="Connection style"
    )
    parser.add_argument(
        "--neighbors", "-k",
        type=int,
        default=None,
        help="Neighbours per node in fixed mode"
    )
    parser.add_argument(
        "--fill",
        choices=[f.value for f in FillColorMode],
        default=None,
        help="Fill colour mode"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output mesh path (.glb or .ply)"
    )
    parser.add_argument(
        "--inspect",
        type=Path,
        default=None,
        help="Report on a previously exported mesh instead of building"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.inspect:
        if not args.inspect.exists():
            logger.error(f"Mesh not found: {args.inspect}")
            sys.exit(1)
        logger.info(f"\n{json.dumps(inspect_mesh(args.inspect), indent=2)}")
        return

    # Build settings
    settings = SphereSettings.from_json(args.settings) if args.settings else SphereSettings()
    if args.mode:
        settings.connection_mode = ConnectionMode(args.mode)
    if args.style:
        settings.connection_style = ConnectionStyle(args.style)
    if args.neighbors is not None:
        settings.connection_neighbors = args.neighbors
    if args.fill:
        settings.fill_color_mode = FillColorMode(args.fill)

    capabilities = make_capabilities(args.count, args.scores)
    if not capabilities:
        logger.error("No capabilities to lay out!")
        sys.exit(1)

    output_path = args.output or settings.output_dir / f"sphere_{len(capabilities)}.glb"

    logger.info(f"Building sphere for {len(capabilities)} capabilities")
    logger.info(f"Mode: {settings.connection_mode.value}, style: {settings.connection_style.value}")

    engine = SphereEngine(settings)
    geometry = engine.build(capabilities)

    if settings.connection_mode == ConnectionMode.AUTO and len(capabilities) < 4:
        logger.warning("Convex hull needs at least 4 capabilities; no connectivity produced")

    metadata = export_geometry(geometry, settings, output_path)

    summary = {
        "timestamp": datetime.now().isoformat(),
        "output": str(output_path),
        "metadata": metadata.to_dict()
    }
    logger.info(f"\n{json.dumps(summary, indent=2)}")


if __name__ == "__main__":
    main()
