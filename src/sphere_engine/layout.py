"""
Spherical layout and coordinate mapping.

Angles use the physics convention with y as the polar axis:
- phi: inclination from +y (0 to pi)
- theta: azimuth in the x/z plane (0 to 2*pi)
"""

import math
from typing import List, Tuple

import numpy as np

GOLDEN_RATIO = (1 + math.sqrt(5)) / 2
TETRAHEDRAL_ANGLE = math.acos(-1 / 3)

TWO_PI = 2 * math.pi


def _polyhedral_layout(count: int) -> List[Tuple[float, float]]:
    """Fixed solids for 1..6 points."""
    third = TWO_PI / 3
    if count == 1:
        return [(0.0, 0.0)]
    if count == 2:
        return [(0.0, 0.0), (math.pi, 0.0)]
    if count == 3:
        # Equilateral triangle on the equator
        return [(math.pi / 2, 0.0), (math.pi / 2, third), (math.pi / 2, 2 * third)]
    if count == 4:
        # Tetrahedron: top pole + lower triangle
        return [
            (0.0, 0.0),
            (TETRAHEDRAL_ANGLE, 0.0),
            (TETRAHEDRAL_ANGLE, third),
            (TETRAHEDRAL_ANGLE, 2 * third),
        ]
    if count == 5:
        # Triangular bipyramid
        return [
            (0.0, 0.0),
            (math.pi, 0.0),
            (math.pi / 2, 0.0),
            (math.pi / 2, third),
            (math.pi / 2, 2 * third),
        ]
    # Octahedron
    return [
        (0.0, 0.0),
        (math.pi, 0.0),
        (math.pi / 2, 0.0),
        (math.pi / 2, math.pi / 2),
        (math.pi / 2, math.pi),
        (math.pi / 2, 3 * math.pi / 2),
    ]


def fibonacci_layout(count: int) -> List[Tuple[float, float]]:
    """
    Fibonacci-lattice spiral on the unit sphere.

    phi_i = acos(1 - 2(i + 0.5)/N), theta_i = (2*pi*i / golden) mod 2*pi
    """
    points = []
    for i in range(count):
        phi = math.acos(1 - 2 * (i + 0.5) / count)
        theta = math.fmod(TWO_PI * i / GOLDEN_RATIO, TWO_PI)
        points.append((phi, theta))
    return points


def distribute_points_on_sphere(count: int) -> List[Tuple[float, float]]:
    """
    Distribute N points on a sphere.

    Small counts (1-6) get recognisable solids (pole, poles, triangle,
    tetrahedron, bipyramid, octahedron); 7 or more use the Fibonacci spiral.

    Args:
        count: Number of points (>= 0)

    Returns:
        List of (phi, theta) pairs, one per index
    """
    if count < 0:
        raise ValueError(f"Point count must be non-negative, got {count}")
    if count == 0:
        return []
    if count <= 6:
        return _polyhedral_layout(count)
    return fibonacci_layout(count)


def spherical_to_cartesian(radius: float, phi: float, theta: float) -> np.ndarray:
    """
    Convert (radius, inclination, azimuth) to a Cartesian vector.

    Returns:
        Array (x, y, z) = (r sin(phi) cos(theta), r cos(phi), r sin(phi) sin(theta))
    """
    sin_phi = math.sin(phi)
    return np.array([
        radius * sin_phi * math.cos(theta),
        radius * math.cos(phi),
        radius * sin_phi * math.sin(theta),
    ], dtype=np.float64)


def spherical_to_cartesian_array(
    radius: np.ndarray,
    phi: np.ndarray,
    theta: np.ndarray
) -> np.ndarray:
    """
    Vectorised spherical_to_cartesian.

    Args:
        radius: Radii (scalar or N)
        phi: Inclinations (N)
        theta: Azimuths (N)

    Returns:
        (N, 3) array of XYZ coordinates
    """
    radius = np.asarray(radius, dtype=np.float64)
    phi = np.asarray(phi, dtype=np.float64)
    theta = np.asarray(theta, dtype=np.float64)

    x = radius * np.sin(phi) * np.cos(theta)
    y = radius * np.cos(phi)
    z = radius * np.sin(phi) * np.sin(theta)

    return np.column_stack(np.broadcast_arrays(x, y, z))
