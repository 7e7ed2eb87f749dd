"""
Skill Sphere - Capability sphere geometry.

Two connectivity approaches:
- Auto: global convex hull over node tips
- Fixed: k-nearest-neighbour graph with inferred faces

Usage:
    python src/build_sphere.py --count 8 --mode auto --style curve-in
"""

__version__ = "1.0.0"
