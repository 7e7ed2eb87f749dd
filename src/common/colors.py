"""
Colour utilities.

Capabilities carry hex colours ("#ef4444"); the engine works in RGB floats
in [0, 1].
"""

import re
from typing import Tuple

import numpy as np
from trimesh.visual.color import hex_to_rgba

_HEX_PATTERN = re.compile(r"^#?[0-9a-fA-F]{6}$")


def hex_to_rgb(color: str) -> Tuple[float, float, float]:
    """
    Convert a "#rrggbb" string to an (r, g, b) tuple of floats in [0, 1].

    Raises:
        ValueError: if the string is not a 6-digit hex colour
    """
    if not isinstance(color, str) or not _HEX_PATTERN.match(color.strip()):
        raise ValueError(f"Invalid hex colour: {color!r}")

    rgba = np.asarray(hex_to_rgba(color.strip()), dtype=np.float64)
    return tuple(float(c) for c in rgba[:3] / 255.0)
