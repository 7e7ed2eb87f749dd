"""
Label size compensation.

Labels are drawn with a distance factor, so their on-screen size shrinks as
the camera moves away. The font size is boosted to keep them above a
minimum on-screen size, capped at LABEL_FONT_CEILING.
"""

import numpy as np

from common.config import LABEL_DISTANCE_FACTOR, LABEL_FONT_CEILING, LABEL_TIP_OFFSET


def compute_label_font_size(
    distance: float,
    label_size: float,
    min_label_size: float,
    distance_factor: float = LABEL_DISTANCE_FACTOR,
    ceiling: float = LABEL_FONT_CEILING
) -> float:
    """
    Font size keeping label_size * (distance_factor / distance) >= min_label_size.

    Args:
        distance: Camera distance to the label's reference point
        label_size: Preferred font size
        min_label_size: Minimum acceptable on-screen size
        distance_factor: Distance at which font size equals on-screen size
        ceiling: Absolute font size cap

    Returns:
        Font size, never above ceiling
    """
    if distance <= 0:
        return float(min(label_size, ceiling))

    scale = distance_factor / distance
    if label_size * scale < min_label_size:
        return float(min(ceiling, min_label_size / scale))
    return float(min(label_size, ceiling))


def label_anchor(tip: np.ndarray, offset: float = LABEL_TIP_OFFSET) -> np.ndarray:
    """Point just beyond a node's tip, along the radial direction."""
    tip = np.asarray(tip, dtype=np.float64)
    length = np.linalg.norm(tip)
    if length < 1e-12:
        return tip.copy()
    return tip + tip / length * offset
