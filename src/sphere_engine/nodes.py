"""
Capability and node types.

A Capability is the engine's input record. A SkillNode is a capability
placed in 3D: its tip sits at core_radius + bar_base_length + score *
score_scale, and its bar starts at the core surface.

Node ids must be unique; this is a precondition and is not checked.
"""

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple, Dict
import logging

import numpy as np

from common.colors import hex_to_rgb
from common.config import SphereSettings
from .layout import distribute_points_on_sphere, spherical_to_cartesian_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capability:
    """One capability as seen by the geometry engine."""
    id: str
    name: str
    color: str  # "#rrggbb"
    score: float = 0.0
    phi: float = 0.0
    theta: float = 0.0


@dataclass
class SkillNode:
    """A capability positioned on the sphere."""
    id: str
    position: np.ndarray  # Tip position
    surface_position: np.ndarray  # Where the bar leaves the core
    color: Tuple[float, float, float]
    magnitude: float

    @property
    def bar_length(self) -> float:
        return float(np.linalg.norm(self.position - self.surface_position))


def assign_layout(capabilities: Sequence[Capability]) -> List[Capability]:
    """
    Full relayout: give every capability the angles for the current count.

    Called whenever a capability is added or removed.
    """
    points = distribute_points_on_sphere(len(capabilities))
    updated = [
        replace(cap, phi=phi, theta=theta)
        for cap, (phi, theta) in zip(capabilities, points)
    ]
    logger.debug(f"Relayout of {len(updated)} capabilities")
    return updated


def update_scores(
    capabilities: Sequence[Capability],
    scores: Dict[str, float]
) -> List[Capability]:
    """
    Radius-only update: change scores without touching angles.

    Args:
        capabilities: Current capabilities
        scores: Mapping of capability id -> new score; missing ids keep theirs
    """
    return [
        replace(cap, score=scores[cap.id]) if cap.id in scores else cap
        for cap in capabilities
    ]


def build_nodes(
    capabilities: Sequence[Capability],
    settings: SphereSettings
) -> List[SkillNode]:
    """
    Place each capability at its tip and surface positions.

    Order of the returned list matches the input order.
    """
    if not capabilities:
        return []

    phi = np.array([cap.phi for cap in capabilities])
    theta = np.array([cap.theta for cap in capabilities])
    tip_radii = np.array([settings.tip_radius(cap.score) for cap in capabilities])

    tips = spherical_to_cartesian_array(tip_radii, phi, theta)
    surfaces = spherical_to_cartesian_array(settings.core_radius, phi, theta)

    return [
        SkillNode(
            id=cap.id,
            position=tip,
            surface_position=surface,
            color=hex_to_rgb(cap.color),
            magnitude=float(cap.score)
        )
        for cap, tip, surface in zip(capabilities, tips, surfaces)
    ]


def node_positions(nodes: Sequence[SkillNode]) -> np.ndarray:
    """Stack node tip positions into an (N, 3) array."""
    if not nodes:
        return np.empty((0, 3))
    return np.vstack([n.position for n in nodes]).astype(np.float64)
