"""
Leg placement helpers that feed the beam shaper.

Computes the world-space normals of splayed (and optionally tapered) leg
faces, pairs them with the apron ends that meet them, and builds the four
aprons of a table frame. Apron meshes are independent of each other, so the
set is built on a thread pool.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

from beam_shaper import MeshBuildConfig, TenonArg, build_beam_mesh
from furniture import ApronPosition, BeamEnd, BeamProfile, BeamSpec, Mesh, TenonSpec
from geometry_primitives import rotation_about_y, unit

logger = logging.getLogger(__name__)

# Bottom size of a splayed leg when no taper end dimension is given
DEFAULT_BOTTOM_RATIO = 0.6


class LegCorner(Enum):
    """Leg corners; front is -Z, left is -X."""
    FL = "FL"
    FR = "FR"
    BL = "BL"
    BR = "BR"


class LegFace(Enum):
    PLUS_X = "+X"
    MINUS_X = "-X"
    PLUS_Z = "+Z"
    MINUS_Z = "-Z"


# Sign of the (x, z) splay rotation for each corner, so every foot moves
# outward.
_SPLAY_SIGNS: Dict[LegCorner, Tuple[float, float]] = {
    LegCorner.FL: (1.0, -1.0),
    LegCorner.FR: (1.0, 1.0),
    LegCorner.BL: (-1.0, -1.0),
    LegCorner.BR: (-1.0, 1.0),
}

# (leg at the apron's local left end, leg at its local right end)
_APRON_LEGS: Dict[ApronPosition, Tuple[Tuple[LegCorner, LegFace], Tuple[LegCorner, LegFace]]] = {
    ApronPosition.FRONT: ((LegCorner.FL, LegFace.PLUS_X), (LegCorner.FR, LegFace.MINUS_X)),
    ApronPosition.BACK: ((LegCorner.BL, LegFace.PLUS_X), (LegCorner.BR, LegFace.MINUS_X)),
    ApronPosition.LEFT: ((LegCorner.BL, LegFace.MINUS_Z), (LegCorner.FL, LegFace.PLUS_Z)),
    ApronPosition.RIGHT: ((LegCorner.BR, LegFace.MINUS_Z), (LegCorner.FR, LegFace.PLUS_Z)),
}

# Local Z direction of each apron that faces the table interior. Mitered
# tenons are cut on this side so they clear the tenon of the adjoining apron.
_INTERIOR_SIDE: Dict[ApronPosition, float] = {
    ApronPosition.FRONT: 1.0,
    ApronPosition.BACK: -1.0,
    ApronPosition.LEFT: 1.0,
    ApronPosition.RIGHT: -1.0,
}


@dataclass
class LegParams:
    """Leg dimensions relevant to apron mating."""

    splay_deg: float = 0.0
    top_size: float = 2.5
    bottom_size: Optional[float] = None
    height: float = 28.0

    @property
    def resolved_bottom_size(self) -> float:
        if self.bottom_size:
            return self.bottom_size
        return self.top_size * DEFAULT_BOTTOM_RATIO


def splay_rotation(corner: LegCorner, splay_deg: float) -> Rotation:
    """Rotation of a splayed leg: intrinsic XYZ Euler (theta_x, 0, theta_z)."""
    splay = math.radians(splay_deg)
    sx, sz = _SPLAY_SIGNS[corner]
    return Rotation.from_euler("XYZ", [sx * splay, 0.0, sz * splay])


def leg_face_normal(
    corner: LegCorner,
    face: LegFace,
    splay_deg: float,
    top_size: float,
    bottom_size: float,
    leg_height: float,
) -> np.ndarray:
    """World-space normal of one side face of a splayed, tapered leg.

    The leg is modelled centred on its origin with a square top of
    ``top_size`` and bottom of ``bottom_size``. Top and bottom are cut
    horizontal after splaying, which tilts each face corner's Y by
    -x*sin(theta_z) + z*sin(theta_x).
    """
    splay = math.radians(splay_deg)
    sx, sz = _SPLAY_SIGNS[corner]
    theta_x = sx * splay
    theta_z = sz * splay
    t = top_size / 2
    b = bottom_size / 2
    y_top = leg_height / 2
    y_bot = -leg_height / 2

    def point(x: float, y: float, z: float) -> np.ndarray:
        return np.array([x, y - x * math.sin(theta_z) + z * math.sin(theta_x), z])

    if face is LegFace.PLUS_X:
        top1, top2, bot1 = point(t, y_top, -t), point(t, y_top, t), point(b, y_bot, -b)
    elif face is LegFace.MINUS_X:
        top1, top2, bot1 = point(-t, y_top, t), point(-t, y_top, -t), point(-b, y_bot, b)
    elif face is LegFace.PLUS_Z:
        top1, top2, bot1 = point(t, y_top, t), point(-t, y_top, t), point(b, y_bot, b)
    else:
        top1, top2, bot1 = point(-t, y_top, -t), point(t, y_top, -t), point(-b, y_bot, -b)

    local_normal = unit(np.cross(top2 - top1, bot1 - top1))
    return unit(splay_rotation(corner, splay_deg).apply(local_normal))


def apron_yaw(position: ApronPosition) -> float:
    """Yaw of an apron's local frame: side aprons run along world Z."""
    if position in (ApronPosition.LEFT, ApronPosition.RIGHT):
        return math.pi / 2
    return 0.0


def apron_mating_orientations(
    position: ApronPosition,
    legs: LegParams,
) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
    """World normals of the leg faces at an apron's (left, right) ends.

    Returns (None, None) when the legs are not splayed.
    """
    if legs.splay_deg <= 0:
        return None, None
    normals = []
    for corner, face in _APRON_LEGS[position]:
        normals.append(leg_face_normal(
            corner, face, legs.splay_deg,
            legs.top_size, legs.resolved_bottom_size, legs.height,
        ))
    return normals[0], normals[1]


def inside_taper_angle(
    top_size: float,
    bottom_size: float,
    leg_height: float,
    taper_start_from_top: float = 0.0,
) -> float:
    """Angle (radians) of a tapered leg's inside face from vertical."""
    return math.atan2((top_size - bottom_size) / 2, leg_height - taper_start_from_top)


def tapered_face_orientation(
    taper_angle: float,
    end: BeamEnd,
    yaw: float = 0.0,
) -> np.ndarray:
    """Mating normal for a beam end meeting a tapered (unsplayed) leg face.

    A positive angle sets the bottom corners inward, so each end's bottom
    edge sits tan(angle) * height inside its top edge.
    """
    c = math.cos(taper_angle)
    s = math.sin(taper_angle)
    local = np.array([c, s, 0.0]) if end is BeamEnd.LEFT else np.array([-c, s, 0.0])
    return rotation_about_y(yaw) @ local


def interior_tenons(tenon: TenonArg, position: ApronPosition) -> TenonArg:
    """Point the miter of every tenon in ``tenon`` at the table interior."""
    side = _INTERIOR_SIDE[position]
    if tenon is None:
        return None
    if isinstance(tenon, TenonSpec):
        return replace(tenon, miter_side=side)
    return {
        end: None if spec is None else replace(spec, miter_side=side)
        for end, spec in tenon.items()
    }


def build_apron_set(
    front_back_length: float,
    side_length: float,
    height: float,
    thickness: float,
    legs: LegParams,
    tenon: TenonArg = None,
    profile: Union[BeamProfile, str] = BeamProfile.STRAIGHT,
    config: Optional[MeshBuildConfig] = None,
    max_workers: int = 4,
) -> Dict[ApronPosition, Mesh]:
    """Build the four aprons of a table frame.

    Args:
        front_back_length: Length of the front and back aprons.
        side_length: Length of the left and right aprons.
        height: Apron height.
        thickness: Apron thickness.
        legs: Leg splay and size.
        tenon: Passed to ``build_beam_mesh`` for every apron, with its
            miter turned toward the table interior.
        profile: Underside profile, only used when legs are not splayed.
        config: MeshBuildConfig for every apron.
        max_workers: Thread pool size.

    Returns:
        Dict of position -> Mesh in each apron's local frame.
    """
    jobs = {}
    for position in ApronPosition:
        length = side_length if position in (ApronPosition.LEFT, ApronPosition.RIGHT) \
            else front_back_length
        spec = BeamSpec(
            length=length,
            height=height,
            thickness=thickness,
            yaw=apron_yaw(position),
            splay_fallback=max(legs.splay_deg, 0.0),
        )
        left, right = apron_mating_orientations(position, legs)
        jobs[position] = (spec, left, right, interior_tenons(tenon, position))

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            position: pool.submit(
                build_beam_mesh, spec, left, right, tenons, profile, config,
            )
            for position, (spec, left, right, tenons) in jobs.items()
        }
        meshes = {position: future.result() for position, future in futures.items()}

    logger.info(
        "Built %d aprons (splay %.2f deg)", len(meshes), legs.splay_deg,
    )
    return meshes
