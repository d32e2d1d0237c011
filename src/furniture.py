"""
Core data structures for splayed-apron geometry.

Beams (aprons, stretchers) are described in their own local frame: X runs
along the length, Y is up, Z runs through the thickness with the front face
at -Z. Vectors are plain ``np.ndarray`` triples.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import trimesh


class BeamProfile(Enum):
    """Underside profile of a beam on the non-splayed path."""
    STRAIGHT = "straight"
    ARCHED = "arched"
    SCALLOPED = "scalloped"


class ApronPosition(Enum):
    """Where an apron sits on the table frame."""
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"


class BeamEnd(Enum):
    """The two ends of a beam along its local X axis."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def sign(self) -> float:
        """-1 for the left (local -X) end, +1 for the right end."""
        return -1.0 if self is BeamEnd.LEFT else 1.0


class BeamConfigError(ValueError):
    """Raised when a beam or tenon request cannot be built as given."""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__("Invalid beam configuration: " + "; ".join(self.issues))


def _dimension_issues(owner: str, values: List[Tuple[str, float]]) -> List[str]:
    issues = []
    for name, value in values:
        if not math.isfinite(value):
            issues.append(f"{owner} {name} must be finite, got {value}")
        elif value <= 0:
            issues.append(f"{owner} {name} must be positive, got {value}")
    return issues


@dataclass
class BeamSpec:
    """
    A rectangular beam connecting two legs.

    Attributes:
        length: Extent along local X
        height: Extent along local Y
        thickness: Extent along local Z
        yaw: Rotation of the local frame about world Y (radians)
        splay_fallback: Leg splay in degrees, only used to pick the
            compound-angle path when no mating orientation is supplied
    """
    length: float
    height: float
    thickness: float
    yaw: float = 0.0
    splay_fallback: float = 0.0

    @property
    def half_extents(self) -> Tuple[float, float, float]:
        return (self.length / 2, self.height / 2, self.thickness / 2)

    def nominal_end_x(self, end: BeamEnd) -> float:
        """Local X of the unshifted end face centre."""
        return end.sign * self.length / 2

    def validate(self) -> List[str]:
        """Check dimensions.

        Returns list of issue strings (empty = ok).
        """
        issues = _dimension_issues("Beam", [
            ("length", self.length),
            ("height", self.height),
            ("thickness", self.thickness),
        ])
        for name in ("yaw", "splay_fallback"):
            value = getattr(self, name)
            if not math.isfinite(value):
                issues.append(f"Beam {name} must be finite, got {value}")
        return issues


@dataclass
class TenonSpec:
    """
    A tenon projecting from a beam end.

    Attributes:
        thickness: Extent along the beam's local Z
        width: Extent along the beam's local Y
        length: How far the tenon projects past the end face
        miter_angle_deg: Miter on the outer end for corner joints (0 = square)
        through: Through tenons run 10% longer to show past the leg
        miter_side: +1 shortens the back (+Z) edge, -1 the front (-Z) edge;
            set it to the side facing the table interior
        haunch_width: Height of the haunch block above the tenon (0 = none)
        haunch_depth: How far the haunch projects past the end face
    """
    thickness: float
    width: float
    length: float
    miter_angle_deg: float = 0.0
    through: bool = False
    miter_side: float = 1.0
    haunch_width: float = 0.0
    haunch_depth: float = 0.0

    @property
    def effective_length(self) -> float:
        return self.length * 1.1 if self.through else self.length

    @property
    def miter_offset(self) -> float:
        """How much shorter the mitered edge is than the opposite edge."""
        if self.miter_angle_deg <= 0:
            return 0.0
        return self.thickness / 2 * math.tan(math.radians(self.miter_angle_deg))

    def validate(self) -> List[str]:
        issues = _dimension_issues("Tenon", [
            ("thickness", self.thickness),
            ("width", self.width),
            ("length", self.length),
        ])
        if issues:
            return issues
        if not 0.0 <= self.miter_angle_deg < 90.0:
            issues.append(
                f"Tenon miter angle must be in [0, 90), got {self.miter_angle_deg}"
            )
        elif self.miter_offset >= self.effective_length:
            issues.append(
                f"Tenon miter offset {self.miter_offset:.4f} consumes the whole "
                f"tenon length {self.effective_length:.4f}"
            )
        if self.miter_side not in (1.0, -1.0):
            issues.append(f"Tenon miter side must be +1 or -1, got {self.miter_side}")
        issues.extend(self._haunch_issues())
        return issues

    @property
    def has_haunch(self) -> bool:
        return self.haunch_width > 0 and self.haunch_depth > 0

    def _haunch_issues(self) -> List[str]:
        if self.haunch_width == 0 and self.haunch_depth == 0:
            return []
        issues = _dimension_issues("Haunch", [
            ("width", self.haunch_width),
            ("depth", self.haunch_depth),
        ])
        if not issues and self.haunch_depth > self.effective_length - self.miter_offset:
            issues.append(
                f"Haunch depth {self.haunch_depth} must not exceed the square part "
                f"of the tenon ({self.effective_length - self.miter_offset:.4f})"
            )
        return issues

    def validate_against(
        self,
        beam: BeamSpec,
        section_height: Optional[float] = None,
    ) -> List[str]:
        """Check that the tenon section fits inside the beam end section.

        Args:
            beam: The beam carrying the tenon.
            section_height: Height of the end face when it is shorter than
                the beam (profiled beams); defaults to ``beam.height``.
        """
        issues = self.validate()
        if issues:
            return issues
        height = beam.height if section_height is None else section_height
        if self.thickness >= beam.thickness:
            issues.append(
                f"Tenon thickness {self.thickness} must be less than beam "
                f"thickness {beam.thickness}"
            )
        if self.width >= height:
            issues.append(
                f"Tenon width {self.width} must be less than end face height {height}"
            )
        elif self.has_haunch and self.width / 2 + self.haunch_width >= height / 2:
            issues.append(
                f"Haunch width {self.haunch_width} reaches the top of the "
                f"{height} end face above a {self.width} tenon"
            )
        return issues


@dataclass
class CornerSet:
    """The four corners of one beam end face, in local coordinates."""
    top_front: np.ndarray
    top_back: np.ndarray
    bottom_front: np.ndarray
    bottom_back: np.ndarray

    @classmethod
    def from_array(cls, corners: np.ndarray) -> "CornerSet":
        """Build from a (4, 3) array ordered TF, TB, BF, BB."""
        arr = np.asarray(corners, dtype=float)
        return cls(arr[0].copy(), arr[1].copy(), arr[2].copy(), arr[3].copy())

    def as_array(self) -> np.ndarray:
        return np.array([
            self.top_front, self.top_back, self.bottom_front, self.bottom_back,
        ], dtype=float)

    def centroid_yz(self) -> Tuple[float, float]:
        arr = self.as_array()
        return (float(arr[:, 1].mean()), float(arr[:, 2].mean()))

    def most_inset_x(self, end: BeamEnd) -> float:
        """Local X of the corner closest to the beam centre."""
        xs = self.as_array()[:, 0]
        return float(xs.max() if end is BeamEnd.LEFT else xs.min())


@dataclass
class Mesh:
    """
    Triangle mesh with per-face duplicated vertices.

    Attributes:
        positions: (N, 3) vertex positions
        indices: (M,) flat triangle index list, M divisible by 3
        normals: (N, 3) per-vertex normals
        solid_ranges: (start, stop) vertex range of each merged solid
    """
    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    solid_ranges: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return int(len(self.positions))

    @property
    def triangle_count(self) -> int:
        return int(len(self.indices) // 3)

    @property
    def triangles(self) -> np.ndarray:
        """(M/3, 3) view of the index list."""
        return self.indices.reshape(-1, 3)

    @property
    def is_empty(self) -> bool:
        return self.vertex_count == 0

    def solid_positions(self, solid: int) -> np.ndarray:
        start, stop = self.solid_ranges[solid]
        return self.positions[start:stop]

    def solid_triangles(self, solid: int) -> np.ndarray:
        """Triangles of one solid, re-indexed from zero."""
        start, stop = self.solid_ranges[solid]
        tris = self.triangles
        mask = (tris[:, 0] >= start) & (tris[:, 0] < stop)
        return tris[mask] - start

    def solid_to_trimesh(self, solid: int) -> trimesh.Trimesh:
        """One merged solid as a processed trimesh (coincident vertices merged)."""
        return trimesh.Trimesh(
            vertices=self.solid_positions(solid),
            faces=self.solid_triangles(solid),
            process=True,
        )

    def to_trimesh(self, process: bool = True) -> trimesh.Trimesh:
        """Convert to a trimesh.Trimesh.

        With ``process=True`` coincident vertices are merged, which is what
        watertightness and volume checks need. Normals are only carried over
        on the unprocessed mesh, where vertex order is preserved.
        """
        if process:
            return trimesh.Trimesh(
                vertices=self.positions, faces=self.triangles, process=True,
            )
        return trimesh.Trimesh(
            vertices=self.positions,
            faces=self.triangles,
            vertex_normals=self.normals,
            process=False,
        )
