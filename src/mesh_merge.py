"""
Mesh assembly for independently built solids.

Solids are written quad by quad into a ``MeshBuffer`` with every face
owning its own four vertices. ``merge_solids`` concatenates any number of
them into one ``Mesh`` and recomputes vertex normals per solid.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from furniture import Mesh

logger = logging.getLogger(__name__)

# Rounding used to decide that two vertices sit at the same position.
DEFAULT_NORMAL_DIGITS = 9


@dataclass
class Solid:
    """Positions and flat triangle indices of one closed (or open) solid."""

    positions: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(len(self.positions))

    @property
    def triangle_count(self) -> int:
        return int(len(self.indices) // 3)


class MeshBuffer:
    """Growable vertex/index sink that geometry builders write quads into."""

    def __init__(self) -> None:
        self._positions: List[np.ndarray] = []
        self._indices: List[int] = []

    @property
    def vertex_count(self) -> int:
        return len(self._positions)

    @property
    def triangle_count(self) -> int:
        return len(self._indices) // 3

    def add_quad(self, p0, p1, p2, p3) -> None:
        """Append one quad as triangles (0, 1, 2) and (0, 2, 3)."""
        base = len(self._positions)
        for p in (p0, p1, p2, p3):
            self._positions.append(np.asarray(p, dtype=float).reshape(3))
        self._indices.extend([
            base, base + 1, base + 2,
            base, base + 2, base + 3,
        ])

    def add_quads(self, quads) -> None:
        for quad in quads:
            self.add_quad(*quad)

    def to_solid(self) -> Solid:
        if not self._positions:
            return Solid(np.zeros((0, 3)), np.zeros(0, dtype=np.int64))
        return Solid(
            positions=np.array(self._positions, dtype=float),
            indices=np.array(self._indices, dtype=np.int64),
        )


def merge_solids(
    solids: Sequence[Solid],
    weld_normals: bool = True,
    digits: int = DEFAULT_NORMAL_DIGITS,
) -> Mesh:
    """Concatenate solids into a single mesh.

    Indices of each solid are shifted by the running vertex count. Normals
    are recomputed afterwards; see ``compute_vertex_normals``.

    Args:
        solids: Solids (or MeshBuffers) in output order.
        weld_normals: Average normals over coincident positions within a
            solid. When False every vertex keeps its own face's normal.
        digits: Decimal rounding used to match coincident positions.

    Returns:
        Merged Mesh; empty input gives an empty mesh.
    """
    positions: List[np.ndarray] = []
    indices: List[np.ndarray] = []
    solid_ids: List[np.ndarray] = []
    ranges = []
    offset = 0

    for i, solid in enumerate(solids):
        if isinstance(solid, MeshBuffer):
            solid = solid.to_solid()
        count = solid.vertex_count
        positions.append(solid.positions)
        indices.append(np.asarray(solid.indices, dtype=np.int64) + offset)
        solid_ids.append(np.full(count, i, dtype=np.int64))
        ranges.append((offset, offset + count))
        offset += count

    if offset == 0:
        return Mesh(solid_ranges=ranges)

    all_positions = np.concatenate(positions, axis=0)
    all_indices = np.concatenate(indices)
    groups = np.concatenate(solid_ids) if weld_normals else None
    normals = compute_vertex_normals(
        all_positions, all_indices, solid_ids=groups, digits=digits,
    )
    logger.debug(
        "Merged %d solids: %d vertices, %d triangles",
        len(ranges), len(all_positions), len(all_indices) // 3,
    )
    return Mesh(
        positions=all_positions,
        indices=all_indices,
        normals=normals,
        solid_ranges=ranges,
    )


def compute_vertex_normals(
    positions: np.ndarray,
    indices: np.ndarray,
    solid_ids: Optional[np.ndarray] = None,
    digits: int = DEFAULT_NORMAL_DIGITS,
) -> np.ndarray:
    """Area-weighted vertex normals.

    With ``solid_ids`` given, vertices that share a rounded position *and*
    a solid id pool their face normals; vertices of different solids never
    blend. Without it, each vertex only sees the triangles that index it.
    """
    positions = np.asarray(positions, dtype=float)
    tris = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    n_vertices = len(positions)
    if n_vertices == 0:
        return np.zeros((0, 3))

    a = positions[tris[:, 0]]
    b = positions[tris[:, 1]]
    c = positions[tris[:, 2]]
    # Unnormalised cross product: length is twice the triangle area
    face_normals = np.cross(b - a, c - a)

    if solid_ids is None:
        group = np.arange(n_vertices)
        n_groups = n_vertices
    else:
        key = np.column_stack([
            np.asarray(solid_ids, dtype=float),
            np.round(positions, digits),
        ])
        _, group = np.unique(key, axis=0, return_inverse=True)
        group = np.asarray(group).reshape(-1)
        n_groups = int(group.max()) + 1

    accum = np.zeros((n_groups, 3))
    for corner in range(3):
        np.add.at(accum, group[tris[:, corner]], face_normals)

    lengths = np.linalg.norm(accum, axis=1)
    lengths[lengths < 1e-12] = 1.0
    accum = accum / lengths[:, None]
    return accum[group]
