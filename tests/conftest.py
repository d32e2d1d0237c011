"""
Shared test fixtures for apron geometry tests.
"""
import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from furniture import BeamSpec, CornerSet, TenonSpec


@pytest.fixture
def apron_spec():
    """The 20 x 4 x 1 apron used by the end-to-end scenarios."""
    return BeamSpec(length=20.0, height=4.0, thickness=1.0)


@pytest.fixture
def ten_degree_normals():
    """Mating normal (sin 10, 0, cos 10) at the left end and its mirror at the right."""
    a = math.radians(10.0)
    return (
        np.array([math.sin(a), 0.0, math.cos(a)]),
        np.array([-math.sin(a), 0.0, math.cos(a)]),
    )


@pytest.fixture
def compound_normals():
    """Leg faces tilted in both Y and Z, as a splayed leg gives."""
    left = np.array([1.0, 0.12, -0.08])
    right = np.array([-1.0, 0.12, 0.08])
    return left / np.linalg.norm(left), right / np.linalg.norm(right)


@pytest.fixture
def scenario_c_tenon():
    return TenonSpec(thickness=0.33, width=2.0, length=1.5)


@pytest.fixture
def random_normals():
    """Random unit normals with |Nx| comfortably above the degenerate cutoff."""
    rng = np.random.default_rng(42)
    normals = rng.normal(size=(200, 3))
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    return normals[np.abs(normals[:, 0]) > 0.05]


@pytest.fixture
def unit_cube_corners():
    """(left, right) end faces of the cube [0, 1]^3."""
    def face(x):
        return CornerSet(
            top_front=np.array([x, 1.0, 0.0]),
            top_back=np.array([x, 1.0, 1.0]),
            bottom_front=np.array([x, 0.0, 0.0]),
            bottom_back=np.array([x, 0.0, 1.0]),
        )
    return face(0.0), face(1.0)
