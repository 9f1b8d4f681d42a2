# shadergen/geometry/generator.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

import numpy as np

from shadergen.geometry.specs import (
    Cube,
    Cylinder,
    GeometrySpec,
    Plane,
    Sphere,
    Torus,
)


@dataclass(frozen=True)
class GeometryBuffers:
    """
    Expanded triangle list for one primitive.

    `vertices` and `normals` are (N, 3) float32 arrays with N % 3 == 0.
    Index i of one buffer always describes the same corner as index i of
    the other.
    """

    vertices: np.ndarray
    normals: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)


def generate(spec: GeometrySpec) -> GeometryBuffers:
    """Build the vertex and normal buffers for a geometry recipe."""
    if isinstance(spec, Sphere):
        return _sphere(spec)
    if isinstance(spec, Plane):
        return _plane(spec)
    if isinstance(spec, Cylinder):
        return _cylinder(spec)
    if isinstance(spec, Torus):
        return _torus(spec)

    # Cube, and anything unrecognized
    return _cube()


# -- Flat primitives --

# Per face: outward normal and two counter-clockwise triangles.
_CUBE_FACES: Tuple[Tuple[Tuple[float, float, float], List[float]], ...] = (
    # Front
    ((0, 0, 1), [-1, -1, 1, 1, -1, 1, 1, 1, 1, -1, -1, 1, 1, 1, 1, -1, 1, 1]),
    # Back
    ((0, 0, -1), [-1, -1, -1, -1, 1, -1, 1, 1, -1, -1, -1, -1, 1, 1, -1, 1, -1, -1]),
    # Top
    ((0, 1, 0), [-1, 1, -1, -1, 1, 1, 1, 1, 1, -1, 1, -1, 1, 1, 1, 1, 1, -1]),
    # Bottom
    ((0, -1, 0), [-1, -1, -1, 1, -1, -1, 1, -1, 1, -1, -1, -1, 1, -1, 1, -1, -1, 1]),
    # Right
    ((1, 0, 0), [1, -1, -1, 1, 1, -1, 1, 1, 1, 1, -1, -1, 1, 1, 1, 1, -1, 1]),
    # Left
    ((-1, 0, 0), [-1, -1, -1, -1, -1, 1, -1, 1, 1, -1, -1, -1, -1, 1, 1, -1, 1, -1]),
)


def _cube() -> GeometryBuffers:
    vertices = []
    normals = []
    for normal, corners in _CUBE_FACES:
        vertices.extend(corners)
        normals.extend(normal * 6)

    return GeometryBuffers(
        vertices=np.array(vertices, dtype=np.float32).reshape(-1, 3),
        normals=np.array(normals, dtype=np.float32).reshape(-1, 3),
    )


def _plane(spec: Plane) -> GeometryBuffers:
    s = spec.half_size
    vertices = np.array(
        [
            [-s, 0.0, -s],
            [s, 0.0, s],
            [s, 0.0, -s],
            [-s, 0.0, -s],
            [-s, 0.0, s],
            [s, 0.0, s],
        ],
        dtype=np.float32,
    )
    normals = np.tile(np.array([0.0, 1.0, 0.0], dtype=np.float32), (6, 1))
    return GeometryBuffers(vertices=vertices, normals=normals)


# -- Curved primitives --
#
# Each builds a (rows + 1) x (cols + 1) grid of unit directions, derives
# positions from the same grid and expands both through one index list.


def _grid_cells(rows: int, cols: int) -> Iterator[Tuple[int, int, int, int, int]]:
    """
    Yields (row, a, b, c, d) for every cell of the grid, where
    a = (row, col), b = (row + 1, col), c = (row, col + 1), d = (row + 1, col + 1).
    """
    stride = cols + 1
    for i in range(rows):
        for j in range(cols):
            a = i * stride + j
            b = a + stride
            yield i, a, b, a + 1, b + 1


def _expand(
    positions: np.ndarray, directions: np.ndarray, indices: List[int]
) -> GeometryBuffers:
    idx = np.asarray(indices, dtype=np.int64)
    return GeometryBuffers(
        vertices=positions[idx].astype(np.float32),
        normals=directions[idx].astype(np.float32),
    )


def _sphere(spec: Sphere) -> GeometryBuffers:
    rows, cols = spec.height_segments, spec.width_segments

    phi, theta = np.meshgrid(
        np.linspace(0.0, math.pi, rows + 1),
        np.linspace(0.0, 2.0 * math.pi, cols + 1),
        indexing="ij",
    )
    directions = np.stack(
        [
            -np.cos(theta) * np.sin(phi),
            np.cos(phi),
            np.sin(theta) * np.sin(phi),
        ],
        axis=-1,
    ).reshape(-1, 3)
    positions = directions * spec.radius

    indices: List[int] = []
    for i, a, b, c, d in _grid_cells(rows, cols):
        # Pole rows collapse one triangle of the cell to zero area.
        if i != 0:
            indices.extend((a, b, c))
        if i != rows - 1:
            indices.extend((b, d, c))

    return _expand(positions, directions, indices)


def _cylinder(spec: Cylinder) -> GeometryBuffers:
    half = spec.height / 2.0

    y, theta = np.meshgrid(
        np.array([-half, half]),
        np.linspace(0.0, 2.0 * math.pi, spec.segments + 1),
        indexing="ij",
    )
    directions = np.stack(
        [np.cos(theta), np.zeros_like(theta), np.sin(theta)], axis=-1
    ).reshape(-1, 3)
    positions = directions * spec.radius
    positions[:, 1] = y.reshape(-1)

    indices: List[int] = []
    for _, a, b, c, d in _grid_cells(1, spec.segments):
        indices.extend((a, b, c, b, d, c))

    return _expand(positions, directions, indices)


def _torus(spec: Torus) -> GeometryBuffers:
    u, v = np.meshgrid(
        np.linspace(0.0, 2.0 * math.pi, spec.major_segments + 1),
        np.linspace(0.0, 2.0 * math.pi, spec.minor_segments + 1),
        indexing="ij",
    )
    directions = np.stack(
        [np.cos(v) * np.cos(u), np.sin(v), np.cos(v) * np.sin(u)], axis=-1
    ).reshape(-1, 3)

    ring_centers = np.stack(
        [np.cos(u), np.zeros_like(u), np.sin(u)], axis=-1
    ).reshape(-1, 3)
    positions = ring_centers * spec.major_radius + directions * spec.minor_radius

    indices: List[int] = []
    for _, a, b, c, d in _grid_cells(spec.major_segments, spec.minor_segments):
        indices.extend((a, c, b, b, c, d))

    return _expand(positions, directions, indices)
