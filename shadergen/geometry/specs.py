# shadergen/geometry/specs.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class Cube:
    """Axis-aligned cube spanning [-1, 1] on every axis."""


@dataclass(frozen=True, slots=True)
class Sphere:
    radius: float = 1.0
    width_segments: int = 20
    height_segments: int = 20


@dataclass(frozen=True, slots=True)
class Plane:
    """Horizontal quad in the XZ plane, facing +Y."""

    half_size: float = 2.0


@dataclass(frozen=True, slots=True)
class Cylinder:
    """Open tube along Y (side wall only)."""

    radius: float = 1.0
    height: float = 2.0
    segments: int = 16


@dataclass(frozen=True, slots=True)
class Torus:
    major_radius: float = 0.6
    minor_radius: float = 0.3
    major_segments: int = 16
    minor_segments: int = 16


GeometrySpec = Union[Cube, Sphere, Plane, Cylinder, Torus]

_BY_NAME: dict[str, type] = {
    "cube": Cube,
    "sphere": Sphere,
    "plane": Plane,
    "cylinder": Cylinder,
    "torus": Torus,
}

GEOMETRY_NAMES = tuple(_BY_NAME)


def geometry_from_name(name: str | None) -> GeometrySpec:
    """
    Resolve a geometry tag to its default recipe.

    Matching is case-insensitive. Unknown or missing names fall back to Cube.
    """
    if not name:
        return Cube()
    return _BY_NAME.get(name.strip().lower(), Cube)()
