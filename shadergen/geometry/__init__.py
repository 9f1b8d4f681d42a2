from shadergen.geometry.generator import GeometryBuffers, generate
from shadergen.geometry.specs import (
    GEOMETRY_NAMES,
    Cube,
    Cylinder,
    GeometrySpec,
    Plane,
    Sphere,
    Torus,
    geometry_from_name,
)

__all__ = [
    "GEOMETRY_NAMES",
    "Cube",
    "Cylinder",
    "GeometryBuffers",
    "GeometrySpec",
    "Plane",
    "Sphere",
    "Torus",
    "generate",
    "geometry_from_name",
]
