from shadergen.shaders.bundle import (
    FRAGMENT_MARKER,
    VERTEX_MARKER,
    ShaderSections,
    extract_geometry_type,
    split,
)
from shadergen.shaders.normalize import (
    RECOGNIZED_DECLARATIONS,
    RepairReport,
    repair,
    repair_report,
)

__all__ = [
    "FRAGMENT_MARKER",
    "RECOGNIZED_DECLARATIONS",
    "VERTEX_MARKER",
    "RepairReport",
    "ShaderSections",
    "extract_geometry_type",
    "repair",
    "repair_report",
    "split",
]
