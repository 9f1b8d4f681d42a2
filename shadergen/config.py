# shadergen/config.py
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class RenderSettings:
    """
    Controls the fixed camera, the clear color and how generated sources
    are adapted for the device.
    """

    clear_color: Tuple[float, float, float, float] = (0.1, 0.1, 0.2, 1.0)

    fov_degrees: float = 45.0
    near: float = 0.1
    far: float = 100.0
    camera_distance: float = 5.0  # Scene sits this far down -Z

    default_precision: str = "mediump"

    # Prepended as "#version N" to sources without their own directive.
    # 130 accepts precision qualifiers as well as attribute/varying.
    glsl_version: Optional[int] = 130


@dataclass(frozen=True, slots=True)
class WindowSettings:
    width: int = 400
    height: int = 400
    title: str = "shadergen"
    target_fps: int = 60
    vsync: bool = True
