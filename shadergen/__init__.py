from shadergen.config import RenderSettings, WindowSettings
from shadergen.errors import (
    BundleParseError,
    DeviceUnavailableError,
    MarkerOrderError,
    MissingMarkerError,
    PipelineError,
    PipelineSources,
    ProgramLinkError,
    ShaderCompileError,
    ShaderStage,
)
from shadergen.runtime import RenderSession

__all__ = [
    "BundleParseError",
    "DeviceUnavailableError",
    "MarkerOrderError",
    "MissingMarkerError",
    "PipelineError",
    "PipelineSources",
    "ProgramLinkError",
    "RenderSession",
    "RenderSettings",
    "ShaderCompileError",
    "ShaderStage",
    "WindowSettings",
]
