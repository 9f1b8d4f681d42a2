from shadergen.graphics.device import (
    ABSENT_LOCATION,
    FrameCallbacks,
    GraphicsDevice,
)
from shadergen.graphics.resources import (
    CompiledProgram,
    GraphicsResourceManager,
    ResourceState,
)

__all__ = [
    "ABSENT_LOCATION",
    "CompiledProgram",
    "FrameCallbacks",
    "GraphicsDevice",
    "GraphicsResourceManager",
    "ResourceState",
]
