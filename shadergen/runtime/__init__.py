from shadergen.runtime.frame import (
    FrameMatrices,
    FrameScheduler,
    FrameState,
    compute_matrices,
)
from shadergen.runtime.session import RenderSession

__all__ = [
    "FrameMatrices",
    "FrameScheduler",
    "FrameState",
    "RenderSession",
    "compute_matrices",
]
