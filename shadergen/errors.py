# shadergen/errors.py
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Sequence


class ShaderStage(StrEnum):
    VERTEX = "vertex"
    FRAGMENT = "fragment"


@dataclass(frozen=True, slots=True)
class PipelineSources:
    """Text retained for display after a failed or successful start."""

    raw: str
    vertex: str = ""
    fragment: str = ""
    normalized_fragment: str = ""


class PipelineError(Exception):
    """Base class for every failure surfaced by RenderSession.start_render."""

    stage_name = "pipeline"


class BundleParseError(PipelineError):
    """
    The bundle text is malformed. No repair is attempted and the raw text
    is kept intact so the caller can show it.
    """

    stage_name = "parse"

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class MissingMarkerError(BundleParseError):
    def __init__(self, missing: Sequence[str], raw_text: str) -> None:
        self.missing = tuple(missing)
        names = ", ".join(repr(m) for m in self.missing)
        super().__init__(f"Could not find shader marker(s): {names}", raw_text)


class MarkerOrderError(BundleParseError):
    def __init__(self, raw_text: str) -> None:
        super().__init__(
            "Vertex shader marker must come before the fragment shader marker",
            raw_text,
        )


class ShaderCompileError(PipelineError):
    stage_name = "compile"

    def __init__(
        self,
        stage: ShaderStage,
        diagnostic: str,
        sources: PipelineSources | None = None,
    ) -> None:
        super().__init__(f"{stage} shader compilation failed: {diagnostic}")
        self.stage = stage
        self.diagnostic = diagnostic
        self.sources = sources


class ProgramLinkError(PipelineError):
    stage_name = "link"

    def __init__(
        self, diagnostic: str, sources: PipelineSources | None = None
    ) -> None:
        super().__init__(f"Program linking failed: {diagnostic}")
        self.diagnostic = diagnostic
        self.sources = sources


class DeviceUnavailableError(PipelineError):
    """The host has no usable graphics context. Fatal for the session."""

    stage_name = "device"
