# shadergen/runtime/session.py
from __future__ import annotations

import logging

from shadergen.config import RenderSettings
from shadergen.errors import (
    DeviceUnavailableError,
    PipelineSources,
    ProgramLinkError,
    ShaderCompileError,
)
from shadergen.geometry import GeometrySpec, geometry_from_name
from shadergen.graphics.device import GraphicsDevice
from shadergen.graphics.resources import (
    CompiledProgram,
    GraphicsResourceManager,
    ResourceState,
)
from shadergen.runtime.frame import FrameScheduler
from shadergen.shaders import repair_report, split

logger = logging.getLogger(__name__)


class RenderSession:
    """
    The one live render pipeline for a view.

    Owns the resource manager and the frame scheduler, and is the only
    entry point the caller layer talks to:

        session = RenderSession(device)
        session.start_render(bundle_text)   # raises PipelineError
        ...
        session.stop_render()

    Not reentrant: the caller must not start a new render from inside a
    frame callback or while another start_render call is running.
    """

    def __init__(
        self, device: GraphicsDevice, settings: RenderSettings | None = None
    ) -> None:
        self._device = device
        self._settings = settings or RenderSettings()

        self._resources = GraphicsResourceManager(device)
        self._scheduler = FrameScheduler(device, self._settings)
        self._sources: PipelineSources | None = None

    @property
    def status(self) -> ResourceState:
        return self._resources.state

    @property
    def program(self) -> CompiledProgram | None:
        return self._resources.program

    @property
    def geometry(self) -> GeometrySpec | None:
        program = self._resources.program
        return program.geometry if program else None

    @property
    def rendering(self) -> bool:
        return self._scheduler.running

    @property
    def sources(self) -> PipelineSources | None:
        """Raw and normalized text of the most recent start_render call."""
        return self._sources

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    def start_render(self, bundle: str) -> None:
        """
        Parse, repair, compile, link and bind `bundle`, then start drawing.

        A malformed bundle leaves the current pipeline untouched. Any later
        failure happens after the previous pipeline was torn down, and
        leaves no graphics handles alive.
        """
        if not self._device.is_available:
            raise DeviceUnavailableError("Graphics device is not available")

        self._sources = PipelineSources(raw=bundle)
        sections = split(bundle)

        report = repair_report(
            sections.fragment_source, self._settings.default_precision
        )
        if report.changed:
            logger.info(
                "Applied automatic shader fixes (precision %s, declarations: %s)",
                report.precision_action,
                ", ".join(report.declarations) or "none",
            )
            logger.debug(
                "Generated fragment shader:\n%s", sections.fragment_source
            )
            logger.debug("Fixed fragment shader:\n%s", report.source)

        self._sources = PipelineSources(
            raw=bundle,
            vertex=sections.vertex_source,
            fragment=sections.fragment_source,
            normalized_fragment=report.source,
        )

        # At most one program is live: the old one goes before the new
        # one allocates anything.
        self._teardown()

        geometry = geometry_from_name(sections.geometry_type)
        try:
            program = self._resources.build(
                sections.vertex_source, report.source, geometry
            )
        except (ShaderCompileError, ProgramLinkError) as e:
            e.sources = self._sources
            logger.warning(
                "Shader pipeline failed at %s stage: %s", e.stage_name, e
            )
            raise

        self._scheduler.start(program)

    def stop_render(self) -> None:
        """Cancel the frame callback and release every graphics handle."""
        self._teardown()

    def _teardown(self) -> None:
        self._scheduler.stop()
        self._resources.teardown()

