# shadergen/runtime/frame.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from shadergen.config import RenderSettings
from shadergen.graphics.device import ABSENT_LOCATION, GraphicsDevice
from shadergen.graphics.resources import CompiledProgram
from shadergen.math import (
    create_perspective_projection,
    create_rotation_y,
    create_translation,
)

TIME_UNIFORM = "time"
RESOLUTION_UNIFORM = "resolution"
MODEL_UNIFORM = "modelMatrix"
VIEW_UNIFORM = "viewMatrix"
PROJECTION_UNIFORM = "projectionMatrix"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FrameState:
    start_time: float
    elapsed: float = 0.0
    frame_count: int = 0

    def advance(self, now: float) -> float:
        # Clamp so a non-monotonic clock can never run time backwards.
        self.elapsed = max(self.elapsed, now - self.start_time)
        self.frame_count += 1
        return self.elapsed


@dataclass(frozen=True, slots=True)
class FrameMatrices:
    model: np.ndarray
    view: np.ndarray
    projection: np.ndarray


def compute_matrices(
    elapsed: float, aspect: float, settings: RenderSettings
) -> FrameMatrices:
    return FrameMatrices(
        model=create_rotation_y(elapsed),
        view=create_translation(0.0, 0.0, -settings.camera_distance),
        projection=create_perspective_projection(
            settings.fov_degrees, aspect, settings.near, settings.far
        ),
    )


class FrameScheduler:
    """
    Drives the per-frame update for one active program.

    Holds no timer: the device calls back once per display frame while the
    registration is live.
    """

    def __init__(
        self, device: GraphicsDevice, settings: RenderSettings | None = None
    ) -> None:
        self._device = device
        self._settings = settings or RenderSettings()

        self._program: CompiledProgram | None = None
        self._state: FrameState | None = None
        self._token: int | None = None

    @property
    def running(self) -> bool:
        return self._token is not None

    @property
    def state(self) -> FrameState | None:
        return self._state

    def start(self, program: CompiledProgram) -> None:
        self.stop()

        self._program = program
        self._state = FrameState(start_time=self._device.now())
        self._token = self._device.request_frame(self.render_frame)

    def stop(self) -> None:
        """Cancel the frame callback. Idempotent."""
        if self._token is not None:
            self._device.cancel_frame(self._token)
            self._token = None
            if self._state is not None:
                logger.debug(
                    "Frame callback cancelled after %d frames (%.2fs)",
                    self._state.frame_count,
                    self._state.elapsed,
                )
        self._program = None
        self._state = None

    def render_frame(self) -> None:
        program = self._program
        state = self._state
        if program is None or state is None:
            return

        device = self._device
        settings = self._settings

        elapsed = state.advance(device.now())
        width, height = device.viewport_size
        aspect = width / height if height else 1.0
        matrices = compute_matrices(elapsed, aspect, settings)

        device.set_viewport(width, height)
        device.clear(settings.clear_color)
        device.enable_depth_test()
        device.use_program(program.program)

        uniforms = (
            (TIME_UNIFORM, float(elapsed)),
            (RESOLUTION_UNIFORM, (float(width), float(height))),
            (MODEL_UNIFORM, matrices.model),
            (VIEW_UNIFORM, matrices.view),
            (PROJECTION_UNIFORM, matrices.projection),
        )
        for name, value in uniforms:
            # Minimal generated shaders may ignore any of these.
            location = device.uniform_location(program.program, name)
            if location == ABSENT_LOCATION:
                continue
            device.set_uniform(program.program, location, value)

        device.draw_triangles(program.program, program.vertex_count)
