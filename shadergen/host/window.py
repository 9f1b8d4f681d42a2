# shadergen/host/window.py
from __future__ import annotations

import logging
from typing import Callable, Dict

import moderngl
import pygame

from shadergen.config import RenderSettings, WindowSettings
from shadergen.errors import DeviceUnavailableError
from shadergen.graphics.moderngl_device import ModernGLDevice

logger = logging.getLogger(__name__)


class Window:
    """
    Manages the OS Window and OpenGL Context, and plays the part of the
    display-refresh host: every loop iteration dispatches the device's
    frame callbacks once.
    """

    def __init__(
        self,
        settings: WindowSettings | None = None,
        render_settings: RenderSettings | None = None,
    ) -> None:
        self.settings = settings or WindowSettings()
        render_settings = render_settings or RenderSettings()
        size = (self.settings.width, self.settings.height)

        try:
            if not pygame.get_init():
                pygame.init()

            # No profile mask: generated sources rely on the compatibility
            # profile (attribute/varying/gl_FragColor).
            pygame.display.gl_set_attribute(pygame.GL_DEPTH_SIZE, 24)
            pygame.display.gl_set_attribute(pygame.GL_DOUBLEBUFFER, 1)

            self._screen = pygame.display.set_mode(
                size,
                pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE,
                vsync=1 if self.settings.vsync else 0,
            )
            pygame.display.set_caption(self.settings.title)

            ctx = moderngl.create_context()
        except Exception as e:
            pygame.quit()
            raise DeviceUnavailableError(
                f"Could not create an OpenGL window: {e}"
            ) from e

        version = ctx.version_code
        logger.info(
            "OpenGL Context Created: %s.%s", str(version)[0], str(version)[1:]
        )

        self.device = ModernGLDevice(
            ctx, glsl_version=render_settings.glsl_version, viewport=size
        )
        self._clock = pygame.time.Clock()
        self._key_handlers: Dict[int, Callable[[], None]] = {}
        self.running = False

    def on_key(self, key: int, handler: Callable[[], None]) -> None:
        self._key_handlers[key] = handler

    def run(self) -> None:
        self.running = True

        while self.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE:
                    self.device.set_viewport(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        self.running = False
                    handler = self._key_handlers.get(event.key)
                    if handler is not None:
                        handler()

            # Nothing registered (e.g. after a failed start): keep showing
            # the last presented frame.
            if self.device.dispatch_frame():
                pygame.display.flip()

            self._clock.tick(self.settings.target_fps)

    def destroy(self) -> None:
        self.device.release()
        pygame.quit()
