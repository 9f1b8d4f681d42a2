# shadergen/graphics/resources.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Tuple

from shadergen.errors import ProgramLinkError, ShaderCompileError, ShaderStage
from shadergen.geometry import GeometrySpec, generate
from shadergen.graphics.device import ABSENT_LOCATION, GraphicsDevice

logger = logging.getLogger(__name__)

POSITION_ATTRIBUTE = "position"
NORMAL_ATTRIBUTE = "normal"


class ResourceState(Enum):
    EMPTY = auto()
    COMPILING = auto()
    LINKED = auto()
    BOUND = auto()
    ACTIVE = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class CompiledProgram:
    """
    Live graphics objects for one generated shader pair and its mesh.

    Only ever handed out in the ACTIVE state; the owning
    GraphicsResourceManager releases every handle on teardown.
    """

    vertex_shader: int
    fragment_shader: int
    program: int
    position_buffer: int
    normal_buffer: int
    geometry: GeometrySpec
    vertex_count: int
    position_location: int = ABSENT_LOCATION
    normal_location: int = ABSENT_LOCATION


class GraphicsResourceManager:
    """
    Compiles, links and binds a generated program against a device.

    States: EMPTY -> COMPILING -> LINKED -> BOUND -> (ACTIVE | FAILED).
    Every handle is recorded in acquisition order so any failure, or an
    explicit teardown(), releases them newest first.
    """

    def __init__(self, device: GraphicsDevice) -> None:
        self._device = device
        self._state = ResourceState.EMPTY
        self._owned: List[Tuple[int, Callable[[int], None]]] = []
        self._program: CompiledProgram | None = None

    @property
    def state(self) -> ResourceState:
        return self._state

    @property
    def program(self) -> CompiledProgram | None:
        return self._program

    @property
    def owned_handle_count(self) -> int:
        return len(self._owned)

    def build(
        self, vertex_source: str, fragment_source: str, geometry: GeometrySpec
    ) -> CompiledProgram:
        """
        Run the full pipeline and return the ACTIVE program.

        Raises ShaderCompileError or ProgramLinkError; in both cases every
        handle created by this call is released before the raise.
        """
        if self._state is not ResourceState.EMPTY:
            self.teardown()

        try:
            self._state = ResourceState.COMPILING
            vs = self._compile(ShaderStage.VERTEX, vertex_source)
            fs = self._compile(ShaderStage.FRAGMENT, fragment_source)

            program = self._link(vs, fs)
            self._state = ResourceState.LINKED

            compiled = self._bind(vs, fs, program, geometry)
            self._state = ResourceState.BOUND
        except Exception:
            self._release_owned()
            self._state = ResourceState.FAILED
            raise

        self._program = compiled
        self._state = ResourceState.ACTIVE
        logger.info(
            "Program active: %s, %d vertices",
            type(geometry).__name__,
            compiled.vertex_count,
        )
        return compiled

    def teardown(self) -> None:
        """Release every owned handle. Safe from any state."""
        if self._owned:
            logger.debug("Releasing %d graphics handles", len(self._owned))
        self._release_owned()
        self._program = None
        self._state = ResourceState.EMPTY

    def _acquire(self, handle: int, release: Callable[[int], None]) -> int:
        self._owned.append((handle, release))
        return handle

    def _release_owned(self) -> None:
        while self._owned:
            handle, release = self._owned.pop()
            release(handle)

    def _compile(self, stage: ShaderStage, source: str) -> int:
        device = self._device
        shader = self._acquire(device.create_shader(stage), device.delete_shader)
        device.compile_shader(shader, source)

        if not device.shader_compiled(shader):
            raise ShaderCompileError(stage, device.shader_info_log(shader))
        return shader

    def _link(self, vertex_shader: int, fragment_shader: int) -> int:
        device = self._device
        program = self._acquire(device.create_program(), device.delete_program)
        device.attach_shader(program, vertex_shader)
        device.attach_shader(program, fragment_shader)
        device.link_program(program)

        if not device.program_linked(program):
            raise ProgramLinkError(device.program_info_log(program))
        return program

    def _bind(
        self,
        vertex_shader: int,
        fragment_shader: int,
        program: int,
        geometry: GeometrySpec,
    ) -> CompiledProgram:
        device = self._device
        buffers = generate(geometry)

        position_buffer = self._acquire(device.create_buffer(), device.delete_buffer)
        device.upload_buffer(position_buffer, buffers.vertices.tobytes())

        normal_buffer = self._acquire(device.create_buffer(), device.delete_buffer)
        device.upload_buffer(normal_buffer, buffers.normals.tobytes())

        # Generated shaders may leave either attribute out.
        position_location = device.attribute_location(
            program, POSITION_ATTRIBUTE
        )
        if position_location != ABSENT_LOCATION:
            device.bind_attribute(program, position_location, position_buffer)

        normal_location = device.attribute_location(program, NORMAL_ATTRIBUTE)
        if normal_location != ABSENT_LOCATION:
            device.bind_attribute(program, normal_location, normal_buffer)

        return CompiledProgram(
            vertex_shader=vertex_shader,
            fragment_shader=fragment_shader,
            program=program,
            position_buffer=position_buffer,
            normal_buffer=normal_buffer,
            geometry=geometry,
            vertex_count=buffers.vertex_count,
            position_location=position_location,
            normal_location=normal_location,
        )
