# shadergen/graphics/moderngl_device.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import moderngl
import numpy as np

from shadergen.errors import DeviceUnavailableError, ShaderStage
from shadergen.graphics.device import (
    ABSENT_LOCATION,
    FrameCallback,
    FrameCallbacks,
    GraphicsDevice,
)

logger = logging.getLogger(__name__)

# moderngl prefixes shader compile errors with this.
_COMPILER_FAILED = "GLSL Compiler failed"

_PROBE_VERTEX = "void main() { gl_Position = vec4(0.0); }"

_ATTRIBUTE_FORMATS = {1: "f", 2: "2f", 3: "3f", 4: "4f"}


@dataclass(slots=True)
class _ShaderRecord:
    stage: ShaderStage
    source: str = ""
    compiled: bool = False
    info_log: str = ""


@dataclass(slots=True)
class _ProgramRecord:
    shaders: List[int] = field(default_factory=list)
    program: Optional[moderngl.Program] = None
    linked: bool = False
    info_log: str = ""
    attributes: Dict[int, moderngl.Attribute] = field(default_factory=dict)
    uniforms: Dict[int, moderngl.Uniform] = field(default_factory=dict)
    bindings: Dict[int, Tuple[int, str]] = field(default_factory=dict)
    vao: Optional[moderngl.VertexArray] = None


class ModernGLDevice(GraphicsDevice):
    """
    GraphicsDevice on top of a moderngl.Context.

    moderngl compiles and links a program in one call. Stage compilation is
    therefore checked with a throwaway program per stage; only compiler
    errors count there, and the real program is built by link_program().
    """

    def __init__(
        self,
        ctx: moderngl.Context,
        *,
        glsl_version: Optional[int] = 130,
        viewport: Optional[Tuple[int, int]] = None,
    ) -> None:
        self._ctx: Optional[moderngl.Context] = ctx
        self._glsl_version = glsl_version
        self._viewport = viewport or tuple(ctx.screen.size)

        self._shaders: Dict[int, _ShaderRecord] = {}
        self._programs: Dict[int, _ProgramRecord] = {}
        self._buffers: Dict[int, Optional[moderngl.Buffer]] = {}
        self._next_handle = 1

        self._frames = FrameCallbacks()

    @classmethod
    def create_standalone(
        cls, size: Tuple[int, int] = (400, 400), **kwargs: Any
    ) -> ModernGLDevice:
        """Headless device rendering into an offscreen framebuffer."""
        try:
            ctx = moderngl.create_standalone_context()
        except Exception as e:
            raise DeviceUnavailableError(
                f"No OpenGL context available: {e}"
            ) from e

        fbo = ctx.simple_framebuffer(size)
        fbo.use()
        return cls(ctx, viewport=size, **kwargs)

    @property
    def ctx(self) -> moderngl.Context:
        if self._ctx is None:
            raise DeviceUnavailableError("Graphics context has been released")
        return self._ctx

    @property
    def is_available(self) -> bool:
        return self._ctx is not None

    def release(self) -> None:
        for handle in list(self._programs):
            self.delete_program(handle)
        for handle in list(self._buffers):
            self.delete_buffer(handle)
        self._shaders.clear()
        self._ctx = None

    def _new_handle(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    def _with_version(self, source: str) -> str:
        if self._glsl_version is None:
            return source
        if source.lstrip().startswith("#version"):
            return source
        return f"#version {self._glsl_version}\n{source}"

    def _probe_vertex(self, fragment_source: str) -> str:
        # The probe must share the fragment's GLSL version to link at all.
        first_line = fragment_source.lstrip().partition("\n")[0]
        if first_line.startswith("#version"):
            return f"{first_line}\n{_PROBE_VERTEX}"
        return self._with_version(_PROBE_VERTEX)

    # -- Shader stages --
    def create_shader(self, stage: ShaderStage) -> int:
        handle = self._new_handle()
        self._shaders[handle] = _ShaderRecord(stage=stage)
        return handle

    def compile_shader(self, shader: int, source: str) -> None:
        record = self._shaders[shader]
        record.source = self._with_version(source)

        if record.stage == ShaderStage.VERTEX:
            stages = {"vertex_shader": record.source}
        else:
            stages = {
                "vertex_shader": self._probe_vertex(record.source),
                "fragment_shader": record.source,
            }

        try:
            probe = self.ctx.program(**stages)
        except moderngl.Error as e:
            message = str(e)
            if _COMPILER_FAILED in message:
                record.compiled = False
                record.info_log = message
                return
            # Link-only problems against the probe are left to link_program().
            logger.debug(
                "Ignoring probe link error for %s stage: %s",
                record.stage,
                message,
            )
        else:
            probe.release()

        record.compiled = True
        record.info_log = ""

    def shader_compiled(self, shader: int) -> bool:
        return self._shaders[shader].compiled

    def shader_info_log(self, shader: int) -> str:
        return self._shaders[shader].info_log

    def delete_shader(self, shader: int) -> None:
        self._shaders.pop(shader, None)

    # -- Programs --
    def create_program(self) -> int:
        handle = self._new_handle()
        self._programs[handle] = _ProgramRecord()
        return handle

    def attach_shader(self, program: int, shader: int) -> None:
        self._programs[program].shaders.append(shader)

    def link_program(self, program: int) -> None:
        record = self._programs[program]
        sources = {
            self._shaders[s].stage: self._shaders[s].source
            for s in record.shaders
        }

        try:
            record.program = self.ctx.program(
                vertex_shader=sources[ShaderStage.VERTEX],
                fragment_shader=sources[ShaderStage.FRAGMENT],
            )
        except (moderngl.Error, KeyError) as e:
            record.linked = False
            record.info_log = str(e)
            return

        record.linked = True
        record.info_log = ""

    def program_linked(self, program: int) -> bool:
        return self._programs[program].linked

    def program_info_log(self, program: int) -> str:
        return self._programs[program].info_log

    def delete_program(self, program: int) -> None:
        record = self._programs.pop(program, None)
        if record is None:
            return
        if record.vao is not None:
            record.vao.release()
        if record.program is not None:
            record.program.release()

    def use_program(self, program: int) -> None:
        # moderngl binds the program per draw call.
        if program not in self._programs:
            raise KeyError(f"Unknown program handle {program}")

    def _member(self, program: int, name: str, kind: type) -> Any:
        prog = self._programs[program].program
        if prog is None or name not in prog:
            return None
        member = prog[name]
        return member if isinstance(member, kind) else None

    # -- Buffers and attributes --
    def create_buffer(self) -> int:
        handle = self._new_handle()
        self._buffers[handle] = None
        return handle

    def upload_buffer(self, buffer: int, data: bytes) -> None:
        previous = self._buffers[buffer]
        if previous is not None:
            previous.release()
        self._buffers[buffer] = self.ctx.buffer(data)

    def delete_buffer(self, buffer: int) -> None:
        handle = self._buffers.pop(buffer, None)
        if handle is not None:
            handle.release()

    def attribute_location(self, program: int, name: str) -> int:
        member = self._member(program, name, moderngl.Attribute)
        if member is None:
            return ABSENT_LOCATION
        self._programs[program].attributes[member.location] = member
        return member.location

    def bind_attribute(
        self, program: int, location: int, buffer: int, components: int = 3
    ) -> None:
        if location == ABSENT_LOCATION:
            return
        record = self._programs[program]
        record.bindings[location] = (buffer, _ATTRIBUTE_FORMATS[components])

        # Rebuilt lazily on the next draw.
        if record.vao is not None:
            record.vao.release()
            record.vao = None

    def _vertex_array(self, program: int) -> moderngl.VertexArray:
        record = self._programs[program]
        if record.vao is not None:
            return record.vao

        assert record.program is not None
        content = []
        for location, (buffer, fmt) in sorted(record.bindings.items()):
            vbo = self._buffers[buffer]
            if vbo is None:
                raise RuntimeError(f"Buffer {buffer} bound before upload")
            content.append((vbo, fmt, record.attributes[location].name))

        record.vao = self.ctx.vertex_array(record.program, content)
        return record.vao

    # -- Uniforms --
    def uniform_location(self, program: int, name: str) -> int:
        member = self._member(program, name, moderngl.Uniform)
        if member is None:
            return ABSENT_LOCATION
        self._programs[program].uniforms[member.location] = member
        return member.location

    def set_uniform(self, program: int, location: int, value: Any) -> None:
        if location == ABSENT_LOCATION:
            return

        member = self._programs[program].uniforms[location]
        if isinstance(value, np.ndarray):
            # numpy is row-major, GLSL expects column-major.
            member.write(value.astype(np.float32).T.tobytes())
        else:
            member.value = value

    # -- Drawing --
    @property
    def viewport_size(self) -> Tuple[int, int]:
        return self._viewport

    def set_viewport(self, width: int, height: int) -> None:
        self._viewport = (width, height)
        self.ctx.viewport = (0, 0, width, height)

    def clear(self, color: Tuple[float, float, float, float]) -> None:
        self.ctx.clear(*color)

    def enable_depth_test(self) -> None:
        self.ctx.enable(moderngl.DEPTH_TEST)

    def draw_triangles(self, program: int, vertex_count: int) -> None:
        vao = self._vertex_array(program)
        vao.render(mode=moderngl.TRIANGLES, vertices=vertex_count)

    # -- Scheduling --
    def request_frame(self, callback: FrameCallback) -> int:
        return self._frames.register(callback)

    def cancel_frame(self, token: int) -> None:
        self._frames.cancel(token)

    def dispatch_frame(self) -> int:
        return self._frames.dispatch()

    def now(self) -> float:
        return time.perf_counter()
