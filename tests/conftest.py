import re
from typing import Any, Dict, List, Set, Tuple

import pytest

from shadergen.errors import ShaderStage
from shadergen.graphics.device import (
    ABSENT_LOCATION,
    FrameCallback,
    FrameCallbacks,
    GraphicsDevice,
)
from shadergen.runtime import RenderSession

CUBE_BUNDLE = """Here is your shader:

// Vertex Shader
attribute vec3 position;
attribute vec3 normal;
uniform mat4 modelMatrix;
uniform mat4 viewMatrix;
uniform mat4 projectionMatrix;
varying vec3 vColor;

void main() {
    vColor = normal * 0.5 + 0.5;
    gl_Position = projectionMatrix * viewMatrix * modelMatrix * vec4(position, 1.0);
}

// Fragment Shader
precision mediump float;
varying vec3 vColor;

void main() {
    gl_FragColor = vec4(vColor, 1.0);
}

// GEOMETRY: cube
"""

TORUS_BUNDLE = """// Vertex Shader
attribute vec3 position;
attribute vec3 normal;
uniform mat4 modelMatrix;
uniform mat4 viewMatrix;
uniform mat4 projectionMatrix;
varying vec3 vNormal;

void main() {
    vNormal = normal;
    gl_Position = projectionMatrix * viewMatrix * modelMatrix * vec4(position, 1.0);
}

// Fragment Shader
void main() {
    float pulse = 0.5 + 0.5 * sin(time * 2.0);
    gl_FragColor = vec4(abs(vNormal) * pulse, 1.0);
}
// GEOMETRY: Torus
"""


class RecordingDevice(GraphicsDevice):
    """
    In-memory GraphicsDevice that records every call.

    Compilation fails for stages listed in `fail_compile` or sources that
    contain "#error"; linking fails when `fail_link` is set. Attributes and
    uniforms resolve when their name appears as a word in an attached
    stage's source.
    """

    def __init__(self) -> None:
        self.available = True
        self.fail_compile: Set[ShaderStage] = set()
        self.fail_link = False

        self.events: List[Tuple[str, str, int]] = []
        self.live: Dict[int, str] = {}
        self.errors: List[str] = []

        self.draws: List[Tuple[int, int]] = []
        self.uniforms: Dict[int, Dict[str, Any]] = {}
        self.bindings: Dict[int, Dict[int, int]] = {}
        self.clears: List[Tuple[float, float, float, float]] = []
        self.viewport = (400, 300)
        self.time = 100.0

        self._stages: Dict[int, ShaderStage] = {}
        self._sources: Dict[int, str] = {}
        self._compiled: Dict[int, bool] = {}
        self._attached: Dict[int, List[int]] = {}
        self._linked: Dict[int, bool] = {}
        self._locations: Dict[int, Dict[str, int]] = {}
        self._uploads: Dict[int, int] = {}
        self._frames = FrameCallbacks()
        self._next = 1

    # -- bookkeeping --
    def _create(self, kind: str) -> int:
        handle = self._next
        self._next += 1
        self.live[handle] = kind
        self.events.append(("create", kind, handle))
        return handle

    def _delete(self, kind: str, handle: int) -> None:
        if self.live.get(handle) != kind:
            self.errors.append(f"delete of dead {kind} {handle}")
            return
        del self.live[handle]
        self.events.append(("delete", kind, handle))

    def _check(self, kind: str, handle: int) -> None:
        if self.live.get(handle) != kind:
            self.errors.append(f"use of dead {kind} {handle}")

    def live_count(self, kind: str | None = None) -> int:
        return sum(1 for k in self.live.values() if kind is None or k == kind)

    def handle_count(self) -> int:
        return len(self.live)

    # -- GraphicsDevice --
    @property
    def is_available(self) -> bool:
        return self.available

    def create_shader(self, stage: ShaderStage) -> int:
        handle = self._create("shader")
        self._stages[handle] = stage
        return handle

    def compile_shader(self, shader: int, source: str) -> None:
        self._check("shader", shader)
        self._sources[shader] = source
        stage = self._stages[shader]
        self._compiled[shader] = (
            stage not in self.fail_compile and "#error" not in source
        )

    def shader_compiled(self, shader: int) -> bool:
        return self._compiled[shader]

    def shader_info_log(self, shader: int) -> str:
        if self._compiled[shader]:
            return ""
        return f"ERROR: 0:1: '{self._stages[shader]}' : syntax error"

    def delete_shader(self, shader: int) -> None:
        self._delete("shader", shader)

    def create_program(self) -> int:
        handle = self._create("program")
        self._attached[handle] = []
        self._locations[handle] = {}
        return handle

    def attach_shader(self, program: int, shader: int) -> None:
        self._check("program", program)
        self._check("shader", shader)
        self._attached[program].append(shader)

    def link_program(self, program: int) -> None:
        self._check("program", program)
        self._linked[program] = not self.fail_link

    def program_linked(self, program: int) -> bool:
        return self._linked[program]

    def program_info_log(self, program: int) -> str:
        return "" if self._linked[program] else "ERROR: varying mismatch"

    def delete_program(self, program: int) -> None:
        self._delete("program", program)

    def use_program(self, program: int) -> None:
        self._check("program", program)

    def create_buffer(self) -> int:
        return self._create("buffer")

    def upload_buffer(self, buffer: int, data: bytes) -> None:
        self._check("buffer", buffer)
        self._uploads[buffer] = len(data)

    def delete_buffer(self, buffer: int) -> None:
        self._delete("buffer", buffer)

    def uploaded_bytes(self, buffer: int) -> int:
        return self._uploads[buffer]

    def _lookup(self, program: int, name: str, stages: Tuple[ShaderStage, ...]) -> int:
        self._check("program", program)
        pattern = re.compile(rf"\b{re.escape(name)}\b")
        for shader in self._attached[program]:
            if self._stages[shader] in stages and pattern.search(
                self._sources.get(shader, "")
            ):
                locations = self._locations[program]
                return locations.setdefault(name, len(locations))
        return ABSENT_LOCATION

    def attribute_location(self, program: int, name: str) -> int:
        return self._lookup(program, name, (ShaderStage.VERTEX,))

    def bind_attribute(
        self, program: int, location: int, buffer: int, components: int = 3
    ) -> None:
        self._check("program", program)
        self._check("buffer", buffer)
        self.bindings.setdefault(program, {})[location] = buffer

    def uniform_location(self, program: int, name: str) -> int:
        return self._lookup(
            program, name, (ShaderStage.VERTEX, ShaderStage.FRAGMENT)
        )

    def set_uniform(self, program: int, location: int, value: Any) -> None:
        self._check("program", program)
        names = {v: k for k, v in self._locations[program].items()}
        if location not in names:
            self.errors.append(f"set of unknown uniform location {location}")
            return
        self.uniforms.setdefault(program, {})[names[location]] = value

    @property
    def viewport_size(self) -> Tuple[int, int]:
        return self.viewport

    def set_viewport(self, width: int, height: int) -> None:
        self.viewport = (width, height)

    def clear(self, color: Tuple[float, float, float, float]) -> None:
        self.clears.append(color)

    def enable_depth_test(self) -> None:
        pass

    def draw_triangles(self, program: int, vertex_count: int) -> None:
        self._check("program", program)
        self.draws.append((program, vertex_count))

    def request_frame(self, callback: FrameCallback) -> int:
        return self._frames.register(callback)

    def cancel_frame(self, token: int) -> None:
        self._frames.cancel(token)

    def dispatch_frame(self) -> int:
        return self._frames.dispatch()

    @property
    def frame_callback_count(self) -> int:
        return len(self._frames)

    def now(self) -> float:
        return self.time


@pytest.fixture
def device():
    """Returns a fresh RecordingDevice for each test."""
    return RecordingDevice()


@pytest.fixture
def session(device):
    return RenderSession(device)
