# shadergen/graphics/device.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Tuple

from shadergen.errors import ShaderStage

# Returned by attribute/uniform lookups when the linked program does not
# expose the name (not declared, or optimized out).
ABSENT_LOCATION = -1

FrameCallback = Callable[[], None]


class FrameCallbacks:
    """
    Recurring per-frame callback table.

    The host calls `dispatch()` once per display refresh; every registered
    callback runs until it is cancelled.
    """

    def __init__(self) -> None:
        self._callbacks: Dict[int, FrameCallback] = {}
        self._next_token = 1

    def register(self, callback: FrameCallback) -> int:
        token = self._next_token
        self._next_token += 1
        self._callbacks[token] = callback
        return token

    def cancel(self, token: int) -> None:
        self._callbacks.pop(token, None)

    def dispatch(self) -> int:
        """Run every live callback once. Returns how many ran."""
        ran = 0
        # Snapshot: a callback may cancel itself or register another.
        for token, callback in list(self._callbacks.items()):
            if token in self._callbacks:
                callback()
                ran += 1
        return ran

    def __len__(self) -> int:
        return len(self._callbacks)


class GraphicsDevice(ABC):
    """
    The graphics and scheduling surface the render core consumes.

    Handles are opaque integers. Every create_* call must be paired with
    the matching delete_* call by the owner of the handle.
    """

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """False when the host cannot provide a usable graphics context."""

    # -- Shader stages --
    @abstractmethod
    def create_shader(self, stage: ShaderStage) -> int: ...

    @abstractmethod
    def compile_shader(self, shader: int, source: str) -> None: ...

    @abstractmethod
    def shader_compiled(self, shader: int) -> bool: ...

    @abstractmethod
    def shader_info_log(self, shader: int) -> str: ...

    @abstractmethod
    def delete_shader(self, shader: int) -> None: ...

    # -- Programs --
    @abstractmethod
    def create_program(self) -> int: ...

    @abstractmethod
    def attach_shader(self, program: int, shader: int) -> None: ...

    @abstractmethod
    def link_program(self, program: int) -> None: ...

    @abstractmethod
    def program_linked(self, program: int) -> bool: ...

    @abstractmethod
    def program_info_log(self, program: int) -> str: ...

    @abstractmethod
    def delete_program(self, program: int) -> None: ...

    @abstractmethod
    def use_program(self, program: int) -> None: ...

    # -- Buffers and attributes --
    @abstractmethod
    def create_buffer(self) -> int: ...

    @abstractmethod
    def upload_buffer(self, buffer: int, data: bytes) -> None: ...

    @abstractmethod
    def delete_buffer(self, buffer: int) -> None: ...

    @abstractmethod
    def attribute_location(self, program: int, name: str) -> int: ...

    @abstractmethod
    def bind_attribute(
        self, program: int, location: int, buffer: int, components: int = 3
    ) -> None: ...

    # -- Uniforms --
    @abstractmethod
    def uniform_location(self, program: int, name: str) -> int: ...

    @abstractmethod
    def set_uniform(self, program: int, location: int, value: Any) -> None:
        """
        `value` is a float, a tuple of floats, or a 4x4 row-major numpy
        matrix (the device handles the transpose for upload).
        """

    # -- Drawing --
    @property
    @abstractmethod
    def viewport_size(self) -> Tuple[int, int]: ...

    @abstractmethod
    def set_viewport(self, width: int, height: int) -> None: ...

    @abstractmethod
    def clear(self, color: Tuple[float, float, float, float]) -> None: ...

    @abstractmethod
    def enable_depth_test(self) -> None: ...

    @abstractmethod
    def draw_triangles(self, program: int, vertex_count: int) -> None: ...

    # -- Scheduling --
    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Register a recurring frame callback. Returns a cancel token."""

    @abstractmethod
    def cancel_frame(self, token: int) -> None: ...

    @abstractmethod
    def dispatch_frame(self) -> int:
        """Called by the host once per display frame."""

    @abstractmethod
    def now(self) -> float:
        """Monotonic clock in seconds."""
