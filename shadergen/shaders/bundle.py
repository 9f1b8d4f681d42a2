# shadergen/shaders/bundle.py
from __future__ import annotations

import re
from dataclasses import dataclass

from shadergen.errors import MarkerOrderError, MissingMarkerError

VERTEX_MARKER = "// Vertex Shader"
FRAGMENT_MARKER = "// Fragment Shader"
DEFAULT_GEOMETRY = "cube"

_GEOMETRY_RE = re.compile(r"// GEOMETRY:\s*(\w+)")


@dataclass(frozen=True, slots=True)
class ShaderSections:
    geometry_type: str
    vertex_source: str
    fragment_source: str


def extract_geometry_type(text: str) -> str:
    """Return the lower-cased `// GEOMETRY:` tag, or the default."""
    match = _GEOMETRY_RE.search(text)
    return match.group(1).lower() if match else DEFAULT_GEOMETRY


def split(bundle: str) -> ShaderSections:
    """
    Split a generated bundle into its vertex and fragment sections.

    Section markers are matched literally (case-sensitive). The geometry
    tag is optional and may sit anywhere in the text.
    """
    vertex_start = bundle.find(VERTEX_MARKER)
    fragment_start = bundle.find(FRAGMENT_MARKER)

    missing = []
    if vertex_start == -1:
        missing.append(VERTEX_MARKER)
    if fragment_start == -1:
        missing.append(FRAGMENT_MARKER)
    if missing:
        raise MissingMarkerError(missing, raw_text=bundle)

    if fragment_start < vertex_start:
        raise MarkerOrderError(raw_text=bundle)

    vertex = bundle[vertex_start + len(VERTEX_MARKER) : fragment_start]
    fragment = bundle[fragment_start + len(FRAGMENT_MARKER) :]

    return ShaderSections(
        geometry_type=extract_geometry_type(bundle),
        vertex_source=vertex.strip(),
        fragment_source=fragment.strip(),
    )
