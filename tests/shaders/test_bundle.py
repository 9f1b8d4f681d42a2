import pytest

from shadergen.errors import BundleParseError, MarkerOrderError, MissingMarkerError
from shadergen.shaders import (
    FRAGMENT_MARKER,
    VERTEX_MARKER,
    extract_geometry_type,
    split,
)
from tests.conftest import CUBE_BUNDLE, TORUS_BUNDLE


def test_split_separates_vertex_and_fragment():
    sections = split(CUBE_BUNDLE)

    assert sections.geometry_type == "cube"
    assert sections.vertex_source.startswith("attribute vec3 position;")
    assert sections.vertex_source.endswith("}")
    assert "gl_Position" in sections.vertex_source
    assert "gl_FragColor" not in sections.vertex_source

    assert sections.fragment_source.startswith("precision mediump float;")
    assert "gl_FragColor" in sections.fragment_source
    assert "gl_Position" not in sections.fragment_source


def test_text_before_vertex_marker_is_dropped():
    sections = split(CUBE_BUNDLE)
    assert "Here is your shader" not in sections.vertex_source


def test_geometry_tag_is_lower_cased():
    assert split(TORUS_BUNDLE).geometry_type == "torus"


def test_geometry_tag_may_precede_the_shaders():
    bundle = f"// GEOMETRY: sphere\n{VERTEX_MARKER}\nvoid main() {{}}\n{FRAGMENT_MARKER}\nvoid main() {{}}"
    assert split(bundle).geometry_type == "sphere"


def test_missing_geometry_tag_defaults_to_cube():
    bundle = f"{VERTEX_MARKER}\nvoid main() {{}}\n{FRAGMENT_MARKER}\nvoid main() {{}}"
    sections = split(bundle)

    assert sections.geometry_type == "cube"
    assert sections.vertex_source == "void main() {}"
    assert sections.fragment_source == "void main() {}"


def test_extract_geometry_type_tolerates_missing_space():
    assert extract_geometry_type("// GEOMETRY:Plane") == "plane"
    assert extract_geometry_type("no tag here") == "cube"


@pytest.mark.parametrize(
    "bundle, missing",
    [
        ("void main() {}", (VERTEX_MARKER, FRAGMENT_MARKER)),
        (f"{VERTEX_MARKER}\nvoid main() {{}}", (FRAGMENT_MARKER,)),
        (f"{FRAGMENT_MARKER}\nvoid main() {{}}", (VERTEX_MARKER,)),
    ],
)
def test_missing_markers_are_reported(bundle, missing):
    with pytest.raises(MissingMarkerError) as exc:
        split(bundle)

    assert exc.value.missing == missing
    assert exc.value.raw_text == bundle
    assert exc.value.stage_name == "parse"


def test_markers_are_case_sensitive():
    bundle = "// vertex shader\nvoid main() {}\n// fragment shader\nvoid main() {}"
    with pytest.raises(MissingMarkerError):
        split(bundle)


def test_reversed_markers_raise_order_error():
    bundle = f"{FRAGMENT_MARKER}\nvoid main() {{}}\n{VERTEX_MARKER}\nvoid main() {{}}"

    with pytest.raises(MarkerOrderError) as exc:
        split(bundle)

    assert isinstance(exc.value, BundleParseError)
    assert exc.value.raw_text == bundle
