# shadergen/shaders/normalize.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_PRECISION_RE = re.compile(r"precision\s+(?:lowp|mediump|highp)\s+float\s*;")
_QUALIFIER = r"(?:(?:lowp|mediump|highp)\s+)?"


@dataclass(frozen=True, slots=True)
class Declaration:
    """A free identifier the generator tends to use without declaring."""

    identifier: str
    statement: str
    declared: re.Pattern[str]


def _uniform(type_name: str, identifier: str) -> Declaration:
    return Declaration(
        identifier=identifier,
        statement=f"uniform {type_name} {identifier};",
        declared=re.compile(
            rf"\buniform\s+{_QUALIFIER}{type_name}\s+{identifier}\b"
        ),
    )


def _varying(type_name: str, identifier: str) -> Declaration:
    return Declaration(
        identifier=identifier,
        statement=f"varying {type_name} {identifier};",
        declared=re.compile(
            rf"\b(?:varying|in)\s+{_QUALIFIER}{type_name}\s+{identifier}\b"
        ),
    )


# Insertion order is fixed.
RECOGNIZED_DECLARATIONS: Tuple[Declaration, ...] = (
    _uniform("float", "time"),
    _uniform("vec2", "resolution"),
    _varying("vec3", "vNormal"),
    _varying("vec3", "vPosition"),
)


@dataclass(frozen=True, slots=True)
class RepairReport:
    source: str
    precision_inserted: bool = False
    precision_relocated: bool = False
    declarations: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return (
            self.precision_inserted
            or self.precision_relocated
            or bool(self.declarations)
        )

    @property
    def precision_action(self) -> str:
        if self.precision_inserted:
            return "inserted"
        if self.precision_relocated:
            return "relocated"
        return "kept"


def repair_report(
    fragment_source: str, default_precision: str = "mediump"
) -> RepairReport:
    """
    Rewrite a generated fragment source so it has a leading precision
    statement and declarations for the recognized free identifiers.

    This is a text heuristic, not a parser: an identifier that only shows
    up in a comment still counts as used. A source that already starts with
    a precision statement and declares everything it uses comes back
    byte for byte, so running it on its own output returns the same text.
    """
    code = fragment_source.strip()

    # `#version` has to stay the very first line.
    header = ""
    if code.startswith("#version"):
        header, _, code = code.partition("\n")
        header = header.rstrip()
        code = code.lstrip()

    match = _PRECISION_RE.search(code)
    if match and match.start() == 0:
        pending = _pending("\n".join((header, code)))
        if not pending:
            return RepairReport(source=fragment_source)

        # Splice the declarations in under the precision line, leaving the
        # rest of the layout alone.
        head, tail = code[: match.end()], code[match.end() :]
        separator = "" if not tail or tail.startswith("\n") else "\n"
        code = "\n".join((head, *pending)) + separator + tail
        return RepairReport(
            source=_with_header(header, code), declarations=pending
        )

    inserted = relocated = False
    if match:
        precision = match.group(0)
        relocated = True
        body = (code[: match.start()] + code[match.end() :]).strip()
    else:
        precision = f"precision {default_precision} float;"
        inserted = True
        body = code

    pending = _pending("\n".join((header, precision, body)))
    parts = (precision, "\n".join(pending), body)
    return RepairReport(
        source=_with_header(header, "\n".join(part for part in parts if part)),
        precision_inserted=inserted,
        precision_relocated=relocated,
        declarations=pending,
    )


def _pending(scanned: str) -> Tuple[str, ...]:
    return tuple(
        decl.statement
        for decl in RECOGNIZED_DECLARATIONS
        if decl.identifier in scanned and not decl.declared.search(scanned)
    )


def _with_header(header: str, code: str) -> str:
    return f"{header}\n{code}" if header else code


def repair(fragment_source: str, default_precision: str = "mediump") -> str:
    return repair_report(fragment_source, default_precision).source
