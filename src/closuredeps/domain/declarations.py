"""Declaration extraction: ``goog.provide`` / ``goog.require`` calls.

Pure functions, no filesystem access. Only the two declaration forms are
recognised; nothing else about the source language is parsed. Consumed by
the workspace when it scans a source tree into a dependency graph.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

# goog.provide('a.b') or goog.provide("a.b"), terminated by the next ';' on the same
# line. Several declarations may share a line.
_PROVIDE_PATTERN = re.compile(r"""goog\.provide\(\s*['"]([^'"]+)['"]\s*\)[^;\n]*;""")
_REQUIRE_PATTERN = re.compile(r"""goog\.require\(\s*['"]([^'"]+)['"]\s*\)[^;\n]*;""")


@dataclass(frozen=True)
class Declarations:
    """Packages a source file provides and requires, in source order."""

    provides: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()

    @property
    def is_package(self) -> bool:
        return bool(self.provides)


def extract_declarations(text: str) -> Declarations:
    """Extract provide/require declarations from source *text*.

    Duplicate names are kept once, at their first position.

    Examples:
        >>> d = extract_declarations("goog.provide('a.b');\\ngoog.require('a.c');")
        >>> d.provides, d.requires
        (('a.b',), ('a.c',))
    """
    return Declarations(
        provides=_unique(_PROVIDE_PATTERN.findall(text)),
        requires=_unique(_REQUIRE_PATTERN.findall(text)),
    )


def is_source_file(path: PurePath, *, source_suffix: str, compiled_suffix: str) -> bool:
    """True for ``*.js`` style sources that are not compiled output (``*.min.js``)."""
    name = path.name
    return name.endswith(source_suffix) and not name.endswith(compiled_suffix)


def _unique(names: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))
