"""Key template compiler.

A key template is plain text with ``{placeholder}`` tokens, where a
placeholder is one or more dot-separated identifiers naming an argument of
the cached function and, optionally, fields reachable from it::

    "item:{id}"
    "user2:{p.id}-{p.token}"

Compilation happens once, when a function is decorated. The resulting
``KeyTemplate`` is an immutable plan of literal fragments and field paths
that the binding resolver renders on every call.

Scanner permissiveness: a ``{`` with no closing ``}``, a ``{`` that meets
another ``{`` before any ``}``, and a stray ``}`` are all kept as literal text.
Only text enclosed by a ``{``/``}`` pair is checked, and it must be a valid
field path.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from mcache_core.constants import FIELD_PATH_RE, IDENTIFIER_RE
from mcache_core.exceptions import TemplateError


@dataclass(frozen=True)
class FieldPath:
    """Dotted path from a named argument into its fields, e.g. ``p.token``."""

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            msg = "field path must contain at least one identifier"
            raise TemplateError(msg)
        for part in self.parts:
            if not IDENTIFIER_RE.match(part):
                msg = f"invalid identifier {part!r} in field path"
                raise TemplateError(msg)

    @classmethod
    def parse(cls, dotted: str) -> FieldPath:
        """Build a path from its dotted text form."""
        if not FIELD_PATH_RE.match(dotted):
            msg = f"malformed placeholder {{{dotted}}}"
            raise TemplateError(msg)
        return cls(tuple(dotted.split(".")))

    @property
    def root(self) -> str:
        """Name of the argument the path starts from."""
        return self.parts[0]

    @property
    def attrs(self) -> tuple[str, ...]:
        """Field names accessed after the root."""
        return self.parts[1:]

    def __str__(self) -> str:
        return ".".join(self.parts)


@dataclass(frozen=True)
class LiteralText:
    """Literal text between placeholders."""

    text: str

    def __str__(self) -> str:
        return self.text


Segment = LiteralText | FieldPath


@dataclass(frozen=True)
class KeyTemplate:
    """Compiled key template: ordered literal and placeholder segments."""

    source: str
    segments: tuple[Segment, ...]

    @property
    def placeholders(self) -> tuple[FieldPath, ...]:
        """Field paths in left-to-right order, duplicates included."""
        return tuple(seg for seg in self.segments if isinstance(seg, FieldPath))

    @property
    def roots(self) -> frozenset[str]:
        """Argument names referenced by the template."""
        return frozenset(path.root for path in self.placeholders)

    def render_source(self) -> str:
        """Rebuild the template text from its segments."""
        return "".join(
            f"{{{seg}}}" if isinstance(seg, FieldPath) else seg.text for seg in self.segments
        )

    def __str__(self) -> str:
        return self.source


@functools.lru_cache(maxsize=512)
def compile_template(source: str) -> KeyTemplate:
    """Compile a key template, raising TemplateError on a malformed placeholder."""
    if not source:
        msg = "key template must not be empty"
        raise TemplateError(msg)

    segments: list[Segment] = []
    literal: list[str] = []
    pos = 0
    length = len(source)

    while pos < length:
        char = source[pos]
        if char != "{":
            literal.append(char)
            pos += 1
            continue

        close = source.find("}", pos + 1)
        if close == -1:
            # Unclosed brace: the rest is literal
            literal.append(source[pos:])
            break

        body = source[pos + 1 : close]
        if "{" in body:
            # Another opening brace before the close, so this one is literal
            literal.append(char)
            pos += 1
            continue

        try:
            path = FieldPath.parse(body)
        except TemplateError as exc:
            msg = f"malformed placeholder {{{body}}} at offset {pos} in template {source!r}"
            raise TemplateError(msg) from exc

        if literal:
            segments.append(LiteralText("".join(literal)))
            literal = []
        segments.append(path)
        pos = close + 1

    if literal:
        segments.append(LiteralText("".join(literal)))

    return KeyTemplate(source=source, segments=tuple(segments))
