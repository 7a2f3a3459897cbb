"""Binding resolver: render a compiled key template against call arguments."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any

from mcache_core.exceptions import BindingError
from mcache_core.template import FieldPath, KeyTemplate

_MISSING = object()


def bind_arguments(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map a call's arguments to parameter names, applying defaults.

    Raises the same TypeError the function would for a mismatched call.
    """
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def validate_roots(template: KeyTemplate, signature: inspect.Signature) -> None:
    """Check at decoration time that every placeholder names a parameter."""
    params = signature.parameters
    unknown = sorted(root for root in template.roots if root not in params)
    if unknown:
        names = ", ".join(unknown)
        msg = f"template {template.source!r} references unknown argument(s): {names}"
        raise BindingError(msg)


def resolve_path(path: FieldPath, bindings: Mapping[str, Any]) -> Any:
    """Follow a field path from its root argument to the terminal value."""
    value = bindings.get(path.root, _MISSING)
    if value is _MISSING:
        msg = f"unknown argument {path.root!r} in placeholder {{{path}}}"
        raise BindingError(msg)

    walked = path.root
    for attr in path.attrs:
        value = _field(value, attr)
        if value is _MISSING:
            msg = f"{walked!r} has no field {attr!r} (placeholder {{{path}}})"
            raise BindingError(msg)
        walked = f"{walked}.{attr}"
    return value


def resolve_key(template: KeyTemplate, bindings: Mapping[str, Any]) -> str:
    """Substitute every placeholder, left to right, producing the cache key."""
    parts: list[str] = []
    for segment in template.segments:
        if isinstance(segment, FieldPath):
            parts.append(_stringify(resolve_path(segment, bindings), segment))
        else:
            parts.append(segment.text)
    return "".join(parts)


def _field(value: Any, name: str) -> Any:
    """Item access for mappings, attribute access for everything else.

    Mappings never fall back to attributes, so ``{p.items}`` on a dict is a
    missing field rather than the bound ``dict.items`` method.
    """
    if isinstance(value, Mapping):
        return value.get(name, _MISSING)
    return getattr(value, name, _MISSING)


def _stringify(value: Any, path: FieldPath) -> str:
    """Canonical text form of a terminal value."""
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception as exc:
        msg = f"value at {{{path}}} of type {type(value).__name__} cannot be stringified"
        raise BindingError(msg) from exc
