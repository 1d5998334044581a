"""Constructor introspection.

Derives, for a class, the ordered list of dependencies its minimal-arity
constructor call needs: every parameter without a default, excluding
``*args``/``**kwargs``. Each such parameter must be annotated with exactly
one class (optionally wrapped in ``Optional``); anything else is ambiguous and
requires the caller to supply an explicit builder.
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Protocol, Union, cast, get_args, get_origin, get_type_hints

from ._errors import AmbiguousConstructor, NotAbstractConstructible, NotConstructible


logger = logging.getLogger(__name__)

_NoneType = type(None)
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


@dataclass(frozen=True)
class Dependency:
    """One constructor parameter the container has to supply.

    ``optional`` dependencies were annotated ``X | None`` and are resolved in
    pointer form (absent becomes ``None``); ``keyword`` dependencies are
    keyword-only parameters and are passed by name.
    """

    name: str
    key: type
    optional: bool = False
    keyword: bool = False


def signature_of(cls: Any) -> tuple[Dependency, ...]:
    """Return the dependencies of ``cls``'s minimal-arity constructor call.

    Raises:
        NotAbstractConstructible: ``cls`` is abstract or a Protocol.
        AmbiguousConstructor: a required parameter cannot be mapped to one class.
        NotConstructible: ``cls`` is a builtin value type or has no inspectable signature.
    """
    if not inspect.isclass(cls):
        msg = f"Type keys must be classes, got {cls!r}"
        raise TypeError(msg)

    if is_protocol(cls) or inspect.isabstract(cls):
        raise NotAbstractConstructible(cls)

    if cls.__module__ == "builtins":
        raise NotConstructible(cls, "builtin value types need an explicit builder or instance")

    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return ()

    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError) as exc:
        raise NotConstructible(cls, f"constructor signature is not inspectable ({exc})") from exc

    hints = _get_init_type_hints(cls)
    dependencies: list[Dependency] = []

    for name, p in sig.parameters.items():
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        if p.default is not p.empty:
            continue

        annotation = hints.get(name, p.annotation)
        if annotation is p.empty:
            raise AmbiguousConstructor(cls, f"parameter '{name}' has no type annotation")

        key, optional = _dependency_key(cls, name, annotation)
        dependencies.append(Dependency(name=name, key=key, optional=optional, keyword=p.kind is p.KEYWORD_ONLY))

    return tuple(dependencies)


def is_constructible(cls: Any) -> bool:
    """Whether the container can derive a builder for ``cls`` on its own."""
    try:
        signature_of(cls)
    except (NotConstructible, TypeError):
        return False
    return True


def _dependency_key(cls: type, name: str, annotation: Any) -> tuple[type, bool]:
    optional = False

    if get_origin(annotation) in _UNION_ORIGINS:
        members = [a for a in get_args(annotation) if a is not _NoneType]
        if len(members) != 1:
            msg = f"parameter '{name}' is annotated with a union of several types ({annotation!r})"
            raise AmbiguousConstructor(cls, msg)
        optional = True
        annotation = members[0]

    if isinstance(annotation, str):
        raise AmbiguousConstructor(cls, f"parameter '{name}' has an unresolved forward reference {annotation!r}")

    if get_origin(annotation) is not None or not inspect.isclass(annotation):
        raise AmbiguousConstructor(cls, f"parameter '{name}' is not annotated with a class ({annotation!r})")

    return annotation, optional


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    return hints


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: Any) -> bool:
        """Detect whether 'tp' is itself a typing.Protocol, not merely an implementation of one."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not cast("type", Protocol)


def is_runtime_checkable_protocol(tp: Any) -> bool:
    if not is_protocol(tp):
        return False

    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True
