"""Constructor-injection container with nested lifetime scopes.

This package provides a small inversion-of-control container for Python. Types
are wired from their constructor annotations, built directly or through a
supplied builder, and handed out either per container or as singletons shared
with every child scope.

Exports:
- `Container`: the registry; also every scope created from it.
- `Scope`: lifetime policy, `LOCAL` (one instance per container) or `SINGLETON`.
- `builder_for`: the automatic builder of a class, used to bind an interface
  to a concrete implementation.
- `is_constructible`: whether a class can be built without an explicit builder.
- Errors: `ResolutionError` and its `NotConstructible` family.
"""

from ._builder import builder_for
from ._container import Container
from ._entries import Scope
from ._errors import (
    AmbiguousConstructor,
    NotAbstractConstructible,
    NotConstructible,
    ResolutionError,
    UnresolvedInterfaceDependency,
)
from ._signature import Dependency, is_constructible, signature_of


__all__ = [
    "AmbiguousConstructor",
    "Container",
    "Dependency",
    "NotAbstractConstructible",
    "NotConstructible",
    "ResolutionError",
    "Scope",
    "UnresolvedInterfaceDependency",
    "builder_for",
    "is_constructible",
    "signature_of",
]
