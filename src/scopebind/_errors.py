from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from ._signature import Dependency


class ResolutionError(RuntimeError):
    pass


class NotConstructible(ResolutionError):
    """The container can neither find nor build an instance of ``key``."""

    def __init__(self, key: Any, reason: str | None = None) -> None:
        self.key = key
        name = getattr(key, "__qualname__", repr(key))
        msg = f"{name} is not constructible and not provided within the current container"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class NotAbstractConstructible(NotConstructible):
    """Abstract class or Protocol used without an explicit builder."""

    def __init__(self, key: Any) -> None:
        super().__init__(key, "abstract types need an explicit builder, e.g. provide(T, builder_for(Impl))")


class AmbiguousConstructor(NotConstructible):
    def __init__(self, key: Any, reason: str) -> None:
        super().__init__(key, f"{reason}; provide an explicit builder instead")


class UnresolvedInterfaceDependency(NotConstructible):
    def __init__(self, key: Any, dependency: Dependency) -> None:
        self.dependency = dependency
        dep_name = getattr(dependency.key, "__qualname__", repr(dependency.key))
        super().__init__(key, f"cannot satisfy constructor parameter '{dependency.name}' ({dep_name})")
