from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ._errors import NotConstructible, UnresolvedInterfaceDependency
from ._signature import Dependency, signature_of


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Container

T = TypeVar("T")


def builder_for(cls: type[T]) -> Callable[[Container], T]:
    """Return the automatic builder for ``cls``.

    The constructor is inspected right away, so a class the container cannot
    build on its own fails here rather than at the first resolution. The
    returned builder is typically bound to an interface:

      container.provide(IInput, builder_for(KeyboardInput))
    """
    dependencies = signature_of(cls)

    def build(container: Container) -> T:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dependency in dependencies:
            value = _build_parameter(container, cls, dependency)
            if dependency.keyword:
                kwargs[dependency.name] = value
            else:
                args.append(value)

        return cls(*args, **kwargs)

    build.__qualname__ = f"builder_for.<{cls.__qualname__}>"
    return build


def _build_parameter(container: Container, cls: type, dependency: Dependency) -> Any:
    if dependency.optional:
        return container.require_optional(dependency.key)

    try:
        return container.require(dependency.key)
    except NotConstructible as exc:
        raise UnresolvedInterfaceDependency(cls, dependency) from exc
