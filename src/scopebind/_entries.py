from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Container


class Scope(Enum):
    LOCAL = "local"
    SINGLETON = "singleton"


@dataclass(frozen=True)
class FactoryEntry:
    builder: Callable[[Container], Any]
    scope: Scope

    def propagate(self) -> FactoryEntry | None:
        """Entry the child scope receives, or None.

        A singleton factory stays behind: its instance is what gets shared, and
        invoking the builder again in the child would break singleton identity.
        """
        if self.scope is Scope.SINGLETON:
            return None
        return self


@dataclass(frozen=True)
class InstanceEntry:
    instance: Any
    scope: Scope
    owned: bool = True

    def propagate(self) -> InstanceEntry | None:
        """Entry the child scope receives, or None.

        Singletons are handed down as non-owning references to the same object.
        Local instances are never shared; the child builds its own on demand.
        """
        if self.scope is Scope.LOCAL:
            return None
        return replace(self, owned=False)
