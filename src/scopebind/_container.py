from __future__ import annotations

import inspect
import logging
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._builder import builder_for
from ._entries import FactoryEntry, InstanceEntry, Scope
from ._errors import NotConstructible
from ._signature import is_protocol, is_runtime_checkable_protocol


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    T = TypeVar("T")

    Builder = Callable[["Container"], T]


class Container:
    """Dependency container and lifetime scope.

    - provide types (auto-wired from constructor annotations) or builders
    - resolve with constructor injection, lazily registering constructible types
    - scopes: local (one instance per container) / singleton (shared with child scopes)
    - nested scopes seeded from their parent at creation time.
    """

    def __init__(self) -> None:
        self._parent: Container | None = None
        self._factories: dict[type, FactoryEntry] = {}
        self._instances: dict[type, InstanceEntry] = {}

    @property
    def parent(self) -> Container | None:
        """Container this scope was created from; kept for provenance, never used for lookup."""
        return self._parent

    @overload
    def provide(self, key: type[T], *, scope: Scope = Scope.LOCAL) -> None: ...

    @overload
    def provide(self, key: type[T], builder: Builder[T], *, scope: Scope = Scope.LOCAL) -> None: ...

    def provide(
        self,
        key: type[T],
        builder: Callable[[Container], Any] | None = None,
        *,
        scope: Scope = Scope.LOCAL,
    ) -> None:
        """Register a builder for a type and build its first instance right away.

        Example:
          container.provide(Clock, scope=Scope.SINGLETON)
          container.provide(IInput, builder_for(KeyboardInput))
          container.provide(Settings, lambda c: Settings.from_env())

        Without a builder, ``key`` must be directly constructible; abstract types
        and ambiguous constructors are rejected here, before anything is stored.
        Providing a type again replaces both its builder and its instance.
        """
        _check_key(key)

        if builder is None:
            builder = builder_for(key)
        elif not callable(builder):
            msg = f"Builder for {key.__qualname__} must be callable, got {builder!r}"
            raise TypeError(msg)

        factory = FactoryEntry(builder=builder, scope=scope)
        instance = self._build(key, factory)

        self._instances[key] = InstanceEntry(instance=instance, scope=scope)
        self._factories[key] = factory
        logger.debug("Provided %s (%s)", key.__qualname__, scope.value)

    def provide_instance(self, key: type[T], instance: T, *, scope: Scope = Scope.SINGLETON) -> None:
        """Register a pre-built instance, owned by this container from now on."""
        _check_key(key)
        _validate_instance(key, instance)

        self._factories.pop(key, None)
        self._instances[key] = InstanceEntry(instance=instance, scope=scope)
        logger.debug("Provided %s instance (%s)", key.__qualname__, scope.value)

    def require_optional(self, key: type[T]) -> T | None:
        """Resolve ``key`` or return None when it cannot be produced.

        Never raises NotConstructible: absence is the signal, and the decision of
        what to do about it is left to the caller. Misuse is not absence: a
        builder returning an object of the wrong type raises TypeError, and
        errors raised by a builder itself propagate unchanged.
        """
        try:
            return self._resolve(key)
        except NotConstructible as exc:
            logger.debug("%s is absent: %s", key.__qualname__, exc)
            return None

    def require(self, key: type[T]) -> T:
        """Resolve ``key`` to an instance.

        - If an instance exists in this container: return it.
        - If a builder was provided: build, remember and return the instance.
        - If ``key`` is directly constructible: provide it, then return its instance.

        Raises NotConstructible (or a more specific subclass) otherwise.
        """
        instance = self._resolve(key)
        if instance is None:
            raise NotConstructible(key, "its builder produced no instance")
        return instance

    def create_scope(self) -> Container:
        """Create a child container seeded from this one.

        Local builders are copied so the child builds its own local instances;
        singleton instances are shared by reference. Nothing else links the two
        containers afterwards.
        """
        child = Container()
        child._parent = self

        for key, factory in self._factories.items():
            clone = factory.propagate()
            if clone is not None:
                child._factories[key] = clone

        for key, entry in self._instances.items():
            shared = entry.propagate()
            if shared is not None:
                child._instances[key] = shared

        logger.debug(
            "Created scope with %d builders and %d shared instances",
            len(child._factories),
            len(child._instances),
        )
        return child

    def close(self) -> None:
        """Release every instance this container owns, newest first.

        Owned instances with a ``close()`` method get it called. Singletons shared
        from an ancestor are left alone, even when a local builder of this
        container returned one of them; their owner closes them. Every instance
        is closed even if an earlier ``close()`` raises; the error propagates
        once all of them were attempted.
        """
        shared = {id(entry.instance) for entry in self._instances.values() if not entry.owned}
        owned: dict[int, Any] = {}
        for entry in self._instances.values():
            if entry.owned and entry.instance is not None and id(entry.instance) not in shared:
                owned.setdefault(id(entry.instance), entry.instance)

        self._instances.clear()
        self._factories.clear()
        logger.debug("Closing container with %d owned instances", len(owned))

        # ExitStack unwinds last-in first-out, so the newest instance closes first.
        with ExitStack() as stack:
            for instance in owned.values():
                close = getattr(instance, "close", None)
                if callable(close):
                    stack.callback(close)

    def __enter__(self) -> Container:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        return key in self._instances or key in self._factories

    def __repr__(self) -> str:
        return f"<{type(self).__name__} builders={len(self._factories)} instances={len(self._instances)}>"

    def _resolve(self, key: type[T]) -> Any:
        _check_key(key)

        entry = self._instances.get(key)
        if entry is not None:
            return entry.instance

        factory = self._factories.get(key)
        if factory is not None:
            instance = self._build(key, factory)
            # Built lazily, so the instance is local to this container even when
            # the factory is a singleton one; it is not written back to a parent.
            self._instances[key] = InstanceEntry(instance=instance, scope=Scope.LOCAL)
            logger.debug("Built %s lazily", key.__qualname__)
            return instance

        # Raises a NotConstructible subclass when 'key' cannot be built automatically.
        logger.debug("Auto-registering %s", key.__qualname__)
        self.provide(key)
        return self._instances[key].instance

    def _build(self, key: type, factory: FactoryEntry) -> Any:
        instance = factory.builder(self)
        _validate_instance(key, instance)
        return instance


def _check_key(key: object) -> None:
    if not inspect.isclass(key):
        msg = f"Type keys must be classes, got {key!r}"
        raise TypeError(msg)


def _validate_instance(key: type, instance: object) -> None:
    """Check a built or provided instance against its key.

    - For normal classes/ABCs and runtime-checkable protocols: require isinstance.
    - Other protocols cannot be checked at runtime and are accepted as is.
    """
    if instance is None:
        return

    if is_protocol(key):
        if is_runtime_checkable_protocol(key) and not isinstance(instance, key):
            msg = f"Instance {type(instance).__name__} does not implement runtime protocol {key.__name__}"
            raise TypeError(msg)
        return

    if not isinstance(instance, key):
        msg = f"Instance {type(instance).__name__} is not an instance of {key.__name__}"
        raise TypeError(msg)
