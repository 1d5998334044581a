from abc import ABC, abstractmethod

import pytest

from scopebind import (
    Container,
    NotAbstractConstructible,
    NotConstructible,
    Scope,
    UnresolvedInterfaceDependency,
    builder_for,
)


class IInput(ABC):
    @abstractmethod
    def axis(self) -> float: ...


class InputImpl(IInput):
    def axis(self) -> float:
        return 1.0


class Movement:
    def __init__(self, input: IInput):  # noqa: A002
        self.input = input


def test_require_autowires_simple_type():
    c = Container()

    class A: ...

    obj = c.require(A)
    assert isinstance(obj, A)


def test_require_autowires_recursively_from_annotations():
    c = Container()

    class DB: ...

    class Repo:
        def __init__(self, db: DB):
            self.db = db

    class Service:
        def __init__(self, repo: Repo):
            self.repo = repo

    svc = c.require(Service)
    assert isinstance(svc, Service)
    assert isinstance(svc.repo, Repo)
    assert isinstance(svc.repo.db, DB)
    assert svc.repo is c.require(Repo)
    assert svc.repo.db is c.require(DB)


def test_require_unregistered_type_behaves_as_if_provided():
    c = Container()

    class A: ...

    assert A not in c
    a = c.require(A)
    assert A in c
    assert c.require(A) is a
    assert c.require_optional(A) is a


def test_require_abstract_type_without_builder_raises():
    c = Container()

    with pytest.raises(NotAbstractConstructible):
        c.require(IInput)


def test_require_optional_abstract_type_without_builder_returns_none():
    c = Container()

    assert c.require_optional(IInput) is None
    assert IInput not in c


def test_require_dependency_on_unbound_interface_raises():
    c = Container()

    with pytest.raises(NotConstructible) as ctx:
        c.require(Movement)

    assert isinstance(ctx.value, UnresolvedInterfaceDependency)
    assert ctx.value.key is Movement
    assert ctx.value.dependency.key is IInput
    assert isinstance(ctx.value.__cause__, NotAbstractConstructible)
    assert "input" in str(ctx.value)


def test_failed_auto_registration_leaves_nothing_behind():
    c = Container()

    assert c.require_optional(Movement) is None
    assert Movement not in c


def test_interface_binding_makes_dependent_type_resolvable():
    c = Container()
    assert c.require_optional(Movement) is None

    c.provide(IInput, builder_for(InputImpl))
    movement = c.require(Movement)

    assert isinstance(movement.input, InputImpl)
    assert movement.input is c.require(IInput)


def test_provide_abstract_type_without_builder_raises_immediately():
    c = Container()

    with pytest.raises(NotAbstractConstructible):
        c.provide(IInput)
    assert IInput not in c


def test_provide_builds_instance_eagerly():
    c = Container()
    calls = []

    class A: ...

    def make_a(cont: Container) -> A:
        calls.append(cont)
        return A()

    c.provide(A, make_a)

    assert calls == [c]
    c.require(A)
    assert len(calls) == 1


def test_builder_receives_requiring_container():
    c = Container()

    class DB: ...

    class Repo:
        def __init__(self, db: DB):
            self.db = db

    c.provide(DB, scope=Scope.SINGLETON)
    c.provide(Repo, lambda cont: Repo(cont.require(DB)))
    scope = c.create_scope()

    repo = scope.require(Repo)
    assert repo is not c.require(Repo)
    assert repo.db is c.require(DB)


def test_provide_again_overwrites_builder_and_instance():
    c = Container()

    class A: ...

    first, second = A(), A()
    c.provide(A, lambda _: first)
    c.provide(A, lambda _: second)

    assert c.require(A) is second
    assert c.create_scope().require(A) is not first


def test_builder_error_propagates_and_leaves_no_entry():
    c = Container()

    class A: ...

    def broken(_: Container) -> A:
        msg = "boom"
        raise ValueError(msg)

    with pytest.raises(ValueError, match="boom"):
        c.provide(A, broken)
    assert A not in c


def test_builder_producing_none_is_absent():
    c = Container()

    class A: ...

    c.provide(A, lambda _: None)

    assert c.require_optional(A) is None
    with pytest.raises(NotConstructible):
        c.require(A)


def test_provide_instance_is_returned_as_is():
    c = Container()

    class A: ...

    inst = A()
    c.provide_instance(A, inst)

    assert c.require(A) is inst
    assert c.create_scope().require(A) is inst


def test_provide_instance_replaces_builder():
    c = Container()

    class A: ...

    inst = A()
    c.provide(A)
    c.provide_instance(A, inst, scope=Scope.LOCAL)

    # no builder left to rebuild it in the scope, so the scope auto-registers its own
    scoped = c.create_scope().require(A)
    assert scoped is not inst
    assert c.require(A) is inst


def test_non_class_key_raises_type_error():
    c = Container()

    with pytest.raises(TypeError):
        c.require("db")  # type: ignore[arg-type]

    with pytest.raises(TypeError):
        c.provide("db", lambda _: object())  # type: ignore[arg-type]


def test_non_callable_builder_raises_type_error():
    c = Container()

    class A: ...

    with pytest.raises(TypeError):
        c.provide(A, A())  # type: ignore[arg-type]


def test_require_builtin_value_type_needs_explicit_registration():
    c = Container()

    class WithPort:
        def __init__(self, port: int):
            self.port = port

    with pytest.raises(NotConstructible) as ctx:
        c.require(WithPort)
    assert "port" in str(ctx.value)

    c.provide_instance(int, 5555)
    assert c.require(WithPort).port == 5555


class Chicken:
    def __init__(self, egg: "Egg"):
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken):
        self.chicken = chicken


def test_dependency_cycle_surfaces_as_recursion_error():
    c = Container()

    with pytest.raises(RecursionError):
        c.require(Chicken)


def test_repr_and_contains():
    c = Container()

    class A: ...

    c.provide(A)
    assert A in c
    assert object() not in c
    assert repr(c) == "<Container builders=1 instances=1>"
