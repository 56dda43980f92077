"""Behavior of generated doubles.

Every test renders a unit, executes the module text and drives the
resulting double, so these cover the renderer together with the runtime
library it targets.
"""

from __future__ import annotations

import asyncio
import typing
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from decimal import Decimal
from fractions import Fraction
from types import ModuleType
from typing import Any

import pytest

from stubforge.config.models import GenerationConfig, StubforgeConfig
from stubforge.contract import ContractType, MemberContract, TypeDescriptor
from stubforge.contract.catalog import BOOL, INT, STR, inout, list_of, param
from stubforge.pipeline import GenerationUnit, Strategy, generate
from stubforge.render import HEADER
from stubforge.runtime import (
    SequenceExhausted,
    Spy,
    StubBase,
    Times,
    UnconfiguredAccess,
    VerificationFailed,
)

Compile = Callable[..., ModuleType]
T = TypeDescriptor.type_parameter("T")


def _run(awaitable: Awaitable[Any]) -> Any:
    async def _wait() -> Any:
        return await awaitable

    return asyncio.run(_wait())


@pytest.fixture
def module(compile_unit: Compile, user_service: ContractType) -> ModuleType:
    return compile_unit(GenerationUnit.for_contract(user_service))


@pytest.fixture
def strict_module(compile_unit: Compile, user_service: ContractType) -> ModuleType:
    return compile_unit(GenerationUnit.for_contract(user_service, strict=True))


class TestGeneratedModule:
    """Shape of the emitted module."""

    def test_text_is_deterministic(self, user_service: ContractType) -> None:
        unit = GenerationUnit.for_contract(user_service)

        assert generate(unit).text == generate(unit).text

    def test_declaration_order_does_not_change_text(self, user_service: ContractType) -> None:
        reordered = ContractType(user_service.name, tuple(reversed(user_service.members)))

        first = generate(GenerationUnit.for_contract(user_service)).text
        second = generate(GenerationUnit.for_contract(reordered)).text

        assert first == second

    def test_header_and_runtime_import(self, user_service: ContractType) -> None:
        text = generate(GenerationUnit.for_contract(user_service)).text or ""

        assert text.startswith(HEADER)
        assert "# Unit: IUserServiceStub (standalone)" in text
        assert "from stubforge.runtime import (" in text
        assert "from collections.abc import Awaitable" in text

    def test_double_and_container_types(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert isinstance(stub, StubBase)
        assert isinstance(stub.spy, Spy)
        assert len(list(stub.spy.interceptors())) == 14
        assert module.IUserServiceStub.__doc__ == "Tracking double for IUserService."

    def test_instances_do_not_share_tracking(self, module: ModuleType) -> None:
        first = module.IUserServiceStub()
        second = module.IUserServiceStub()

        first.Count()

        assert first.spy.Count.call_count == 1
        assert second.spy.Count.call_count == 0


class TestPriorityChain:
    """Callback, then author override, then default."""

    def test_default_when_nothing_configured(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert stub.Count() == 0
        assert stub.GetUser(1) is None

    def test_author_override_is_shared_by_instances(self, module: ModuleType) -> None:
        # Given
        @module.IUserServiceStub.override("GetUser")
        def get_user(stub: Any, id: int) -> Any:
            return module.User(id)

        # When
        first = module.IUserServiceStub().GetUser(1)
        second = module.IUserServiceStub().GetUser(2)

        # Then
        assert (first.id, second.id) == (1, 2)

    def test_callback_wins_over_override(self, module: ModuleType) -> None:
        """Clearing the callback falls back to the override, then to the default."""
        # Given
        module.IUserServiceStub.override("Count")(lambda stub: 5)
        stub = module.IUserServiceStub()
        stub.spy.Count.on_call(lambda s: 7)

        # When / Then
        assert stub.Count() == 7
        stub.spy.Count.reset_callback()
        assert stub.Count() == 5
        module.IUserServiceStub.clear_override("Count")
        assert stub.Count() == 0
        assert stub.spy.Count.call_count == 3

    def test_callback_receives_owner_and_arguments(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.GetUser.on_call(lambda s, id: (s, id))

        assert stub.GetUser(3) == (stub, 3)

    def test_unknown_override_target(self, module: ModuleType) -> None:
        with pytest.raises(KeyError):
            module.IUserServiceStub.override("Missing")
        with pytest.raises(ValueError):
            module.IUserServiceStub.override("Count", accessor="get")


class TestTracking:
    """Every access is recorded before dispatch."""

    def test_records_on_every_path(self, strict_module: ModuleType) -> None:
        """Strict failures are tracked exactly like successful calls."""
        # Given
        stub = strict_module.IUserServiceStub()

        # When
        with pytest.raises(UnconfiguredAccess):
            stub.GetUser(1)
        stub.spy.GetUser.on_call(lambda s, id: None)
        stub.GetUser(2)

        # Then
        assert stub.spy.GetUser.call_count == 2
        assert stub.spy.GetUser.calls == [1, 2]
        assert stub.spy.GetUser.last_call_arg == 2
        assert stub.spy.GetUser.was_called

    def test_overloads_have_separate_counters(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        stub.Add(2, 3)
        stub.Add(b=5, a=4)

        assert stub.spy.Add1.call_count == 0
        assert stub.spy.Add2.call_count == 2
        assert stub.spy.Add2.last_call_args == (4, 5)
        assert stub.spy.Add2.last_call_args.b == 5
        stub.Add(1)
        assert stub.spy.Add1.last_call_arg == 1

    def test_overload_without_match_raises_type_error(self, module: ModuleType) -> None:
        with pytest.raises(TypeError):
            module.IUserServiceStub().Add("x")

    def test_parameterless_call_records_empty_tuple(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        stub.Count()

        assert stub.spy.Count.calls == [()]


class TestReset:
    """Reset operations are independent and never clear backing values."""

    def test_reset_tracking_keeps_callbacks_and_values(self, module: ModuleType) -> None:
        # Given
        stub = module.IUserServiceStub()
        stub.spy.Count.on_call(lambda s: 3)
        stub.Name = "ada"
        stub.Count()

        # When
        stub.spy.reset_tracking()

        # Then
        assert stub.spy.Count.call_count == 0
        assert stub.spy.Name.set_count == 0
        assert stub.Count() == 3
        assert stub.Name == "ada"

    def test_reset_callback_keeps_tracking_and_values(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.Count.on_call(lambda s: 3)
        stub.Name = "ada"
        stub.Count()

        stub.spy.reset_callback()

        assert stub.spy.Count.call_count == 1
        assert stub.Count() == 0
        assert stub.Name == "ada"

    def test_reset_all_keeps_backing_values(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.Name = "ada"
        stub["k"] = 4
        stub.spy.Count.on_call(lambda s: 3)
        stub.Count()

        stub.spy.reset()

        assert stub.spy.Count.call_count == 0
        assert not stub.spy.Count.on_call_set
        assert stub.Name == "ada"
        assert stub["k"] == 4


class TestStrictMode:
    """Strict doubles fail only when nothing yields a value."""

    def test_non_strict_unsafe_returns_none(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert stub.GetUser(1) is None
        assert stub.Current is None

    def test_strict_safe_default_still_returned(self, strict_module: ModuleType) -> None:
        stub = strict_module.IUserServiceStub()

        assert stub.Count() == 0
        assert stub.Name == ""
        assert stub.TryGet("k") == (False, 0)

    def test_strict_error_names_member_and_surface(self, strict_module: ModuleType) -> None:
        with pytest.raises(UnconfiguredAccess) as exc_info:
            strict_module.IUserServiceStub().GetUser(1)

        assert exc_info.value.details == {"surface": "IUserService", "member": "GetUser"}
        assert "IUserService.GetUser" in exc_info.value.message

    def test_strict_property_names_accessor(self, strict_module: ModuleType) -> None:
        with pytest.raises(UnconfiguredAccess) as exc_info:
            _ = strict_module.IUserServiceStub().Current

        assert exc_info.value.details["accessor"] == "get"

    def test_make_strict_on_one_instance(self, module: ModuleType) -> None:
        strict = module.IUserServiceStub().make_strict()
        relaxed = module.IUserServiceStub()

        with pytest.raises(UnconfiguredAccess):
            strict.GetUser(1)
        assert relaxed.GetUser(1) is None
        assert module.IUserServiceStub.strict is False

    def test_strict_deferred_raises_synchronously(self, strict_module: ModuleType) -> None:
        with pytest.raises(UnconfiguredAccess):
            strict_module.IUserServiceStub().LoadAsync(1)

    def test_strict_default_from_config(self, compile_unit: Compile, user_service: ContractType) -> None:
        config = StubforgeConfig(generation=GenerationConfig(strict_default=True))

        module = compile_unit(GenerationUnit.for_contract(user_service), config=config)

        assert module.IUserServiceStub.strict is True


class TestProperties:
    """Properties track accessors around a backing value."""

    def test_backing_value_starts_at_default(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert stub.Name == ""
        assert stub.spy.Name.has_value
        assert not stub.spy.Current.has_value

    def test_set_then_get(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        stub.Name = "ada"

        assert stub.Name == "ada"
        assert stub.spy.Name.set_count == 1
        assert stub.spy.Name.get_count == 1
        assert stub.spy.Name.last_set_value == "ada"

    def test_on_set_bypasses_backing(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        seen: list[str] = []
        stub.spy.Name.on_set = lambda s, value: seen.append(value)

        stub.Name = "ada"

        assert seen == ["ada"]
        assert stub.Name == ""
        assert stub.spy.Name.set_count == 1

    def test_on_get_wins(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.Name.on_get = lambda s: "from callback"

        assert stub.Name == "from callback"

    def test_getter_override(self, module: ModuleType) -> None:
        module.IUserServiceStub.override("Name", accessor="get")(lambda stub: "override")

        assert module.IUserServiceStub().Name == "override"

    def test_preset_read_only_value(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.Current.value = module.User(5)

        assert stub.Current.id == 5

    def test_read_only_property_has_no_setter(self, module: ModuleType) -> None:
        with pytest.raises(AttributeError):
            module.IUserServiceStub().Current = None


class TestIndexers:
    """Indexers track keys around a backing dictionary."""

    def test_missing_key_returns_default(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert stub["missing"] == 0
        assert stub.spy.IndexerOfString.last_get_key == "missing"

    def test_set_then_get(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        stub["a"] = 3

        assert stub["a"] == 3
        assert stub.spy.IndexerOfString.backing == {"a": 3}
        assert stub.spy.IndexerOfString.last_set_entry == ("a", 3)
        assert (stub.spy.IndexerOfString.get_count, stub.spy.IndexerOfString.set_count) == (1, 1)

    def test_prepopulated_backing(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.IndexerOfString.backing["b"] = 9

        assert stub["b"] == 9

    def test_on_get_receives_key(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.IndexerOfString.on_get = lambda s, key: len(key)

        assert stub["four"] == 4

    def test_several_indexers_dispatch_on_key_type(self, compile_unit: Compile) -> None:
        # Given
        lookup = ContractType(
            "ILookup",
            (
                MemberContract.indexer(param("key", STR), INT),
                MemberContract.indexer(param("index", INT), STR),
            ),
        )
        stub = compile_unit(GenerationUnit.for_contract(lookup)).ILookupStub()

        # When
        stub["a"] = 3
        stub[0] = "zero"

        # Then
        assert stub["a"] == 3
        assert stub[0] == "zero"
        assert stub[1] == ""
        assert stub.spy.IndexerOfString.set_count == 1
        assert stub.spy.IndexerOfInt.get_count == 2
        with pytest.raises(TypeError):
            stub[1.5]


class TestEvents:
    """Subscriptions are tracked and raised to subscribers."""

    def test_subscribe_raise_unsubscribe(self, module: ModuleType) -> None:
        # Given
        stub = module.IUserServiceStub()
        received: list[object] = []

        def handler(sender: object) -> None:
            received.append(sender)

        # When
        stub.Changed += handler
        stub.spy.Changed.raise_("first")
        stub.Changed -= handler
        stub.spy.Changed.raise_("second")

        # Then
        assert received == ["first"]
        assert stub.spy.Changed.add_count == 1
        assert stub.spy.Changed.remove_count == 1
        assert stub.spy.Changed.raise_count == 2
        assert stub.spy.Changed.raises == [("first",), ("second",)]
        assert not stub.spy.Changed.has_subscribers

    def test_plain_assignment_rejected(self, module: ModuleType) -> None:
        with pytest.raises(TypeError):
            module.IUserServiceStub().Changed = lambda sender: None


class TestByReferenceParameters:
    """Out and in-out values come back in a tuple."""

    def test_out_parameter_default(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert stub.TryGet("k") == (False, 0)
        assert stub.spy.TryGet.last_call_arg == "k"

    def test_out_parameter_from_callback(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.TryGet.on_call(lambda s, key: (True, len(key)))

        assert stub.TryGet("abc") == (True, 3)

    def test_inout_passes_input_through(self, compile_unit: Compile) -> None:
        counter = ContractType(
            "ICounter", (MemberContract.method("Bump", inout("value", INT), param("step", INT)),)
        )
        stub = compile_unit(GenerationUnit.for_contract(counter)).ICounterStub()

        assert stub.Bump(4, 1) == (4,)
        assert stub.spy.Bump.last_call_args == (4, 1)


class TestDeferredResults:
    """Awaitable members complete with their inner default."""

    def test_completed_defaults(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        assert _run(stub.FetchAsync(1)) == 0
        assert _run(stub.FlushAsync()) is None
        assert _run(stub.LoadAsync(1)) is None

    def test_completed_can_be_awaited_twice(self, module: ModuleType) -> None:
        pending = module.IUserServiceStub().FetchAsync(1)

        assert _run(pending) == 0
        assert _run(pending) == 0

    def test_callback_awaitable_passes_through(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        async def fetch() -> int:
            return 42

        stub.spy.FetchAsync.on_call(lambda s, id: fetch())

        pending = stub.FetchAsync(1)

        assert stub.spy.FetchAsync.call_count == 1
        assert _run(pending) == 42


class TestGenericMethods:
    """Per-type-argument interceptors with computed aggregates."""

    def test_convert_scenario(self, module: ModuleType) -> None:
        # Given
        stub = module.IUserServiceStub()
        user, order = module.User, module.Order

        # When
        stub.Convert[user]("a")
        stub.Convert[order]("b")
        stub.Convert[user]("c")

        # Then
        family = stub.spy.Convert
        assert family.of(user).call_count == 2
        assert family.of(order).call_count == 1
        assert family.total_call_count == 3
        assert set(family.called_type_arguments) == {(user,), (order,)}
        assert family.of(user).calls == ["a", "c"]

    def test_per_combination_callback(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.spy.Convert.of(module.User).on_call(lambda s, json: module.User(7))

        assert stub.Convert[module.User]("{}").id == 7
        assert stub.Convert[module.Order]("{}") is None

    def test_override_receives_type_arguments(self, module: ModuleType) -> None:
        module.IUserServiceStub.override("Convert")(lambda stub, types, json: types[0]())

        converted = module.IUserServiceStub().Convert[module.Order]("{}")

        assert isinstance(converted, module.Order)

    def test_reset_tracking_clears_every_combination(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.Convert[module.User]("a")

        stub.spy.reset_tracking()

        assert stub.spy.Convert.total_call_count == 0
        assert not stub.spy.Convert.was_called

    def test_missing_type_arguments(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()

        with pytest.raises(TypeError):
            stub.Convert("{}")
        with pytest.raises(TypeError):
            stub.Convert[module.User, module.Order]

    def test_generic_and_plain_member_with_colliding_class_names(self, compile_unit: Compile) -> None:
        """Foo[T] and FooGeneric() each keep their own interceptor class."""
        # Given
        source = ContractType(
            "ISource",
            (
                MemberContract.generic_method("Foo", ("T",), param("s", STR), returns=T),
                MemberContract.method("FooGeneric", returns=INT),
            ),
        )

        # When
        stub = compile_unit(GenerationUnit.for_contract(source)).ISourceStub()

        # Then
        assert stub.FooGeneric() == 0
        assert stub.Foo[int]("x") is None
        assert stub.spy.FooGeneric.call_count == 1
        assert stub.spy.Foo.total_call_count == 1


class TestSequencesAndVerification:
    def test_sequence_steps_then_exhaustion(self, module: ModuleType) -> None:
        # Given
        stub = module.IUserServiceStub()
        sequence = stub.spy.Count.on_call(lambda s: 1, Times.once())
        sequence.then_call(lambda s: 2, Times.twice())

        # When
        results = [stub.Count() for _ in range(3)]

        # Then
        assert results == [1, 2, 2]
        sequence.verify()
        with pytest.raises(SequenceExhausted):
            stub.Count()
        assert stub.spy.Count.call_count == 4

    def test_verify_call_count(self, module: ModuleType) -> None:
        stub = module.IUserServiceStub()
        stub.Count()

        stub.spy.Count.verify(Times.once())
        with pytest.raises(VerificationFailed) as exc_info:
            stub.spy.Count.verify(Times.never())

        assert exc_info.value.details["actual"] == 1


class TestStrategies:
    """Wrapping shapes: standalone, nested and open generic."""

    def test_nested_unit_hosts_every_target(
        self, compile_unit: Compile, user_service: ContractType
    ) -> None:
        # Given
        handler = ContractType.callable("Handler", param("value", INT), returns=BOOL)
        unit = GenerationUnit("Doubles", (user_service, handler), strategy=Strategy.NESTED)

        # When
        module = compile_unit(unit)

        # Then
        service = module.Doubles.IUserService()
        service.Add(1, 2)
        assert service.spy.Add2.last_call_args.a == 1
        assert service.Count() == 0
        callback = module.Doubles.Handler()
        assert callback(3) is False
        assert callback.spy.Invoke.last_call_arg == 3

    def test_nested_doubles_with_colliding_class_prefixes(self, compile_unit: Compile) -> None:
        """A.B_X and A_B.X would share an interceptor class name."""
        first = ContractType("A", (MemberContract.method("B_X", returns=INT),))
        second = ContractType("A_B", (MemberContract.method("X", returns=STR),))
        unit = GenerationUnit("Host", (first, second), strategy=Strategy.NESTED)

        module = compile_unit(unit)

        a, a_b = module.Host.A(), module.Host.A_B()
        assert a.B_X() == 0
        assert a_b.X() == ""
        assert a.spy.B_X.call_count == 1
        assert a_b.spy.X.call_count == 1

    def test_nested_override(self, compile_unit: Compile, user_service: ContractType) -> None:
        unit = GenerationUnit("Doubles", (user_service,), strategy=Strategy.NESTED)
        module = compile_unit(unit)

        module.Doubles.IUserService.override("Count")(lambda stub: 9)

        assert module.Doubles.IUserService().Count() == 9

    def test_nested_generic_instantiations(self, compile_unit: Compile) -> None:
        repo = ContractType(
            "IRepository", (MemberContract.method("Get", param("id", INT), returns=T),), type_parameters=("T",)
        )
        unit = GenerationUnit(
            "Repos",
            (repo.instantiate(TypeDescriptor.reference("User")), repo.instantiate(STR)),
            strategy=Strategy.NESTED,
        )

        module = compile_unit(unit)

        assert module.Repos.IRepositoryUser().Get(1) is None
        assert module.Repos.IRepositoryString().Get(1) == ""

    def test_open_generic_unit(self, compile_unit: Compile) -> None:
        # Given
        repo = ContractType(
            "IRepository",
            (
                MemberContract.method("Get", param("id", INT), returns=T),
                MemberContract.method("Add", param("item", T)),
                MemberContract.method("All", returns=list_of(T)),
                MemberContract.prop("Latest", T),
            ),
            type_parameters=("T",),
        )
        unit = GenerationUnit(
            "RepositoryStub", (repo,), strategy=Strategy.OPEN_GENERIC, type_parameters=("T",)
        )

        # When
        module = compile_unit(unit)
        stub = module.RepositoryStub[module.User]()

        # Then
        assert isinstance(module.T, typing.TypeVar)
        assert stub.Get(1) is None
        assert stub.All() == []
        stub.Add(module.User(3))
        assert stub.spy.Add.last_call_arg.id == 3
        stub.Latest = module.User(4)
        assert stub.Latest.id == 4

    def test_multiple_targets_share_members(self, compile_unit: Compile) -> None:
        run = MemberContract.method("Run", returns=INT)
        unit = GenerationUnit(
            "Both",
            (ContractType("IA", (run,)), ContractType("IB", (run, MemberContract.method("Stop")))),
        )

        stub = compile_unit(unit).Both()
        stub.Run()

        assert stub.spy.IA_Run is stub.spy.Run
        assert stub.spy.IB_Run.call_count == 1
        assert len(list(stub.spy.interceptors())) == 2

    def test_callable_standalone(self, compile_unit: Compile) -> None:
        handler = ContractType.callable("Handler", param("value", INT), returns=BOOL)
        stub = compile_unit(GenerationUnit.for_contract(handler)).HandlerStub()
        stub.spy.Invoke.on_call(lambda s, value: value > 2)

        assert stub(3) is True
        assert stub.Invoke(1) is False
        assert stub.spy.Invoke.call_count == 2


class TestModuleTypes:
    """Types declared with a module are imported by the generated code."""

    def test_container_factory_and_isinstance_dispatch(self, compile_unit: Compile) -> None:
        # Given
        contract = ContractType(
            "IParser",
            (
                MemberContract.prop(
                    "Cache",
                    TypeDescriptor.container("OrderedDict", STR, INT, module="collections"),
                ),
                MemberContract.method(
                    "Parse", param("value", TypeDescriptor.reference("Decimal", module="decimal"))
                ),
                MemberContract.method(
                    "Parse", param("value", TypeDescriptor.reference("Fraction", module="fractions"))
                ),
            ),
        )

        # When
        result = generate(GenerationUnit.for_contract(contract))
        stub = compile_unit(GenerationUnit.for_contract(contract)).IParserStub()
        stub.Parse(Decimal("1.5"))
        stub.Parse(Fraction(1, 2))
        stub.Parse(Fraction(1, 3))

        # Then
        assert "from collections import OrderedDict" in (result.text or "")
        assert isinstance(stub.Cache, OrderedDict)
        assert stub.spy.Parse1.call_count == 1
        assert stub.spy.Parse2.call_count == 2


class TestGenerationSettings:
    def test_custom_spy_attribute_and_indent(
        self, compile_unit: Compile, user_service: ContractType
    ) -> None:
        config = StubforgeConfig(generation=GenerationConfig(spy_attribute="calls", indent=2))

        module = compile_unit(GenerationUnit.for_contract(user_service), config=config)
        stub = module.IUserServiceStub()
        stub.Count()

        assert stub.calls.Count.call_count == 1

    def test_spy_attribute_collision(self, compile_unit: Compile) -> None:
        contract = ContractType("IAgent", (MemberContract.prop("spy", STR),))

        stub = compile_unit(GenerationUnit.for_contract(contract)).IAgentStub()
        stub.spy = "007"

        assert stub.spy == "007"
        assert stub.spy_.spy.set_count == 1

    def test_no_header(self, user_service: ContractType) -> None:
        config = StubforgeConfig(generation=GenerationConfig(emit_header=False))

        text = generate(GenerationUnit.for_contract(user_service), config=config).text or ""

        assert not text.startswith(HEADER)
        assert text.startswith("from __future__ import annotations")
