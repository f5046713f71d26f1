"""Tests for the dependency-injection container."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

import pytest

from jobpipeline.core.exceptions import BindingResolutionError
from jobpipeline.di.container import Container


class Mailer:
    pass


class Report:
    pass


class Builds:
    def __init__(self, first, second, mailer: Mailer, retries: int = 3) -> None:
        self.first = first
        self.second = second
        self.mailer = mailer
        self.retries = retries


class TakesOne:
    def __init__(self, only) -> None:
        self.only = only


class TakesMany:
    def __init__(self, *values) -> None:
        self.values = values


class NoInit:
    pass


@pytest.fixture
def container():
    return Container()


class TestBindings:
    def test_instance_is_shared(self, container):
        mailer = Mailer()
        container.instance(Mailer, mailer)
        assert container.resolve(Mailer) is mailer

    def test_factory_runs_per_resolution(self, container):
        container.bind(Mailer, lambda c: Mailer())
        assert container.resolve(Mailer) is not container.resolve(Mailer)

    def test_string_keys(self, container):
        container.instance("answer", 42)
        assert container.bound("answer")
        assert container.resolve("answer") == 42

    def test_container_is_bound_to_itself(self, container):
        assert container.resolve(Container) is container

    def test_unbound_key_raises(self, container):
        with pytest.raises(BindingResolutionError):
            container.resolve(Mailer)


class TestMake:
    def test_spreads_args_then_uses_bindings_and_defaults(self, container):
        mailer = Mailer()
        container.instance(Mailer, mailer)

        built = container.make(Builds, "a", "b")

        assert (built.first, built.second, built.mailer, built.retries) == ("a", "b", mailer, 3)

    def test_surplus_args_are_dropped(self, container):
        assert container.make(TakesOne, 1, 2, 3).only == 1

    def test_var_positional_takes_everything(self, container):
        assert container.make(TakesMany, 1, 2, 3).values == (1, 2, 3)

    def test_class_without_init(self, container):
        assert isinstance(container.make(NoInit, "ignored"), NoInit)

    def test_missing_dependency_raises(self, container):
        with pytest.raises(BindingResolutionError) as info:
            container.make(Builds, "a", "b")
        assert info.value.parameter == "mailer"

    def test_binding_by_parameter_name(self, container):
        container.instance("mailer", Mailer())
        assert isinstance(container.make(Builds, "a", "b").mailer, Mailer)


class TestCall:
    def test_matches_values_by_type_regardless_of_order(self, container):
        report, mailer = Report(), Mailer()

        def handler(m: Mailer, r: Report):
            return m, r

        assert container.call(handler, [report, mailer]) == (mailer, report)

    def test_untyped_parameters_take_values_in_order(self, container):
        def handler(first, second):
            return first, second

        assert container.call(handler, ["a", "b"]) == ("a", "b")

    def test_any_annotation_is_treated_as_untyped(self, container):
        def handler(value: Any):
            return value

        assert container.call(handler, [5]) == 5

    def test_builtin_types_match_in_order(self, container):
        def handler(first: str, second: str):
            return first + second

        assert container.call(handler, ["a", "b"]) == "ab"

    def test_handler_may_take_a_subset(self, container):
        def handler(r: Report):
            return r

        report = Report()
        assert container.call(handler, ["noise", report, 3]) is report

    def test_no_parameters_ignores_values(self, container):
        assert container.call(lambda: "ok", [1, 2]) == "ok"

    def test_bindings_fill_unmatched_parameters(self, container):
        mailer = Mailer()
        container.instance(Mailer, mailer)

        def handler(r: Report, m: Mailer):
            return m

        assert container.call(handler, [Report()]) is mailer

    def test_defaults_are_used(self, container):
        def handler(r: Report, retries: int = 2, *, label: str = "x"):
            return retries, label

        assert container.call(handler, [Report()]) == (2, "x")

    def test_var_positional_absorbs_remaining_values(self, container):
        def handler(r: Report, *rest):
            return rest

        assert container.call(handler, [1, Report(), 2]) == (1, 2)

    def test_unresolvable_parameter_raises(self, container):
        def handler(m: Mailer):
            return m

        with pytest.raises(BindingResolutionError):
            container.call(handler, ["not a mailer"])

    def test_bound_method(self, container):
        class Job:
            def handle(self, c: Container):
                return c

        assert container.call(Job().handle) is container


class TestGenericAndUnionAnnotations:
    def test_any_parameter_takes_a_string(self, container):
        def handler(value: Any):
            return value

        assert container.call(handler, ["payload"]) == "payload"

    def test_generic_alias_matches_its_origin(self, container):
        def handler(values: list[int]):
            return values

        assert container.call(handler, ["noise", [1, 2]]) == [1, 2]

    def test_optional_matches_member_type(self, container):
        report = Report()

        def handler(r: Optional[Report]):
            return r

        assert container.call(handler, ["noise", report]) is report

    def test_pipe_union_matches_any_member(self, container):
        def handler(value: Mailer | Report):
            return value

        report = Report()
        assert container.call(handler, [1, report]) is report

    def test_union_with_none_accepts_none(self, container):
        def handler(r: Report | None):
            return r

        assert container.call(handler, [None]) is None

    def test_union_with_any_is_positional(self, container):
        def handler(value: Any | None):
            return value

        assert container.call(handler, [7]) == 7

    def test_annotated_matches_inner_type(self, container):
        def handler(r: Annotated[Report, "meta"]):
            return r

        report = Report()
        assert container.call(handler, ["noise", report]) is report

    def test_annotation_without_a_class_is_positional(self, container):
        def handler(mode: Literal["fast", "slow"], count: int):
            return mode, count

        assert container.call(handler, ["fast", 3]) == ("fast", 3)

    def test_generic_without_matching_value_raises(self, container):
        def handler(values: dict[str, int]):
            return values

        with pytest.raises(BindingResolutionError):
            container.call(handler, [[1, 2]])
