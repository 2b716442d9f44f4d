"""
Tests for fluent chains, error handlers and mode bridges.
"""

import re

import pytest
from string_chain import (
    AssertionChain,
    BridgeError,
    ConfigurationError,
    CustomOperationError,
    OperationNotFoundError,
    StepError,
    TransformationOperation,
    TransformChain,
    assert_that,
    register_operation,
    string_transform,
)


@pytest.fixture
def recorder():
    """Collect (error, step_name, value_so_far) calls made to a handler."""
    calls = []

    def handler(error, step_name, value_so_far):
        calls.append((error, step_name, value_so_far))

    handler.calls = calls
    return handler


class TestTransformChain:
    """Tests for TransformChain evaluation."""

    def test_empty_chain_returns_subject(self):
        assert string_transform("foo").try_() == "foo"

    def test_steps_fold_in_order(self):
        result = (
            string_transform("  Hello World  ")
            .trim()
            .to_snake_case()
            .add(prefix="<", suffix=">")
            .try_()
        )
        assert result == "<hello_world>"

    def test_order_matters(self):
        first = string_transform("ab").add(suffix="c").to_upper_case().try_()
        second = string_transform("ab").to_upper_case().add(suffix="c").try_()
        assert first == "ABC"
        assert second == "ABc"

    def test_builder_methods_return_same_chain(self):
        chain = string_transform("foo")
        assert chain.to_upper_case() is chain
        assert chain.split(",").take_that_at(0) is chain

    def test_pad_examples(self):
        assert string_transform("foo").pad(7, "*", "both").try_() == "**foo**"
        assert string_transform("foo").pad(5, "-", "start").try_() == "--foo"

    def test_regex_replace_in_chain(self):
        result = string_transform("a1b22c333").replace_all(re.compile(r"\d+"), "-").try_()
        assert result == "a-b-c-"

    def test_subject_must_be_string(self):
        with pytest.raises(TypeError):
            string_transform(42)

    def test_evaluation_is_lazy(self):
        calls = []

        def spy(value):
            calls.append(value)
            return value

        chain = string_transform("foo").custom_transform(spy)
        assert calls == []

        chain.try_()
        assert calls == ["foo"]

    def test_chain_can_be_evaluated_twice(self):
        chain = string_transform("foo").to_upper_case()
        assert chain.try_() == "FOO"
        assert chain.try_() == "FOO"

    def test_unknown_operation_through_apply(self):
        with pytest.raises(OperationNotFoundError):
            string_transform("foo").apply("to_uper_case")

    def test_apply_missing_required_config(self):
        with pytest.raises(ConfigurationError, match="length"):
            string_transform("foo").apply("pad")

    def test_apply_builtin_by_name(self):
        assert string_transform("foo").apply("pad", length=5, char="!").try_() == "foo!!"

    def test_apply_config_cannot_rename_step(self):
        chain = string_transform("foo").apply("add", prefix="x", step_name="renamed")

        assert chain.steps[0].name == "add"
        assert chain.steps[0].config["step_name"] == "renamed"
        assert chain.try_() == "xfoo"

    def test_apply_config_may_contain_name(self):
        class GreetTransformation(TransformationOperation):
            """Greet someone in front of the value."""

            def transform(self, value):
                return f"{self.config['name']}: {value}"

        register_operation("test_greet", GreetTransformation)

        chain = string_transform("hi").apply("test_greet", name="Ada")
        assert chain.steps[0].name == "test_greet"
        assert chain.try_() == "Ada: hi"


class TestTransformErrors:
    """Tests for error delivery in transform chains."""

    def test_error_propagates_without_handler(self):
        with pytest.raises(StepError, match="No match found"):
            string_transform("abc").extract(r"\d+").try_()

    def test_handler_receives_step_and_value(self, recorder):
        result = string_transform("abc").extract(r"\d+").try_(recorder)

        assert result is None
        assert len(recorder.calls) == 1
        error, step_name, value_so_far = recorder.calls[0]
        assert isinstance(error, StepError)
        assert step_name == "extract"
        assert value_so_far == "abc"

    def test_value_so_far_is_input_of_failing_step(self, recorder):
        string_transform("abc").to_upper_case().extract(r"\d+").to_lower_case().try_(recorder)

        _, step_name, value_so_far = recorder.calls[0]
        assert step_name == "extract"
        assert value_so_far == "ABC"

    def test_steps_after_error_do_not_run(self, recorder):
        calls = []

        def spy(value):
            calls.append(value)
            return value

        string_transform("abc").extract(r"\d+").custom_transform(spy).try_(recorder)
        assert calls == []

    def test_take_that_at_step_name(self, recorder):
        string_transform("a,b").split(",").take_that_at(7).try_(recorder)

        _, step_name, value_so_far = recorder.calls[0]
        assert step_name == "take_that_at"
        assert value_so_far == "a,b"

    def test_custom_transform_error_is_delivered(self, recorder):
        string_transform("abc").custom_transform(lambda s: None).try_(recorder)

        error, step_name, _ = recorder.calls[0]
        assert isinstance(error, CustomOperationError)
        assert step_name == "custom_transform"

    def test_invalid_call_contract_is_raised_on_evaluation(self, recorder):
        chain = string_transform("foo").pad(5, "*", "middle")
        chain.try_(recorder)

        error, step_name, _ = recorder.calls[0]
        assert isinstance(error, ConfigurationError)
        assert step_name == "pad"


class TestAssertionChain:
    """Tests for AssertionChain evaluation."""

    def test_empty_chain_passes(self):
        assert assert_that("foo").try_() is True

    def test_all_steps_pass(self):
        assert assert_that("fooBar").has("Bar").starts_with("foo").is_alpha().try_() is True

    def test_first_false_fails_chain(self):
        assert assert_that("foo").has("x").has("foo").try_() is False

    def test_steps_test_the_original_subject(self):
        assert assert_that("foo").has("f").is_exactly("foo").length_is(3).try_() is True

    def test_is_not_negates_next_step_only(self):
        assert assert_that("foobar").is_not().has("baz").has("foo").try_() is True
        assert assert_that("foobar").is_not().has("baz").has("baz").try_() is False

    def test_is_not_does_not_leak_to_later_steps(self):
        chain = assert_that("foo").is_not().has("x").has("o")
        negations = [step.negate for step in chain.steps]
        assert negations == [True, False]

    def test_trailing_is_not_has_no_effect(self):
        assert assert_that("foo").has("o").is_not().try_() is True

    def test_double_is_not_still_negates_once(self):
        assert assert_that("foo").is_not().is_not().has("x").try_() is True

    def test_any_of(self):
        assert assert_that("foo").any_of("bar", "foo", "baz").try_() is True
        assert assert_that("qux").any_of("bar", "foo").try_() is False

    def test_where_value_at_continuation(self):
        assert assert_that("foo").where_value_at(0).is_("f").try_() is True
        assert assert_that("foo").where_value_at(0).is_("o").try_() is False

    def test_word_count_continuation(self):
        assert assert_that("the quick fox").word_count().is_(3).try_() is True

    def test_continuation_step_names(self):
        chain = assert_that("foo").where_value_at(2).is_("o").word_count().is_(1)
        assert [step.name for step in chain.steps] == ["where_value_at(2).is", "word_count.is"]

    def test_is_phone_presets(self):
        assert assert_that("(555) 123-4567").is_phone("US").try_() is True
        assert assert_that("(555) 123-4567").is_phone().try_() is False

    def test_length_is_bounds(self):
        assert assert_that("foobar").length_is(min_length=3, max_length=5).try_() is False
        assert assert_that("foo").length_is(3).try_() is True


class TestAssertionErrors:
    """Tests for error delivery in assertion chains."""

    def test_short_circuit_skips_later_steps(self, recorder):
        def raiser(value):
            raise RuntimeError("should not run")

        result = assert_that("abc").has("z").custom_check(raiser).try_(recorder)

        assert result is False
        assert recorder.calls == []

    def test_handler_result_is_none_not_false(self, recorder):
        def raiser(value):
            raise RuntimeError("boom")

        result = assert_that("abc").custom_check(raiser).try_(recorder)

        assert result is None
        error, step_name, value_so_far = recorder.calls[0]
        assert isinstance(error, CustomOperationError)
        assert str(error) == "Error evaluating predicate: boom"
        assert step_name == "custom_check"
        assert value_so_far == "abc"

    def test_error_propagates_without_handler(self):
        with pytest.raises(CustomOperationError):
            assert_that("abc").custom_check(lambda s: "yes").try_()

    def test_unknown_phone_preset_reaches_handler(self, recorder):
        assert_that("0612345678").is_phone("FR").try_(recorder)

        error, step_name, _ = recorder.calls[0]
        assert isinstance(error, ConfigurationError)
        assert step_name == "is_phone"


class TestBridges:
    """Tests for switching between transform and assertion chains."""

    def test_transform_to_assertion(self):
        chain = string_transform("foo").to_upper_case().assert_that()
        assert isinstance(chain, AssertionChain)
        assert chain.subject == "FOO"
        assert chain.is_exactly("FOO").try_() is True

    def test_assertion_to_transform_uses_original_subject(self):
        result = assert_that("foo").is_exactly("foo").string_transform().to_upper_case().try_()
        assert result == "FOO"

    def test_assertion_to_transform_returns_transform_chain(self):
        chain = assert_that("foo").has("f").string_transform()
        assert isinstance(chain, TransformChain)
        assert chain.subject == "foo"

    def test_bridge_from_failing_assertion_raises(self):
        calls = []

        with pytest.raises(BridgeError) as exc_info:
            (
                assert_that("foo")
                .has("x")
                .has("o")
                .string_transform()
                .custom_transform(lambda s: calls.append(s) or s)
            )

        assert str(exc_info.value) == 'Assertion failed at step "has"'
        assert calls == []

    def test_bridge_failure_names_last_step(self):
        with pytest.raises(BridgeError) as exc_info:
            assert_that("foo").has("x").is_alpha().string_transform()

        assert exc_info.value.operation_name == "is_alpha"
        assert str(exc_info.value) == 'Assertion failed at step "is_alpha"'

    def test_bridge_from_erroring_assertion(self):
        def raiser(value):
            raise RuntimeError("boom")

        with pytest.raises(BridgeError) as exc_info:
            assert_that("foo").custom_check(raiser).string_transform()

        error = exc_info.value
        assert str(error) == (
            'Assertion failed at step "custom_check": '
            "Error evaluating predicate: boom\nValue so far: foo"
        )
        assert isinstance(error.original_error, CustomOperationError)
        assert error.__cause__ is error.original_error

    def test_bridge_from_erroring_transform(self):
        with pytest.raises(BridgeError) as exc_info:
            string_transform("abc").to_upper_case().extract(r"\d+").assert_that()

        error = exc_info.value
        assert str(error) == (
            'Transformation failed at step "extract": No match found\nValue so far: ABC'
        )
        assert error.operation_name == "extract"
        assert error.value_so_far == "ABC"
        assert isinstance(error.__cause__, StepError)

    def test_round_trip_through_both_modes(self):
        result = (
            string_transform(" foo ")
            .trim()
            .assert_that()
            .length_is(3)
            .string_transform()
            .pad(5, "*", "both")
            .try_()
        )
        assert result == "*foo*"


class TestChainIndependence:
    """Tests that chains never share state."""

    def test_interleaved_chains(self):
        first = string_transform("foo")
        second = string_transform("bar")

        first.to_upper_case()
        second.add(suffix="!")
        first.add(prefix=">")
        second.to_upper_case()

        assert first.try_() == ">FOO"
        assert second.try_() == "BAR!"

    def test_interleaved_negation(self):
        first = assert_that("foo")
        second = assert_that("foo")

        first.is_not()
        second.has("o")
        first.has("x")

        assert first.try_() is True
        assert second.try_() is True
        assert [step.negate for step in second.steps] == [False]

    def test_building_does_not_mutate_subject(self):
        chain = string_transform("foo").to_upper_case()
        chain.try_()
        assert chain.subject == "foo"


class TestExecutionLog:
    """Tests for Chain.get_execution_log."""

    def test_log_empty_before_evaluation(self):
        assert string_transform("foo").trim().get_execution_log() == []

    def test_log_records_each_step(self):
        chain = string_transform("foo").to_upper_case().add(suffix="!")
        chain.try_()

        log = chain.get_execution_log()
        assert [entry["operation_name"] for entry in log] == ["to_upper_case", "add"]
        assert all(entry["success"] for entry in log)

    def test_log_records_failure(self, recorder):
        chain = string_transform("abc").extract(r"\d+").trim()
        chain.try_(recorder)

        log = chain.get_execution_log()
        assert len(log) == 1
        assert log[0]["success"] is False
        assert log[0]["error"] == "No match found"

    def test_log_replaced_on_each_evaluation(self):
        chain = assert_that("foo").has("o")
        chain.try_()
        chain.try_()
        assert len(chain.get_execution_log()) == 1

    def test_repr_lists_steps(self):
        chain = string_transform("foo").trim().to_hash()
        assert repr(chain) == "TransformChain(subject='foo', steps=[trim, to_hash])"
