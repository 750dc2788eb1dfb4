"""
devour — unit tests for the conformance evaluator

File: tests/unit/typecheck/test_conformance.py
Last updated: 2026-10-19

Purpose
- Pin the exact human-readable messages and the check order of ``conforms_to_type``.

What this test file should cover
- Bare kinds, bare field validators, and declarations as the top-level validator.
- Closed declarations: extra keys, then missing keys, then fields in order.
- Nested failures chain ``Field <key> failed nested type check``.
- Structured trace, depth guard, and the raising variant.

Non-functional requirements
- Messages are compared verbatim; they are a stable interface.
"""

from __future__ import annotations

import pytest

from devour.typecheck import (
    MISSING,
    ConformanceError,
    Kind,
    SchemaDefinitionError,
    SchemaNode,
    any_of_constants,
    assert_conforms,
    check_conformance,
    conforms_to_type,
    execute_validator_for_value,
    optional_type,
    typed_array,
    typed_tuple,
)


@pytest.mark.unit
def test_bare_kind_success_and_failure_message() -> None:
    assert conforms_to_type("x", Kind.STRING) is None
    assert conforms_to_type(1, Kind.STRING) == 'Object is expected to be of type "string", observed value: 1'


@pytest.mark.unit
def test_bare_field_validator_failure_message() -> None:
    validator = typed_tuple([Kind.INTEGER, Kind.INTEGER])

    assert conforms_to_type([1, 2], validator) is None
    assert (
        conforms_to_type([1, "2"], validator)
        == 'Object does not conform to the expected "[integer, integer]", observed value: [1,"2"]'
    )


@pytest.mark.unit
def test_declaration_rejects_non_objects() -> None:
    assert (
        conforms_to_type([1], {"a": Kind.STRING})
        == 'Object is expected to be of type "object", observed value: [1]'
    )
    assert (
        conforms_to_type(None, {"a": Kind.STRING})
        == 'Object is expected to be of type "object", observed value: null'
    )


@pytest.mark.unit
def test_closed_declaration_reports_extra_keys() -> None:
    assert conforms_to_type({"a": "x", "b": 1}, {"a": Kind.STRING}) == "Extra key in object: b"
    assert (
        conforms_to_type({"a": "x", "b": 1, "c": 2}, {"a": Kind.STRING})
        == "Extra keys in object: b, c"
    )


@pytest.mark.unit
def test_extra_keys_are_reported_before_missing_keys() -> None:
    assert conforms_to_type({"b": 1}, {"a": Kind.STRING}) == "Extra key in object: b"


@pytest.mark.unit
def test_missing_required_versus_missing_optional() -> None:
    declaration = {"a": Kind.STRING, "b": optional_type(Kind.STRING)}

    assert conforms_to_type({"a": "x"}, declaration) is None
    error = conforms_to_type({}, declaration)
    assert error == "Missing key in object: a"
    assert "b" not in error


@pytest.mark.unit
def test_missing_keys_are_plural_aware_and_in_declaration_order() -> None:
    declaration = {"z": Kind.STRING, "a": Kind.INTEGER, "m": Kind.BOOLEAN}

    assert conforms_to_type({"a": 1}, declaration) == "Missing keys in object: z, m"


@pytest.mark.unit
def test_only_optional_meta_kind_excuses_absence() -> None:
    declaration = {"a": any_of_constants(["x"])}

    assert conforms_to_type({}, declaration) == "Missing key in object: a"


@pytest.mark.unit
def test_null_does_not_satisfy_optional_string() -> None:
    declaration = {"alias": optional_type(Kind.STRING)}

    assert (
        conforms_to_type({"alias": None}, declaration)
        == 'Field alias does not conform to the expected "(string)?", observed value: null'
    )


@pytest.mark.unit
def test_field_kind_failure_message() -> None:
    assert (
        conforms_to_type({"port": "5432"}, {"port": Kind.INTEGER})
        == 'Field port is expected to exist and be of type "integer" but had value: 5432'
    )


@pytest.mark.unit
def test_field_validator_failure_message() -> None:
    declaration = {"sslMode": any_of_constants(["require", "disable"])}

    assert (
        conforms_to_type({"sslMode": "prefer"}, declaration)
        == 'Field sslMode does not conform to the expected "require | disable", observed value: prefer'
    )


@pytest.mark.unit
def test_first_failing_field_in_declaration_order_wins() -> None:
    declaration = {"a": Kind.STRING, "b": Kind.STRING}

    error = conforms_to_type({"b": 2, "a": 1}, declaration)
    assert error is not None
    assert error.startswith("Field a ")


@pytest.mark.unit
def test_nested_failure_chains_both_levels() -> None:
    declaration = {"outer": {"inner": Kind.INTEGER}}

    assert conforms_to_type({"outer": {"inner": 1}}, declaration) is None
    assert conforms_to_type({"outer": {"inner": "1"}}, declaration) == (
        "Field outer failed nested type check:\n"
        '\tField inner is expected to exist and be of type "integer" but had value: 1'
    )


@pytest.mark.unit
def test_nested_declaration_given_a_non_object() -> None:
    declaration = {"outer": {"inner": Kind.INTEGER}}

    assert conforms_to_type({"outer": 3}, declaration) == (
        "Field outer failed nested type check:\n"
        '\tObject is expected to be of type "object", observed value: 3'
    )


@pytest.mark.unit
def test_three_level_chain() -> None:
    declaration = {"a": {"b": {"c": Kind.BOOLEAN}}}

    assert conforms_to_type({"a": {"b": {}}}, declaration) == (
        "Field a failed nested type check:\n"
        "\tField b failed nested type check:\n"
        "\tMissing key in object: c"
    )


@pytest.mark.unit
def test_trace_runs_from_root_to_failing_leaf() -> None:
    declaration = {"outer": {"inner": Kind.INTEGER}}
    result = check_conformance({"outer": {"inner": "1"}}, declaration)

    assert not result
    assert not result.ok
    assert result.failing_path == ("outer", "inner")
    assert [entry.path for entry in result.trace] == [("outer",), ("outer", "inner")]
    assert result.trace[0].expected_type == '{"inner":"integer"}'
    assert result.trace[-1].expected_type == "integer"
    assert result.trace[-1].observed_value == "1"
    assert result.trace[-1].dotted_path == "outer.inner"


@pytest.mark.unit
def test_successful_check_has_empty_trace() -> None:
    result = check_conformance({"a": 1}, {"a": Kind.INTEGER})

    assert result
    assert result.error is None
    assert result.trace == ()
    assert result.failing_path == ()


@pytest.mark.unit
def test_depth_guard_reports_instead_of_recursing() -> None:
    declaration = {"outer": {"inner": Kind.INTEGER}}

    assert conforms_to_type({"outer": {"inner": 1}}, declaration, max_depth=2) is None
    assert conforms_to_type({"outer": {"inner": 1}}, declaration, max_depth=1) == (
        "Field outer failed nested type check:\n\tMaximum nesting depth of 1 exceeded"
    )


@pytest.mark.unit
def test_depth_limit_reaches_declarations_inside_combinators() -> None:
    declaration = {"a": typed_array({"b": {"c": Kind.INTEGER}})}
    value = {"a": [{"b": {"c": 1}}]}

    assert conforms_to_type(value, declaration) is None
    assert conforms_to_type(value, declaration, max_depth=3) is None
    for max_depth in (1, 2):
        message = conforms_to_type(value, declaration, max_depth=max_depth)
        assert message is not None
        assert message.startswith("Field a does not conform to the expected ")


@pytest.mark.unit
def test_depth_limit_reaches_declarations_inside_optional() -> None:
    declaration = {"cfg": optional_type({"outer": {"inner": Kind.INTEGER}})}
    value = {"cfg": {"outer": {"inner": 1}}}

    assert conforms_to_type(value, declaration, max_depth=3) is None
    assert conforms_to_type(value, declaration, max_depth=2) is not None
    assert conforms_to_type({}, declaration, max_depth=1) is None


@pytest.mark.unit
@pytest.mark.parametrize("max_depth", [0, -1, 2048, True, "64"])
def test_invalid_max_depth_is_a_definition_error(max_depth: object) -> None:
    with pytest.raises(SchemaDefinitionError):
        conforms_to_type({}, {}, max_depth=max_depth)  # type: ignore[arg-type]


@pytest.mark.unit
def test_unknown_validator_raises_definition_error() -> None:
    with pytest.raises(SchemaDefinitionError):
        conforms_to_type(1, 1.5)
    with pytest.raises(SchemaDefinitionError):
        conforms_to_type({"a": 1}, {"a": "decimal"})


@pytest.mark.unit
def test_plain_kind_strings_work_inside_declarations() -> None:
    assert conforms_to_type({"a": 1}, {"a": "integer"}) is None
    assert conforms_to_type("x", "string") is None


@pytest.mark.unit
def test_lenient_node_tolerates_extra_keys() -> None:
    lenient = SchemaNode({"a": Kind.STRING}, strict=False)

    assert conforms_to_type({"a": "x", "b": 1}, lenient) is None
    assert conforms_to_type({"b": 1}, lenient) == "Missing key in object: a"


@pytest.mark.unit
def test_assert_conforms_returns_value_or_raises() -> None:
    payload = {"a": "x"}

    assert assert_conforms(payload, {"a": Kind.STRING}) is payload
    with pytest.raises(ConformanceError) as exc_info:
        assert_conforms({}, {"a": Kind.STRING}, label="payload")
    assert exc_info.value.detail == "Missing key in object: a"
    assert exc_info.value.label == "payload"
    assert str(exc_info.value) == "payload: Missing key in object: a"


@pytest.mark.unit
def test_execute_validator_for_value_uses_field_messages() -> None:
    assert execute_validator_for_value(1, "n", Kind.INTEGER) is None
    assert (
        execute_validator_for_value("x", "n", Kind.INTEGER)
        == 'Field n is expected to exist and be of type "integer" but had value: x'
    )
    assert execute_validator_for_value({}, "obj", {"k": Kind.STRING}) == (
        "Field obj failed nested type check:\n\tMissing key in object: k"
    )


@pytest.mark.unit
def test_absent_value_renders_as_undefined() -> None:
    assert (
        conforms_to_type(MISSING, Kind.STRING)
        == 'Object is expected to be of type "string", observed value: undefined'
    )


@pytest.mark.unit
def test_input_is_never_mutated() -> None:
    payload = {"outer": {"inner": "1"}, "list": [1, 2]}
    snapshot = {"outer": {"inner": "1"}, "list": [1, 2]}

    conforms_to_type(payload, {"outer": {"inner": Kind.INTEGER}, "list": Kind.ARRAY})

    assert payload == snapshot
