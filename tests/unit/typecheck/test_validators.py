"""
devour — unit tests for validator combinators

File: tests/unit/typecheck/test_validators.py
Last updated: 2026-10-19

Purpose
- Validate optional, union, tuple, array and constant-set combinators.

What this test file should cover
- Accept/reject behavior and rendered type strings.
- Optional excuses only an absent value; ``None`` must satisfy the inner validator.
- Constant sets are isolated from later mutation of their source list.
- Malformed combinator input raises at construction time.
"""

from __future__ import annotations

import json

import pytest

from devour.typecheck import (
    MISSING,
    Fields,
    Kind,
    MetaKind,
    SchemaDefinitionError,
    any_of_constants,
    conforms_to_type,
    describe,
    optional_type,
    type_union_or,
    typed_array,
    typed_list,
    typed_tuple,
)


@pytest.mark.unit
def test_optional_accepts_absence_and_delegates_everything_else() -> None:
    validator = optional_type(Kind.STRING)

    assert validator(MISSING) is True
    assert validator("x") is True
    assert validator(1) is False
    assert validator(None) is False
    assert validator.type_string == "(string)?"
    assert validator.meta_kind is MetaKind.OPTIONAL
    assert validator.is_optional


@pytest.mark.unit
def test_optional_null_is_accepted_only_when_inner_accepts_null() -> None:
    nullable = optional_type(type_union_or(Kind.STRING, Kind.NULL))

    assert nullable(None) is True
    assert nullable.type_string == "(string | null)?"


@pytest.mark.unit
def test_optional_of_nested_declaration_runs_full_conformance() -> None:
    validator = optional_type({"inner": Kind.INTEGER})

    assert validator({"inner": 1}) is True
    assert validator({"inner": "1"}) is False
    assert validator({"inner": 1, "extra": 2}) is False
    assert validator.type_string == '({"inner":"integer"})?'


@pytest.mark.unit
def test_nested_declarations_render_as_a_single_json_document() -> None:
    declaration = {"outer": {"inner": Kind.INTEGER}, "tags": typed_array(Kind.STRING)}

    assert describe(declaration) == '{"outer":{"inner":"integer"},"tags":"string[]"}'
    assert json.loads(describe(declaration)) == {"outer": {"inner": "integer"}, "tags": "string[]"}
    assert json.loads(describe({"a": {"b": {"c": Kind.FLOAT}}})) == {"a": {"b": {"c": "float"}}}
    assert describe(Kind.STRING) == "string"


@pytest.mark.unit
def test_optional_nested_declaration_failure_quotes_the_inner_shape() -> None:
    declaration = {"cfg": optional_type({"outer": {"inner": Kind.INTEGER}})}

    assert conforms_to_type({"cfg": {"outer": {"inner": 1}}}, declaration) is None
    assert conforms_to_type({"cfg": {"outer": {"inner": "1"}}}, declaration) == (
        'Field cfg does not conform to the expected "({"outer":{"inner":"integer"}})?", '
        'observed value: {"outer":{"inner":"1"}}'
    )


@pytest.mark.unit
def test_union_is_inclusive_first_match() -> None:
    validator = type_union_or(Kind.STRING, Kind.INTEGER)

    assert validator("x") is True
    assert validator(1) is True
    assert validator(1.5) is False
    assert validator(True) is False
    assert validator.type_string == "string | integer"
    assert validator.meta_kind is MetaKind.EXCLUSIVE_UNION


@pytest.mark.unit
def test_union_requires_an_alternative() -> None:
    with pytest.raises(SchemaDefinitionError):
        type_union_or()


@pytest.mark.unit
def test_tuple_is_exact_length_and_positional() -> None:
    validator = typed_tuple([Kind.INTEGER, Kind.INTEGER])

    assert validator([1, 2]) is True
    assert validator((1, 2)) is True
    assert validator([1, "2"]) is False
    assert validator([1, 2, 3]) is False
    assert validator([1]) is False
    assert validator("12") is False
    assert validator.type_string == "[integer, integer]"
    assert validator.meta_kind is MetaKind.TUPLE


@pytest.mark.unit
def test_tuple_rejects_a_string_of_positions() -> None:
    with pytest.raises(SchemaDefinitionError):
        typed_tuple("integer")


@pytest.mark.unit
def test_array_is_homogeneous() -> None:
    validator = typed_array(Kind.INTEGER)

    assert validator([1, 2, 3]) is True
    assert validator([]) is True
    assert validator(["1", 2]) is False
    assert validator({}) is False
    assert validator.type_string == "integer[]"
    assert validator.meta_kind is MetaKind.LIST
    assert typed_list is typed_array


@pytest.mark.unit
def test_array_of_field_validator_parenthesizes_the_element_type() -> None:
    ranges = typed_array(typed_tuple([Kind.INTEGER, Kind.INTEGER]))
    either = typed_array(type_union_or(Kind.STRING, Kind.INTEGER))

    assert ranges.type_string == "([integer, integer])[]"
    assert ranges([[1, 2], [3, 4]]) is True
    assert ranges([[1, 2], [3]]) is False
    assert either.type_string == "(string | integer)[]"


@pytest.mark.unit
def test_array_of_declarations_checks_every_element() -> None:
    validator = typed_array({"id": Kind.INTEGER})

    assert validator([{"id": 1}, {"id": 2}]) is True
    assert validator([{"id": 1}, {"id": "2"}]) is False


@pytest.mark.unit
def test_any_of_constants_accepts_only_listed_literals() -> None:
    validator = any_of_constants(["require", "disable"])

    assert validator("require") is True
    assert validator("disable") is True
    assert validator("verify-full") is False
    assert validator(None) is False
    assert validator.type_string == "require | disable"
    assert validator.meta_kind is MetaKind.EXCLUSIVE_UNION


@pytest.mark.unit
def test_any_of_constants_compares_numbers_by_value_and_never_matches_booleans() -> None:
    validator = any_of_constants([1, 2.5])

    assert validator(1) is True
    assert validator(1.0) is True
    assert validator(2.5) is True
    assert validator(True) is False
    assert validator("1") is False


@pytest.mark.unit
def test_any_of_constants_is_isolated_from_source_list_mutation() -> None:
    shared = ["icon", "player"]
    first = any_of_constants(shared)
    shared.append("environment")
    second = any_of_constants(shared)
    shared.clear()

    assert first("environment") is False
    assert first("icon") is True
    assert second("environment") is True
    assert second("icon") is True
    assert first.type_string == "icon | player"


@pytest.mark.unit
@pytest.mark.parametrize("literals", [[], "abc", [True], [None], [["nested"]]])
def test_any_of_constants_rejects_malformed_literals(literals: object) -> None:
    with pytest.raises(SchemaDefinitionError):
        any_of_constants(literals)  # type: ignore[arg-type]


@pytest.mark.unit
def test_combinators_reject_unknown_kind_tags() -> None:
    with pytest.raises(SchemaDefinitionError, match="unknown kind tag 'decimal'"):
        optional_type("decimal")
    with pytest.raises(SchemaDefinitionError, match="position 1"):
        typed_tuple([Kind.INTEGER, "decimal"])
    with pytest.raises(SchemaDefinitionError):
        typed_array(42)


@pytest.mark.unit
def test_fields_namespace_exposes_the_combinators() -> None:
    validator = Fields.optional(Fields.array(Fields.any_of_constants(["a", "b"])))

    assert validator(MISSING) is True
    assert validator(["a", "b", "a"]) is True
    assert validator(["c"]) is False
    assert validator.type_string == "((a | b)[])?"
    assert Fields.union_or(Kind.NULL, Kind.BOOLEAN)(None) is True
    assert Fields.tuple([Kind.STRING])(["x"]) is True
    assert Fields.list(Kind.STRING)(["x"]) is True
