"""Runtime type checking for untyped values such as parsed JSON or YAML.

Build a declaration once out of primitive kinds, combinators and nested
declarations, then call ``conforms_to_type`` on candidate values. ``None``
means the value conforms; any string is a human-readable reason it does not.
"""

from devour.typecheck.conformance import (
    ConformanceResult,
    TraceEntry,
    assert_conforms,
    check_conformance,
    conforms_to_type,
    execute_validator_for_value,
)
from devour.typecheck.errors import ConformanceError, SchemaDefinitionError
from devour.typecheck.formatting import render_value
from devour.typecheck.kinds import MISSING, Kind, validate_simple_type
from devour.typecheck.model import FieldValidator, MetaKind, SchemaNode, StructuralConstraint, describe
from devour.typecheck.structure import (
    Structure,
    at_least_one_of,
    at_most_one_of,
    exactly_one_of,
    field_name_by_value,
)
from devour.typecheck.validators import (
    Fields,
    any_of_constants,
    optional_type,
    type_union_or,
    typed_array,
    typed_list,
    typed_tuple,
)

__all__ = [
    "MISSING",
    "ConformanceError",
    "ConformanceResult",
    "FieldValidator",
    "Fields",
    "Kind",
    "MetaKind",
    "SchemaDefinitionError",
    "SchemaNode",
    "Structure",
    "StructuralConstraint",
    "TraceEntry",
    "any_of_constants",
    "assert_conforms",
    "at_least_one_of",
    "at_most_one_of",
    "check_conformance",
    "conforms_to_type",
    "describe",
    "exactly_one_of",
    "execute_validator_for_value",
    "field_name_by_value",
    "optional_type",
    "render_value",
    "type_union_or",
    "typed_array",
    "typed_list",
    "typed_tuple",
    "validate_simple_type",
]
