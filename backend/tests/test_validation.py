import pytest

from toolbridge.mcp.errors import ArgumentValidationError
from toolbridge.mcp.validation import validate_arguments

SCHEMA = {
    "type": "object",
    "properties": {
        "owner": {"type": "string"},
        "repo": {"type": "string"},
        "state": {"type": "string", "enum": ["open", "closed"]},
        "per_page": {"type": "number"},
        "draft": {"type": "boolean"},
        "labels": {"type": "array", "items": {"type": "string"}},
        "config": {"type": "object"},
    },
    "required": ["owner", "repo"],
}


def test_valid_arguments_are_returned_as_copy():
    arguments = {"owner": "octo", "repo": "hello", "state": "open"}
    validated = validate_arguments(SCHEMA, arguments)
    assert validated == arguments
    assert validated is not arguments


def test_missing_required_field_names_the_field():
    with pytest.raises(ArgumentValidationError) as excinfo:
        validate_arguments(SCHEMA, {"owner": "octo"})
    assert excinfo.value.field == "repo"
    assert "repo" in str(excinfo.value)


def test_null_counts_as_missing():
    with pytest.raises(ArgumentValidationError) as excinfo:
        validate_arguments(SCHEMA, {"owner": None, "repo": "hello"})
    assert excinfo.value.field == "owner"


def test_none_arguments_are_treated_as_empty():
    assert validate_arguments({"type": "object", "properties": {}}, None) == {}
    with pytest.raises(ArgumentValidationError):
        validate_arguments(SCHEMA, None)


def test_non_mapping_arguments_are_rejected():
    with pytest.raises(ArgumentValidationError) as excinfo:
        validate_arguments(SCHEMA, ["owner", "repo"])
    assert excinfo.value.field == "arguments"


def test_enum_mismatch_lists_allowed_values():
    with pytest.raises(ArgumentValidationError) as excinfo:
        validate_arguments(SCHEMA, {"owner": "o", "repo": "r", "state": "merged"})
    message = str(excinfo.value)
    assert excinfo.value.field == "state"
    assert "'merged'" in message
    assert "open, closed" in message


def test_scalar_type_mismatch_is_rejected():
    with pytest.raises(ArgumentValidationError) as excinfo:
        validate_arguments(SCHEMA, {"owner": "o", "repo": "r", "per_page": "ten"})
    assert excinfo.value.field == "per_page"
    assert "expected number" in str(excinfo.value)


def test_bool_is_not_a_number():
    with pytest.raises(ArgumentValidationError):
        validate_arguments(SCHEMA, {"owner": "o", "repo": "r", "per_page": True})


def test_arrays_and_objects_are_checked_for_outer_shape_only():
    validated = validate_arguments(
        SCHEMA,
        {"owner": "o", "repo": "r", "labels": [1, {"deep": True}], "config": {"url": 3}},
    )
    assert validated["labels"] == [1, {"deep": True}]
    with pytest.raises(ArgumentValidationError):
        validate_arguments(SCHEMA, {"owner": "o", "repo": "r", "labels": "bug"})
    with pytest.raises(ArgumentValidationError):
        validate_arguments(SCHEMA, {"owner": "o", "repo": "r", "config": []})


def test_unknown_type_keywords_and_undeclared_fields_pass():
    schema = {"type": "object", "properties": {"blob": {"type": "binary"}}}
    assert validate_arguments(schema, {"blob": 1, "extra": "x"}) == {"blob": 1, "extra": "x"}


def test_union_types_accept_any_member():
    schema = {"type": "object", "properties": {"id": {"type": ["string", "number"]}}}
    assert validate_arguments(schema, {"id": 3})["id"] == 3
    assert validate_arguments(schema, {"id": "abc"})["id"] == "abc"
    with pytest.raises(ArgumentValidationError):
        validate_arguments(schema, {"id": [3]})
