"""Tests for query parameter validation."""

import pytest

from api_forward.errors import ParameterValidationError
from api_forward.models.endpoints import ParameterSchema
from api_forward.validation import validate_params


def test_supplied_value_accepted():
    """A supplied value is forwarded."""
    schemas = [ParameterSchema(name="size")]
    assert validate_params(schemas, {"size": "large"}) == {"size": "large"}


def test_valid_values_accepts_members():
    """Members of validValues pass."""
    schemas = [ParameterSchema(name="mode", valid_values=["a", "b"])]
    assert validate_params(schemas, {"mode": "a"}) == {"mode": "a"}
    assert validate_params(schemas, {"mode": "b"}) == {"mode": "b"}


def test_valid_values_rejects_others():
    """Anything outside validValues is an error."""
    schemas = [ParameterSchema(name="mode", valid_values=["a", "b"])]
    with pytest.raises(ParameterValidationError) as exc_info:
        validate_params(schemas, {"mode": "c"})
    assert exc_info.value.details == ["invalid value for 'mode'"]
    assert exc_info.value.status_code == 400


def test_default_used_when_absent():
    """Absent optional parameter with default gets the default."""
    schemas = [ParameterSchema(name="fmt", default_value="png")]
    assert validate_params(schemas, {}) == {"fmt": "png"}


def test_absent_without_default_omitted():
    """Absent optional parameter without default is left out."""
    schemas = [ParameterSchema(name="fmt")]
    assert validate_params(schemas, {}) == {}


def test_undeclared_parameters_ignored():
    """Query parameters not in the schema are dropped silently."""
    schemas = [ParameterSchema(name="fmt")]
    assert validate_params(schemas, {"fmt": "jpg", "t": "123"}) == {"fmt": "jpg"}


def test_empty_value_counts_as_present():
    """An empty string is a supplied value, not a missing one."""
    schemas = [ParameterSchema(name="q", required=True)]
    assert validate_params(schemas, {"q": ""}) == {"q": ""}


def test_all_errors_reported():
    """Every violation is reported, not just the first."""
    schemas = [
        ParameterSchema(name="a", required=True),
        ParameterSchema(name="b", valid_values=["x"]),
        ParameterSchema(name="c", required=True),
        ParameterSchema(name="d", default_value="1"),
    ]
    with pytest.raises(ParameterValidationError) as exc_info:
        validate_params(schemas, {"b": "y"})
    assert exc_info.value.details == [
        "missing required parameter: a",
        "invalid value for 'b'",
        "missing required parameter: c",
    ]
