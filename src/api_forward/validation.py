"""Query parameter validation against an endpoint's parameter schema."""

from collections.abc import Iterable, Mapping

from api_forward.errors import ParameterValidationError
from api_forward.models.endpoints import ParameterSchema


def validate_params(
    schemas: Iterable[ParameterSchema], query: Mapping[str, str]
) -> dict[str, str]:
    """
    Validate ``query`` against ``schemas``.

    Undeclared query parameters are ignored. Every schema entry is checked on
    its own, and all problems are collected before failing.

    Returns:
        Mapping of parameter name to the value to forward, in schema order.

    Raises:
        ParameterValidationError: With one message per violation.
    """
    validated: dict[str, str] = {}
    errors: list[str] = []

    for param in schemas:
        value = query.get(param.name)
        if value is not None:
            if param.valid_values is not None and value not in param.valid_values:
                errors.append(f"invalid value for '{param.name}'")
            else:
                validated[param.name] = value
        elif param.required:
            errors.append(f"missing required parameter: {param.name}")
        elif param.default_value is not None:
            validated[param.name] = param.default_value

    if errors:
        raise ParameterValidationError(errors)

    return validated
