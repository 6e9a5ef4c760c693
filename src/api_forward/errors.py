"""Dispatch errors and their JSON rendering."""

from fastapi.responses import JSONResponse


class DispatchError(Exception):
    """A terminal failure for the current request."""

    status_code = 500

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    def to_response(self) -> JSONResponse:
        return make_error_response(self.status_code, self.message, self.details)


class ParameterValidationError(DispatchError):
    """One or more query parameters were missing or not allowed."""

    status_code = 400

    def __init__(self, details: list[str]):
        super().__init__("Invalid parameters", details)


class ConfigurationError(DispatchError):
    """The endpoint configuration itself is unusable."""

    status_code = 500


def make_error_response(
    status_code: int, message: str, details: list[str] | None = None, **extra
) -> JSONResponse:
    """Create the service's JSON error response."""
    content: dict = {"error": message}
    if details:
        content["details"] = details
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)
