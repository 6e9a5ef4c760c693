"""Build outbound URLs and redirect locations for configured endpoints."""

import logging
from collections.abc import Mapping
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from api_forward.errors import ConfigurationError, ParameterValidationError
from api_forward.models.endpoints import EndpointDefinition, ProxySettings

logger = logging.getLogger(__name__)

DEFAULT_FORWARD_FIELD = "url"
DEFAULT_DRAW_MODEL = "flux"
DEFAULT_DRAW_MODELS = ("flux", "turbo")


def encode_component(value: str) -> str:
    """Percent-encode ``value`` for use inside a path or query component."""
    return quote(value, safe="!~*'()")


def _missing(name: str) -> str:
    return f"missing required query parameter: {name}"


def _append_parsed(base_url: str, params: Mapping[str, str]) -> str:
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute URL: {base_url!r}")
    path = parts.path
    if not path and parts.scheme in ("http", "https"):
        path = "/"
    encoded = urlencode(params)
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


def build_generic_url(base_url: str, params: Mapping[str, str]) -> str:
    """
    Append validated parameters to ``base_url``.

    Parameters already present in the base URL's query are kept, so a
    parameter can appear twice. A base URL that does not parse as an
    absolute URL gets the parameters concatenated onto the raw string.
    """
    if not params:
        return base_url
    try:
        return _append_parsed(base_url, params)
    except ValueError:
        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}{urlencode(params)}"


def build_forward_target(
    endpoint: EndpointDefinition, query: Mapping[str, str]
) -> tuple[str, ProxySettings]:
    """Resolve the caller-supplied target and extraction field for forwarding."""
    target_url = query.get("url")
    if not target_url:
        raise ParameterValidationError([_missing("url")])

    settings = endpoint.proxy_settings
    field = (
        query.get("field")
        or settings.image_url_field_from_param_default
        or DEFAULT_FORWARD_FIELD
    )
    return target_url, settings.model_copy(update={"image_url_field": field})


def build_pollinations_url(
    endpoint: EndpointDefinition, query: Mapping[str, str], base_tag: str
) -> str:
    """Build the prompt URL: encoded tags, an encoded comma, then the base tag."""
    tags = query.get("tags")
    if not tags:
        raise ParameterValidationError([_missing("tags")])
    if not endpoint.model_name:
        raise ConfigurationError(
            f"Endpoint '{endpoint.key}' has no modelName configured"
        )
    return (
        f"{endpoint.url}{encode_component(tags)}%2c{base_tag}"
        f"?&model={endpoint.model_name}&nologo=true"
    )


def build_draw_redirect(
    endpoint: EndpointDefinition, query: Mapping[str, str]
) -> str:
    """Pick a drawing model and return the internal path that serves it."""
    errors: list[str] = []

    tags = query.get("tags")
    if not tags:
        errors.append(_missing("tags"))

    schema = endpoint.find_param("model")
    model = (
        query.get("model")
        or (schema.default_value if schema is not None else None)
        or DEFAULT_DRAW_MODEL
    )
    valid_models = (
        schema.valid_values
        if schema is not None and schema.valid_values
        else list(DEFAULT_DRAW_MODELS)
    )
    if model not in valid_models:
        errors.append(
            f"invalid value for 'model'; valid options: {', '.join(valid_models)}"
        )

    if errors:
        raise ParameterValidationError(errors)

    return f"/{encode_component(model)}?tags={encode_component(tags)}"
