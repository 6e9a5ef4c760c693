"""Pydantic models for the endpoint configuration snapshot."""

import logging
import re
from enum import Enum
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "默认分组"

UNSAFE_KEY_PATTERN = re.compile(r"[/?#.%\s]")


class UrlConstruction(str, Enum):
    """Strategies for building the outbound URL of an endpoint."""

    GENERIC = "generic"
    SPECIAL_FORWARD = "special_forward"
    SPECIAL_POLLINATIONS = "special_pollinations"
    SPECIAL_DRAW_REDIRECT = "special_draw_redirect"


class ParameterSchema(BaseModel):
    """A query parameter accepted by an endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    required: bool = False
    default_value: str | None = Field(default=None, alias="defaultValue")
    valid_values: list[str] | None = Field(default=None, alias="validValues")


class ProxySettings(BaseModel):
    """How a proxied response is interpreted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    image_url_field: str | None = Field(default=None, alias="imageUrlField")
    image_url_field_from_param: bool | None = Field(
        default=None, alias="imageUrlFieldFromParam"
    )
    image_url_field_from_param_default: str | None = Field(
        default=None, alias="imageUrlFieldFromParamDefault"
    )
    fallback_action: Literal["returnJson", "error"] = Field(
        default="returnJson", alias="fallbackAction"
    )


class EndpointDefinition(BaseModel):
    """One configured route, keyed by its path segment."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str = Field(default="", exclude=True)
    group: str = DEFAULT_GROUP
    description: str = ""
    url: str = ""
    method: Literal["redirect", "proxy"] | None = None
    type: Literal["image", "video"] = "image"
    url_construction: UrlConstruction = Field(
        default=UrlConstruction.GENERIC, alias="urlConstruction"
    )
    model_name: str | None = Field(default=None, alias="modelName")
    query_params: list[ParameterSchema] = Field(
        default_factory=list, alias="queryParams"
    )
    proxy_settings: ProxySettings = Field(
        default_factory=ProxySettings, alias="proxySettings"
    )

    @field_validator("method", mode="before")
    @classmethod
    def _blank_method_is_missing(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("url_construction", mode="before")
    @classmethod
    def _coerce_url_construction(cls, value: Any) -> Any:
        if value is None or value == "":
            return UrlConstruction.GENERIC
        if isinstance(value, UrlConstruction):
            return value
        try:
            return UrlConstruction(value)
        except ValueError:
            logger.warning(f"Unknown urlConstruction {value!r}, using generic")
            return UrlConstruction.GENERIC

    @field_validator("query_params", mode="before")
    @classmethod
    def _null_params_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("proxy_settings", mode="before")
    @classmethod
    def _null_settings_are_default(cls, value: Any) -> Any:
        return {} if value is None else value

    def find_param(self, name: str) -> ParameterSchema | None:
        """Return the schema entry named ``name``, if declared."""
        return next((p for p in self.query_params if p.name == name), None)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase names, omitting unset optional strategy fields."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if self.url_construction is UrlConstruction.GENERIC:
            data.pop("urlConstruction", None)
        return data


class Snapshot(BaseModel):
    """The complete, replaceable set of endpoints plus the global base tag."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    endpoints: dict[str, EndpointDefinition] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("apiUrls", "endpoints"),
        serialization_alias="apiUrls",
    )
    base_tag: str = Field(default="", alias="baseTag")

    @field_validator("base_tag", mode="before")
    @classmethod
    def _null_tag_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("endpoints")
    @classmethod
    def _check_keys(
        cls, value: dict[str, EndpointDefinition]
    ) -> dict[str, EndpointDefinition]:
        for key in value:
            if not key or UNSAFE_KEY_PATTERN.search(key):
                raise ValueError(f"Endpoint key {key!r} is not a valid path segment")
        return value

    @model_validator(mode="after")
    def _attach_keys(self) -> "Snapshot":
        # Each definition carries its own key so it can be handed around alone.
        for key, endpoint in list(self.endpoints.items()):
            if endpoint.key != key:
                self.endpoints[key] = endpoint.model_copy(update={"key": key})
        return self

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON shape served by ``GET /config``."""
        return {
            "apiUrls": {key: ep.to_wire() for key, ep in self.endpoints.items()},
            "baseTag": self.base_tag,
        }
