"""Resolve a request path and query to a redirect, a proxy fetch or an error."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from fastapi.responses import RedirectResponse, Response

from api_forward.errors import ConfigurationError, DispatchError
from api_forward.models.endpoints import (
    EndpointDefinition,
    ProxySettings,
    Snapshot,
    UrlConstruction,
)
from api_forward.proxy import ProxyExecutor
from api_forward.registry import EndpointRegistry
from api_forward.urls import (
    build_draw_redirect,
    build_forward_target,
    build_generic_url,
    build_pollinations_url,
)
from api_forward.validation import validate_params

logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset(
    {
        "favicon.ico",
        "config",
        "admin",
        "admin-login",
        "admin-logout",
        "admin-auth",
        "api",
        "health",
    }
)


@dataclass(frozen=True)
class RouteMiss:
    """The path is not a configured route; the caller decides what follows."""

    reason: str


@dataclass(frozen=True)
class RouteError:
    """The request was handled and failed."""

    error: DispatchError


@dataclass(frozen=True)
class RouteRedirect:
    """Send the caller to another location."""

    location: str


@dataclass(frozen=True)
class RouteProxy:
    """Fetch the target server-side and interpret its body."""

    target_url: str
    settings: ProxySettings = field(default_factory=ProxySettings)


RouteOutcome = RouteMiss | RouteError | RouteRedirect | RouteProxy

Strategy = Callable[
    [EndpointDefinition, Mapping[str, str], Snapshot], RouteRedirect | RouteProxy
]


def _generic(
    endpoint: EndpointDefinition, query: Mapping[str, str], snapshot: Snapshot
) -> RouteRedirect | RouteProxy:
    params = validate_params(endpoint.query_params, query)
    if not endpoint.url:
        raise ConfigurationError(
            "Configuration URL missing", [f"endpoint '{endpoint.key}' has no url"]
        )
    target_url = build_generic_url(endpoint.url, params)
    logger.info(f"[Router] Target: {target_url}")
    if endpoint.method == "proxy":
        return RouteProxy(target_url, endpoint.proxy_settings)
    return RouteRedirect(target_url)


def _special_forward(
    endpoint: EndpointDefinition, query: Mapping[str, str], snapshot: Snapshot
) -> RouteProxy:
    target_url, settings = build_forward_target(endpoint, query)
    return RouteProxy(target_url, settings)


def _special_pollinations(
    endpoint: EndpointDefinition, query: Mapping[str, str], snapshot: Snapshot
) -> RouteRedirect:
    return RouteRedirect(build_pollinations_url(endpoint, query, snapshot.base_tag))


def _special_draw_redirect(
    endpoint: EndpointDefinition, query: Mapping[str, str], snapshot: Snapshot
) -> RouteRedirect:
    return RouteRedirect(build_draw_redirect(endpoint, query))


STRATEGIES: dict[UrlConstruction, Strategy] = {
    UrlConstruction.GENERIC: _generic,
    UrlConstruction.SPECIAL_FORWARD: _special_forward,
    UrlConstruction.SPECIAL_POLLINATIONS: _special_pollinations,
    UrlConstruction.SPECIAL_DRAW_REDIRECT: _special_draw_redirect,
}


class Dispatcher:
    """Tie the registry, URL construction and proxy executor together."""

    def __init__(self, registry: EndpointRegistry, executor: ProxyExecutor):
        self.registry = registry
        self.executor = executor

    def resolve(self, api_key: str, query: Mapping[str, str]) -> RouteOutcome:
        """Decide what to do with ``GET /<api_key>?<query>`` without any I/O."""
        if "." in api_key or api_key in RESERVED_KEYS:
            return RouteMiss(f"'{api_key}' is reserved")

        # One snapshot for the whole request, even if a save lands meanwhile.
        snapshot = self.registry.snapshot
        endpoint = snapshot.endpoints.get(api_key)
        if endpoint is None or not endpoint.method:
            return RouteMiss(f"'{api_key}' is not configured")

        logger.info(f"[Router] Handling /{api_key}")
        strategy = STRATEGIES[endpoint.url_construction]
        try:
            return strategy(endpoint, query, snapshot)
        except DispatchError as e:
            logger.info(f"[Router] /{api_key} rejected: {e.message} {e.details}")
            return RouteError(e)

    async def dispatch(
        self, api_key: str, query: Mapping[str, str]
    ) -> Response | None:
        """Handle the request; None means the path is not a configured route."""
        outcome = self.resolve(api_key, query)
        if isinstance(outcome, RouteMiss):
            return None
        if isinstance(outcome, RouteError):
            return outcome.error.to_response()
        if isinstance(outcome, RouteRedirect):
            return RedirectResponse(outcome.location, status_code=302)
        return await self.executor.execute(outcome.target_url, outcome.settings)
