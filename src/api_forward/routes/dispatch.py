"""Dynamic endpoint route: GET /<api_key>."""

from fastapi import APIRouter, Request, Response

from api_forward.dispatcher import Dispatcher
from api_forward.errors import make_error_response


def create_dispatch_router(dispatcher: Dispatcher) -> APIRouter:
    """Create the catch-all endpoint router; include it after every fixed route."""
    router = APIRouter()

    @router.get("/{api_key}")
    async def dispatch(api_key: str, request: Request) -> Response:
        """Handle GET /<api_key> for configured endpoints."""
        # Repeated names collapse to the last value.
        query = dict(request.query_params)
        response = await dispatcher.dispatch(api_key, query)
        if response is None:
            return make_error_response(404, "Not found")
        return response

    return router
