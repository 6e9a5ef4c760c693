"""Homepage data endpoint."""

from typing import Any

from fastapi import APIRouter, Request

from api_forward.catalogue import build_groups, build_llm_prompt
from api_forward.registry import EndpointRegistry


def create_catalogue_router(registry: EndpointRegistry) -> APIRouter:
    router = APIRouter()

    @router.get("/api/homepage-data")
    async def homepage_data(request: Request) -> dict[str, Any]:
        """Return the endpoint listing and the LLM prompt for the homepage."""
        snapshot = registry.snapshot
        base_url = str(request.base_url).rstrip("/")
        return {
            "llmPrompt": build_llm_prompt(snapshot, base_url),
            "groups": build_groups(snapshot, base_url),
        }

    return router
