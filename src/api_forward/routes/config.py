"""Configuration API: read and replace the endpoint snapshot."""

import logging
import sqlite3
import threading
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api_forward.errors import make_error_response
from api_forward.models.endpoints import Snapshot
from api_forward.registry import EndpointRegistry
from api_forward.store import ConfigStore

logger = logging.getLogger(__name__)


def _validation_messages(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    ]


def create_config_router(registry: EndpointRegistry, store: ConfigStore) -> APIRouter:
    """Create the /config router; callers must guard it with AdminAuth."""
    router = APIRouter()
    save_lock = threading.Lock()

    @router.get("/config")
    async def get_config() -> dict[str, Any]:
        """Return the current snapshot."""
        return registry.snapshot.to_wire()

    @router.post("/config")
    def save_config(payload: Any = Body(None)) -> JSONResponse:
        """Validate, persist, then install a full replacement snapshot."""
        if not isinstance(payload, dict) or (
            "apiUrls" not in payload and "endpoints" not in payload
        ):
            return make_error_response(400, "Invalid configuration format.")

        try:
            snapshot = Snapshot.model_validate(payload)
        except ValidationError as e:
            return make_error_response(
                400, "Invalid configuration format.", _validation_messages(e)
            )

        with save_lock:
            try:
                store.save(snapshot)
            except sqlite3.Error as e:
                logger.error(f"Error saving configuration: {e}")
                return make_error_response(500, str(e))
            registry.replace(snapshot)

        logger.info(f"Configuration replaced: {len(snapshot.endpoints)} endpoints.")
        return JSONResponse({"message": "Configuration saved successfully."})

    return router
