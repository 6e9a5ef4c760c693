"""In-memory endpoint registry read by the dispatcher on every request."""

from api_forward.models.endpoints import EndpointDefinition, Snapshot


class EndpointRegistry:
    """Hold the current snapshot and serve lookups by key.

    The snapshot is swapped by reference, so a reader that grabbed
    ``registry.snapshot`` keeps a consistent view for the rest of its request.
    """

    def __init__(self, snapshot: Snapshot | None = None):
        self._snapshot = snapshot if snapshot is not None else Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def get(self, key: str) -> EndpointDefinition | None:
        """Return the endpoint for ``key``, or None when it is not a route."""
        return self._snapshot.endpoints.get(key)

    def replace(self, snapshot: Snapshot) -> None:
        """Install ``snapshot`` as the current configuration."""
        self._snapshot = snapshot
