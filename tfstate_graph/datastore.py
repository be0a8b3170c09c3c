"""Datastore HTTP client for uploading and fetching state graphs per layer.

The datastore keeps one graph per ``(namespace, layer)`` pair under
``/api/stategraph``. Requests carry an ``Authorization`` header whose value is
read from a projected service-account token file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from tfstate_graph.config import DEFAULT_DATASTORE_URL, DEFAULT_TOKEN_PATH
from tfstate_graph.errors import StateGraphError, StateGraphNotFound

logger = logging.getLogger(__name__)

_TIMEOUT = httpx.Timeout(15.0, connect=5.0)
_STATE_GRAPH_PATH = "/api/stategraph"


class DatastoreClient:
    """Lightweight datastore HTTP API client.

    Parameters
    ----------
    base_url : str
        Base URL of the datastore (e.g. ``http://burrito-datastore.burrito-system``).
    token_path : str
        File holding the token sent as the ``Authorization`` header. Skipped
        when the file does not exist.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_DATASTORE_URL,
        token_path: str = DEFAULT_TOKEN_PATH,
        *,
        verify: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_path = token_path
        self._client = httpx.Client(base_url=self.base_url, timeout=_TIMEOUT, verify=verify)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DatastoreClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        # Tokens are rotated on disk, so read on every request.
        path = Path(self.token_path)
        if not path.is_file():
            logger.debug("No datastore token at %s, sending unauthenticated request", path)
            return {}
        return {"Authorization": path.read_text(encoding="utf-8").strip()}

    @staticmethod
    def _params(namespace: str, layer: str) -> dict[str, str]:
        if not namespace or not layer:
            raise ValueError("namespace and layer are required")
        return {"namespace": namespace, "layer": layer}

    # ── State graphs ──────────────────────────────────────────────────────

    def get_state_graph(self, namespace: str, layer: str) -> bytes:
        """Fetch the stored graph JSON for a layer."""
        resp = self._client.get(
            _STATE_GRAPH_PATH, params=self._params(namespace, layer), headers=self._headers()
        )
        if resp.status_code == 404:
            raise StateGraphNotFound(f"no state graph for layer {namespace}/{layer}")
        if resp.status_code != 200:
            raise StateGraphError(
                "could not get state graph, there's an issue with the storage backend"
            )
        return resp.content

    def put_state_graph(self, namespace: str, layer: str, content: bytes) -> None:
        """Upload graph JSON for a layer, replacing any previous one."""
        headers = {"Content-Type": "application/octet-stream", **self._headers()}
        resp = self._client.put(
            _STATE_GRAPH_PATH,
            params=self._params(namespace, layer),
            content=content,
            headers=headers,
        )
        if resp.status_code != 200:
            raise StateGraphError(
                "could not put state graph, there's an issue with the storage backend: "
                f"{resp.text[:500]}"
            )
        logger.info("Uploaded state graph for %s/%s (%d bytes)", namespace, layer, len(content))
