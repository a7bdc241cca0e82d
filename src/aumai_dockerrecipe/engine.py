"""Container engine access for aumai-dockerrecipe."""

from __future__ import annotations

import logging

import docker
from docker.errors import DockerException
from pydantic import ValidationError

from .exceptions import HistoryFetchError
from .models import LayerRecord, RuntimeInfo

__all__ = ["DockerEngine"]

logger = logging.getLogger(__name__)


class DockerEngine:
    """
    Reads image history and runtime configuration from a Docker daemon.

    Without an explicit client or *base_url* the connection is configured
    from the standard Docker environment (``DOCKER_HOST`` and friends).
    """

    def __init__(
        self,
        client: docker.DockerClient | None = None,
        base_url: str | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                if self._base_url:
                    self._client = docker.DockerClient(base_url=self._base_url)
                else:
                    self._client = docker.from_env()
            except DockerException as exc:
                raise HistoryFetchError(f"Cannot connect to Docker: {exc}") from exc
        return self._client

    def fetch_history(self, image: str) -> list[LayerRecord]:
        """Return the layer history of *image*, newest layer first."""
        try:
            raw_history = self.client.images.get(image).history()
        except DockerException as exc:
            raise HistoryFetchError(
                f"Cannot fetch history for image {image!r}: {exc}"
            ) from exc

        logger.debug("Fetched %d history records for %s", len(raw_history), image)
        try:
            return [LayerRecord.model_validate(entry) for entry in raw_history]
        except ValidationError as exc:
            raise HistoryFetchError(
                f"Unreadable history for image {image!r}: {exc}"
            ) from exc

    def fetch_runtime_info(self, image: str) -> RuntimeInfo:
        """Return the runtime metadata recorded in *image*'s config."""
        try:
            attrs = self.client.images.get(image).attrs
        except DockerException as exc:
            raise HistoryFetchError(
                f"Cannot inspect image {image!r}: {exc}"
            ) from exc
        return RuntimeInfo.from_engine_config(attrs.get("Config"))
