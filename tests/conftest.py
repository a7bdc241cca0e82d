"""Shared test fixtures for aumai-dockerrecipe."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aumai_dockerrecipe.core import HistoryDecoder, RecipeSynthesizer
from aumai_dockerrecipe.engine import DockerEngine
from aumai_dockerrecipe.models import LayerRecord


# ---------------------------------------------------------------------------
# History fixtures (newest layer first, as the engine reports them)
# ---------------------------------------------------------------------------


@pytest.fixture()
def single_image_history() -> list[LayerRecord]:
    """Three untagged layers under one tagged top layer."""
    return [
        LayerRecord(
            created_by='/bin/sh -c #(nop) CMD ["nginx" "-g" "daemon off;"]',
            created=1700000400,
            id="sha256:top",
            tags=["myrepo:v1", "myrepo:latest"],
        ),
        LayerRecord(
            created_by="/bin/sh -c apt-get update && apt-get install -y nginx",
            created=1700000300,
            id="<missing>",
        ),
        LayerRecord(
            created_by="/bin/sh -c #(nop) ENV LANG=C.UTF-8",
            created=1700000200,
            id="<missing>",
        ),
        LayerRecord(created_by="", created=1700000100, id="<missing>"),
    ]


@pytest.fixture()
def fat_history() -> list[LayerRecord]:
    """Two stacked images: a tagged base and a tagged derived image."""
    return [
        LayerRecord(
            created_by="/bin/sh -c #(nop) ENTRYPOINT &{[\"/app\"]}",
            id="sha256:app",
            tags=["app:1.0"],
        ),
        LayerRecord(created_by="/bin/sh -c make install", id="<missing>"),
        LayerRecord(
            created_by="/bin/sh -c #(nop) CMD [\"/bin/sh\"]",
            id="sha256:base",
            tags=["base:3.18"],
        ),
        LayerRecord(created_by="/bin/sh -c #(nop) ADD file:abc in / ", id="<missing>"),
    ]


@pytest.fixture()
def engine_history_payload() -> list[dict]:
    """History as returned by the Docker SDK's ``Image.history()``."""
    return [
        {
            "Comment": "",
            "Created": 1700000200,
            "CreatedBy": "/bin/sh -c #(nop)  CMD [\"/bin/sh\"]",
            "Id": "sha256:abc",
            "Size": 0,
            "Tags": ["alpine:3.18"],
        },
        {
            "Comment": None,
            "Created": 1700000100,
            "CreatedBy": "/bin/sh -c #(nop) ADD file:1234 in / ",
            "Id": "<missing>",
            "Size": 7340000,
            "Tags": None,
        },
    ]


# ---------------------------------------------------------------------------
# Core objects
# ---------------------------------------------------------------------------


@pytest.fixture()
def decoder() -> HistoryDecoder:
    return HistoryDecoder()


@pytest.fixture()
def synthesizer() -> RecipeSynthesizer:
    return RecipeSynthesizer()


# ---------------------------------------------------------------------------
# Docker client stand-in
# ---------------------------------------------------------------------------


@pytest.fixture()
def docker_client(engine_history_payload: list[dict]) -> MagicMock:
    client = MagicMock()
    image = client.images.get.return_value
    image.history.return_value = engine_history_payload
    image.attrs = {
        "Config": {
            "WorkingDir": "/srv",
            "Env": ["PATH=/usr/bin", "MODE=prod"],
            "ExposedPorts": {"8080/tcp": {}, "443/tcp": {}},
            "Entrypoint": ["/srv/run"],
            "Cmd": None,
        }
    }
    return client


@pytest.fixture()
def engine(docker_client: MagicMock) -> DockerEngine:
    return DockerEngine(client=docker_client)
