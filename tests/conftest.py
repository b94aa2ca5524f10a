"""Shared pytest fixtures for the imageapi test suite."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from datetime import datetime, timezone

import pytest
from kubernetes.client import V1ObjectMeta

from imageapi.models import Image, ImageRepository, ImageRepositoryStatus, TagEvent, TagEventList

_V1_COMPATIBILITY: dict[str, object] = {
    "id": "2d24f826cb16146e2016ff349a8a33ed5830f3b938d45c0f82943f4ab8c097e7",
    "parent": "117ee323aaa9d1b136ea55e4421f4ce413dfc6c0cc6b2186dea6c88d93e1ad7c",
    "created": "2015-02-21T02:11:06.735146646Z",
    "container": "c9a3eda5951d28aa8dbe5933be94c523790721e4f80886d0a8e7a710132a38ec",
    "container_config": {"Hostname": "43bd710ec89a", "Cmd": ["/bin/sh", "-c", "#(nop) CMD [/bin/bash]"]},
    "docker_version": "1.4.1",
    "author": "Image Builder <builder@example.com>",
    "config": {"Hostname": "43bd710ec89a", "Cmd": ["/bin/bash"]},
    "architecture": "amd64",
    "os": "linux",
    "Size": 1895,
}


def _build_manifest(*v1_compatibility: dict[str, object]) -> str:
    return json.dumps(
        {
            "schemaVersion": 1,
            "name": "library/ubuntu",
            "tag": "14.04",
            "architecture": "amd64",
            "history": [{"v1Compatibility": json.dumps(record)} for record in v1_compatibility],
        }
    )


@pytest.fixture()
def v1_compatibility() -> dict[str, object]:
    """Return a realistic v1 compatibility record as written by the image builder.

    Returns:
        A fresh copy of the record, safe to modify.
    """
    return copy.deepcopy(_V1_COMPATIBILITY)


@pytest.fixture()
def make_manifest() -> Callable[..., str]:
    """Return a factory building schema 1 manifests.

    The factory takes v1 compatibility records, most recent first, and
    returns the manifest as a JSON string.
    """
    return _build_manifest


@pytest.fixture()
def sample_image() -> Image:
    """Create an ``Image`` carrying a two-entry schema 1 manifest.

    Returns:
        An ``Image`` whose metadata has not been populated yet.
    """
    return Image(
        metadata=V1ObjectMeta(name="sha256:2d24f826cb16", namespace="default"),
        docker_image_reference="registry.example.com:5000/library/ubuntu@sha256:2d24f826cb16",
        docker_image_manifest=_build_manifest(_V1_COMPATIBILITY, {"id": _V1_COMPATIBILITY["parent"]}),
    )


@pytest.fixture()
def sample_repository() -> ImageRepository:
    """Create an ``ImageRepository`` with history for ``latest`` and an empty history for ``stable``.

    Returns:
        An ``ImageRepository`` in namespace ``default`` named ``ruby``.
    """
    return ImageRepository(
        metadata=V1ObjectMeta(name="ruby", namespace="default"),
        docker_image_repository="registry.example.com:5000/default/ruby",
        tags={"latest": "default/ruby:latest", "stable": "default/ruby:stable", "beta": "default/ruby:beta"},
        status=ImageRepositoryStatus(
            docker_image_repository="registry.example.com:5000/default/ruby",
            tags={
                "latest": TagEventList(
                    items=[
                        TagEvent(
                            created=datetime(2015, 3, 2, 10, 0, tzinfo=timezone.utc),
                            docker_image_reference="registry.example.com:5000/default/ruby@sha256:bbbb",
                            image="sha256:bbbb",
                            generation=2,
                        ),
                        TagEvent(
                            created=datetime(2015, 3, 1, 10, 0, tzinfo=timezone.utc),
                            docker_image_reference="registry.example.com:5000/default/ruby@sha256:aaaa",
                            image="sha256:aaaa",
                            generation=1,
                        ),
                    ]
                ),
                "stable": TagEventList(items=[]),
            },
        ),
    )
