"""Convert image API documents to and from imageapi model values.

Documents use the camelCase JSON keys served by the image API, e.g.::

    {"metadata": {"namespace": "ns", "name": "repo"},
     "tags": {"latest": "ns/repo:latest"},
     "status": {"tags": {"latest": {"items": [{"image": "sha256:..."}]}}}}
"""

from __future__ import annotations

import json
import sys
from dataclasses import fields, is_dataclass
from datetime import datetime
from functools import cache
from pathlib import Path
from typing import Any

import kubernetes.client
from dateutil.parser import isoparse
from kubernetes.client import V1ObjectMeta

from .exceptions import ManifestDecodeError
from .metadata import docker_image_metadata_from_dict
from .models import (
    Image,
    ImageRepository,
    ImageRepositoryStatus,
    TagEvent,
    TagEventList,
)


@cache
def _api_client() -> kubernetes.client.ApiClient:
    return kubernetes.client.ApiClient()


def _camel_case(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part.title() for part in rest)


def _object(document: Any, what: str) -> dict[str, Any]:
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(document).__name__}")
    return document


def _string(document: dict[str, Any], key: str, what: str) -> str:
    value = document.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what}.{key} must be a string")
    return value


def _timestamp(value: Any, what: str) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{what} must be an RFC 3339 timestamp string")
    try:
        return isoparse(value)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"{what} is not a valid RFC 3339 timestamp: {value}") from e


def read_document(path: str) -> dict[str, Any]:
    """Read a JSON document from ``path`` (``-`` reads standard input).

    Raises:
        ValueError: If the file cannot be read, is not valid JSON, or is not a JSON object.
    """
    try:
        raw = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Unable to read {path}: {e}") from e

    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    return _object(document, path)


def load_object_meta(document: dict[str, Any] | None) -> V1ObjectMeta:
    """Build a ``V1ObjectMeta`` from the ``metadata`` block of an API document."""
    document = _object(document, "metadata")
    return V1ObjectMeta(
        name=document.get("name"),
        namespace=document.get("namespace"),
        uid=document.get("uid"),
        resource_version=document.get("resourceVersion"),
        generation=document.get("generation"),
        creation_timestamp=_timestamp(document.get("creationTimestamp"), "metadata.creationTimestamp"),
        labels=document.get("labels"),
        annotations=document.get("annotations"),
    )


def load_image(document: dict[str, Any]) -> Image:
    """Build an :class:`Image` from an image API document.

    Raises:
        ValueError: If the document is malformed.
    """
    document = _object(document, "image")

    metadata_document = _object(document.get("dockerImageMetadata"), "dockerImageMetadata")
    try:
        image_metadata = docker_image_metadata_from_dict(metadata_document)
    except ManifestDecodeError as e:
        raise ValueError(f"Invalid dockerImageMetadata: {e}") from e

    return Image(
        metadata=load_object_meta(document.get("metadata")),
        docker_image_reference=_string(document, "dockerImageReference", "image"),
        docker_image_metadata=image_metadata,
        docker_image_manifest=_string(document, "dockerImageManifest", "image"),
    )


def load_tag_event(document: dict[str, Any], what: str = "tag event") -> TagEvent:
    """Build a :class:`TagEvent` from a tag history item."""
    document = _object(document, what)
    generation = document.get("generation")
    if generation is None:
        generation = 0
    if isinstance(generation, bool) or not isinstance(generation, int):
        raise ValueError(f"{what}.generation must be an integer")
    return TagEvent(
        created=_timestamp(document.get("created"), f"{what}.created"),
        docker_image_reference=_string(document, "dockerImageReference", what),
        image=_string(document, "image", what),
        generation=generation,
    )


def load_image_repository(document: dict[str, Any]) -> ImageRepository:
    """Build an :class:`ImageRepository` from an image repository API document.

    Tag history items keep their document order, so the first item stays the
    most recent one.

    Raises:
        ValueError: If the document is malformed.
    """
    document = _object(document, "image repository")

    tags: dict[str, str] = {}
    for tag, reference in _object(document.get("tags"), "tags").items():
        if reference is not None and not isinstance(reference, str):
            raise ValueError(f"tags.{tag} must be a string")
        tags[tag] = reference or ""

    status = _object(document.get("status"), "status")
    history: dict[str, TagEventList] = {}
    for tag, event_list in _object(status.get("tags"), "status.tags").items():
        event_list = _object(event_list, f"status.tags.{tag}")
        items = event_list.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValueError(f"status.tags.{tag}.items must be an array")
        history[tag] = TagEventList(
            items=[load_tag_event(item, f"status.tags.{tag}.items[{index}]") for index, item in enumerate(items)]
        )

    return ImageRepository(
        metadata=load_object_meta(document.get("metadata")),
        docker_image_repository=_string(document, "dockerImageRepository", "image repository"),
        tags=tags,
        status=ImageRepositoryStatus(
            docker_image_repository=_string(status, "dockerImageRepository", "status"),
            tags=history,
        ),
    )


def to_serializable(value: Any) -> Any:
    """Convert a model value into JSON-ready data with camelCase keys.

    Dataclass fields that are ``None`` are omitted.  ``V1ObjectMeta`` and
    datetimes are serialized the way the Kubernetes client serializes them.
    """
    if is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if item is not None:
                result[_camel_case(f.name)] = to_serializable(item)
        return result
    if isinstance(value, dict):
        return {key: to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]
    return _api_client().sanitize_for_serialization(value)
