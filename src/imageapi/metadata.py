"""Populate image metadata from the legacy (schema 1) manifest stored on an image.

The v1 compatibility record of the most recent ``history`` entry carries the
builder's runtime metadata.  Once it has been projected onto
``docker_image_metadata`` the raw manifest is redundant and is cleared.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from dateutil.parser import isoparse

from .exceptions import ManifestDecodeError
from .models import DockerImageManifest, DockerImageMetadata, Image, ManifestHistoryEntry

logger = logging.getLogger(__name__)

# Normalized v1 compatibility key -> DockerImageMetadata attribute.
# Keys are compared lower-cased with underscores removed.
_V1_COMPATIBILITY_FIELDS: dict[str, str] = {
    "id": "id",
    "parent": "parent",
    "comment": "comment",
    "created": "created",
    "container": "container",
    "containerconfig": "container_config",
    "dockerversion": "docker_version",
    "author": "author",
    "config": "config",
    "architecture": "architecture",
    "size": "size",
}

_STRING_FIELDS: frozenset[str] = frozenset({
    "id",
    "parent",
    "comment",
    "container",
    "docker_version",
    "author",
    "architecture",
})


def _normalize_key(key: str) -> str:
    return key.replace("_", "").lower()


def _get_field(document: dict[str, Any], key: str) -> Any:
    """Look up ``key`` in a JSON object, ignoring case and underscores."""
    wanted = _normalize_key(key)
    for candidate, value in document.items():
        if _normalize_key(candidate) == wanted:
            return value
    return None


def _load_json_object(raw: str, what: str) -> dict[str, Any]:
    """Decode a JSON object; a literal ``null`` decodes as an empty object."""
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        raise ManifestDecodeError(f"Unable to decode {what}: {e}") from e
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ManifestDecodeError(f"Unable to decode {what}: expected a JSON object, got {type(document).__name__}")
    return document


def decode_manifest(raw: str) -> DockerImageManifest:
    """Decode a schema 1 manifest.

    A missing or ``null`` ``history`` decodes as an empty history.

    Raises:
        ManifestDecodeError: If the manifest is not a JSON object or its history is malformed.
    """
    document = _load_json_object(raw, "image manifest")

    history = _get_field(document, "history")
    if history is None:
        history = []
    if not isinstance(history, list):
        raise ManifestDecodeError("Unable to decode image manifest: 'history' must be an array")

    entries: list[ManifestHistoryEntry] = []
    for index, item in enumerate(history):
        if not isinstance(item, dict):
            raise ManifestDecodeError(f"Unable to decode image manifest: history[{index}] must be an object")
        compatibility = _get_field(item, "v1Compatibility")
        if compatibility is not None and not isinstance(compatibility, str):
            raise ManifestDecodeError(f"Unable to decode image manifest: history[{index}].v1Compatibility must be a string")
        entries.append(ManifestHistoryEntry(docker_v1_compatibility=compatibility or ""))

    labels: dict[str, str] = {}
    for key in ("name", "tag"):
        value = _get_field(document, key)
        if value is not None and not isinstance(value, str):
            raise ManifestDecodeError(f"Unable to decode image manifest: '{key}' must be a string")
        labels[key] = value if value is not None else ""

    schema_version = _get_field(document, "schemaVersion")
    return DockerImageManifest(
        schema_version=schema_version if isinstance(schema_version, int) else 1,
        name=labels["name"],
        tag=labels["tag"],
        history=entries,
    )


def docker_image_metadata_from_dict(document: dict[str, Any]) -> DockerImageMetadata:
    """Build :class:`DockerImageMetadata` from a v1 compatibility style JSON object.

    Keys are matched ignoring case and underscores, so ``containerConfig``,
    ``container_config`` and ``ContainerConfig`` are equivalent.  Unknown keys
    and ``null`` values are ignored.

    Raises:
        ManifestDecodeError: If a known field has the wrong type.
    """
    metadata = DockerImageMetadata()

    for key, value in document.items():
        attribute = _V1_COMPATIBILITY_FIELDS.get(_normalize_key(key))
        if attribute is None or value is None:
            continue

        if attribute in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ManifestDecodeError(f"field '{key}' must be a string")
        elif attribute == "created":
            if not isinstance(value, str):
                raise ManifestDecodeError(f"field '{key}' must be a string")
            try:
                value = isoparse(value)
            except (ValueError, OverflowError) as e:
                raise ManifestDecodeError(f"field '{key}' is not an RFC 3339 timestamp: {e}") from e
        elif attribute == "size":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ManifestDecodeError(f"field '{key}' must be an integer")
        elif not isinstance(value, dict):
            raise ManifestDecodeError(f"field '{key}' must be an object")

        setattr(metadata, attribute, value)

    return metadata


def decode_v1_compatibility(raw: str) -> DockerImageMetadata:
    """Decode a v1 compatibility record into :class:`DockerImageMetadata`.

    Raises:
        ManifestDecodeError: If the record is not a JSON object or a field has the wrong type.
    """
    document = _load_json_object(raw, "v1 compatibility record")
    try:
        return docker_image_metadata_from_dict(document)
    except ManifestDecodeError as e:
        raise ManifestDecodeError(f"Unable to decode v1 compatibility record: {e}") from e


def image_with_metadata(image: Image) -> Image:
    """Return a copy of ``image`` with ``docker_image_metadata`` filled in from its manifest.

    The caller's ``image`` is never modified.  An image without a manifest,
    or whose manifest has no history, is returned as an unchanged copy.  On
    success the copy's ``docker_image_manifest`` is cleared.

    Args:
        image: Image carrying a raw schema 1 manifest.

    Returns:
        A new ``Image``.

    Raises:
        ManifestDecodeError: If the manifest or its most recent v1 compatibility record is malformed.
    """
    result = copy.deepcopy(image)
    if not result.docker_image_manifest:
        return result

    manifest = decode_manifest(result.docker_image_manifest)
    if not manifest.history:
        logger.warning(f"Manifest of image '{result.metadata.name}' has no history entries; metadata left unset")
        return result

    v1_metadata = decode_v1_compatibility(manifest.history[0].docker_v1_compatibility)

    target = result.docker_image_metadata
    target.id = v1_metadata.id
    target.parent = v1_metadata.parent
    target.comment = v1_metadata.comment
    target.created = v1_metadata.created
    target.container = v1_metadata.container
    target.container_config = v1_metadata.container_config
    target.docker_version = v1_metadata.docker_version
    target.author = v1_metadata.author
    target.config = v1_metadata.config
    target.architecture = v1_metadata.architecture
    target.size = v1_metadata.size

    result.docker_image_manifest = ""
    logger.debug(f"Populated metadata for image '{result.metadata.name}' from layer {v1_metadata.id}")
    return result
