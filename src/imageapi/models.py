"""Data models for image pull specs, image metadata and image repository tag history."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from kubernetes.client import V1ObjectMeta

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DOCKER_DEFAULT_NAMESPACE: str = "library"  # Namespace used when a registry is given without one.


@dataclass(frozen=True)
class PullSpec:
    """Structured form of a pull spec ``[registry/][namespace/]name[:tag|@digest]``."""

    name: str
    registry: str = ""
    namespace: str = ""
    ref: str = ""

    @property
    def is_digest(self) -> bool:
        """Return ``True`` when ``ref`` is a digest (``algorithm:hex``) rather than a tag."""
        return ":" in self.ref

    def with_registry(self, registry: str) -> PullSpec:
        """Return a copy of this spec pointing at ``registry``."""
        return replace(self, registry=registry)

    def __str__(self) -> str:
        from .pull_spec import join_pull_spec

        return join_pull_spec(registry=self.registry, namespace=self.namespace, name=self.name, ref=self.ref)


@dataclass
class DockerImageMetadata:
    """Runtime metadata of an image, as recorded by the image builder."""

    id: str = ""
    parent: str = ""
    comment: str = ""
    created: datetime | None = None
    container: str = ""
    container_config: dict[str, Any] = field(default_factory=dict)
    docker_version: str = ""
    author: str = ""
    config: dict[str, Any] | None = None
    architecture: str = ""
    size: int = 0


@dataclass
class Image:
    """A stored image record.

    ``docker_image_manifest`` holds the raw manifest JSON until
    :func:`imageapi.metadata.image_with_metadata` projects it onto
    ``docker_image_metadata``.
    """

    metadata: V1ObjectMeta = field(default_factory=V1ObjectMeta)
    docker_image_reference: str = ""
    docker_image_metadata: DockerImageMetadata = field(default_factory=DockerImageMetadata)
    docker_image_manifest: str = ""


@dataclass
class ManifestHistoryEntry:
    """One ``history`` element of a schema 1 manifest.

    ``docker_v1_compatibility`` is a JSON document encoded as a string.
    """

    docker_v1_compatibility: str = ""


@dataclass
class DockerImageManifest:
    """Decoded schema 1 image manifest. ``history[0]`` is the most recent layer."""

    schema_version: int = 1
    name: str = ""
    tag: str = ""
    history: list[ManifestHistoryEntry] = field(default_factory=list)


@dataclass
class TagEvent:
    """A record of a tag pointing at an image at a point in time."""

    created: datetime | None = None
    docker_image_reference: str = ""
    image: str = ""
    generation: int = 0


@dataclass
class TagEventList:
    """Tag history for a single tag. ``items[0]`` is the most recent event.

    Ordering is maintained by whoever appends events; readers never sort.
    """

    items: list[TagEvent] = field(default_factory=list)


@dataclass
class ImageRepositoryStatus:
    """Observed state of an image repository."""

    docker_image_repository: str = ""
    tags: dict[str, TagEventList] = field(default_factory=dict)


@dataclass
class ImageRepository:
    """A named set of tags and the history of images each tag has pointed at.

    Attributes:
        metadata: Object metadata; ``namespace`` and ``name`` identify the repository.
        docker_image_repository: Pull spec of the backing repository, if any.
        tags: Declared tags, mapping tag name to the tag reference it was declared with.
        status: Observed tag history.
    """

    metadata: V1ObjectMeta = field(default_factory=V1ObjectMeta)
    docker_image_repository: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    status: ImageRepositoryStatus = field(default_factory=ImageRepositoryStatus)

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or ""

    @property
    def name(self) -> str:
        return self.metadata.name or ""
