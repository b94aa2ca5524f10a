"""Exceptions raised by imageapi."""

from __future__ import annotations


class ImageApiError(Exception):
    """Base exception for all imageapi errors."""


class InvalidPullSpecError(ImageApiError, ValueError):
    """Raised when a pull spec has more than three path segments or an empty name."""

    def __init__(self, spec: str) -> None:
        self.spec = spec
        super().__init__(f'the docker pull spec "{spec}" must be two or three segments separated by slashes')


class ManifestDecodeError(ImageApiError):
    """Raised when an image manifest or its v1 compatibility record cannot be decoded."""


class TagResolutionError(ImageApiError):
    """Base exception for failures to resolve a tag from an image repository.

    Carries the repository namespace, name and tag for diagnostics.
    """

    reason: str = "could not be resolved"

    def __init__(self, namespace: str, name: str, tag: str) -> None:
        self.namespace = namespace
        self.name = name
        self.tag = tag
        super().__init__(f'image repository {namespace}/{name}: tag "{tag}" {self.reason}')


class TagNotDeclaredError(TagResolutionError):
    """Raised when a tag is not declared on the image repository."""

    reason = "not found"


class TagHistoryMissingError(TagResolutionError):
    """Raised when a declared tag has no entry in the tag history."""

    reason = "not found in tag history"


class TagHistoryEmptyError(TagResolutionError):
    """Raised when a tag's history has no events."""

    reason = "has 0 history items"
