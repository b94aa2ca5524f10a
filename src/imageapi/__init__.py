"""imageapi — container image pull specs, manifest metadata and tag history.

Normalize pull specs, populate image metadata from legacy manifest history,
and resolve the image currently behind an image repository tag.
"""

import logging

from imageapi._version import __version__
from imageapi.exceptions import (
    ImageApiError,
    InvalidPullSpecError,
    ManifestDecodeError,
    TagHistoryEmptyError,
    TagHistoryMissingError,
    TagNotDeclaredError,
    TagResolutionError,
)
from imageapi.metadata import image_with_metadata
from imageapi.models import DOCKER_DEFAULT_NAMESPACE, Image, ImageRepository, PullSpec, TagEvent
from imageapi.pull_spec import is_pull_spec, join_pull_spec, parse_pull_spec, split_pull_spec
from imageapi.tag_history import latest_tagged_image

__all__ = [
    "DOCKER_DEFAULT_NAMESPACE",
    "Image",
    "ImageApiError",
    "ImageRepository",
    "InvalidPullSpecError",
    "ManifestDecodeError",
    "PullSpec",
    "TagEvent",
    "TagHistoryEmptyError",
    "TagHistoryMissingError",
    "TagNotDeclaredError",
    "TagResolutionError",
    "__version__",
    "image_with_metadata",
    "is_pull_spec",
    "join_pull_spec",
    "latest_tagged_image",
    "parse_pull_spec",
    "split_pull_spec",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
