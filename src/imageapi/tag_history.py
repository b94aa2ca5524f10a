"""Resolve the image currently behind an image repository tag."""

from __future__ import annotations

import logging

from .exceptions import TagHistoryEmptyError, TagHistoryMissingError, TagNotDeclaredError
from .models import ImageRepository, TagEvent

logger = logging.getLogger(__name__)


def latest_tagged_image(repo: ImageRepository, tag: str) -> TagEvent:
    """Return the most recent tag event for ``tag`` in ``repo``.

    The first item of the tag's history is the most recent one; events are
    not re-sorted here.

    Args:
        repo: Image repository holding declared tags and tag history.
        tag: Tag name, e.g. ``"latest"``.

    Returns:
        The ``TagEvent`` at index 0 of the tag's history (not a copy).

    Raises:
        TagNotDeclaredError: If ``tag`` is not declared on the repository.
        TagHistoryMissingError: If ``tag`` has no entry in the tag history.
        TagHistoryEmptyError: If the tag history has no events.
    """
    if tag not in repo.tags:
        raise TagNotDeclaredError(namespace=repo.namespace, name=repo.name, tag=tag)

    if tag not in repo.status.tags:
        raise TagHistoryMissingError(namespace=repo.namespace, name=repo.name, tag=tag)

    tag_history = repo.status.tags[tag]
    if not tag_history.items:
        raise TagHistoryEmptyError(namespace=repo.namespace, name=repo.name, tag=tag)

    latest = tag_history.items[0]
    logger.debug(f"Tag '{tag}' of image repository {repo.namespace}/{repo.name} resolves to {latest.docker_image_reference}")
    return latest
