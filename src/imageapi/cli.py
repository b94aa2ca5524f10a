"""imageapi — command line access to pull spec and image metadata helpers.

Subcommands:

1. ``parse``      split a pull spec into registry, namespace, name and ref
2. ``join``       compose a pull spec from its components
3. ``metadata``   populate an image document's metadata from its manifest
4. ``latest-tag`` print the most recent tag event of an image repository tag

Results are written to stdout as JSON (``join`` prints the plain pull spec).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .exceptions import ImageApiError
from .loader import load_image, load_image_repository, read_document, to_serializable
from .metadata import image_with_metadata
from .pull_spec import join_pull_spec, split_pull_spec
from .tag_history import latest_tagged_image

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI usage. Only called from main()."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s : %(name)-13s : %(levelname)s :: %(message)s",
    )


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def run_parse(args: argparse.Namespace) -> int:
    """Print the components of ``args.spec``."""
    registry, namespace, name, ref = split_pull_spec(args.spec)
    _print_json({"registry": registry, "namespace": namespace, "name": name, "ref": ref})
    return 0


def run_join(args: argparse.Namespace) -> int:
    """Print the pull spec composed from the component flags."""
    print(join_pull_spec(registry=args.registry, namespace=args.namespace, name=args.name, ref=args.ref))
    return 0


def run_metadata(args: argparse.Namespace) -> int:
    """Print the image document with metadata populated from its manifest."""
    image = load_image(read_document(args.file))
    _print_json(to_serializable(image_with_metadata(image)))
    return 0


def run_latest_tag(args: argparse.Namespace) -> int:
    """Print the most recent tag event for ``args.tag``."""
    repo = load_image_repository(read_document(args.file))
    event = latest_tagged_image(repo, args.tag)
    _print_json(to_serializable(event))
    return 0


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Optional list of argument strings (defaults to ``sys.argv``).

    Returns:
        Parsed ``argparse.Namespace`` with the subcommand handler in ``func``.
    """
    parser = argparse.ArgumentParser(
        prog="imageapi",
        description="imageapi — Inspect image pull specs, image metadata and image repository tags",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Split a pull spec into its components")
    parse_parser.add_argument("spec", help="Pull spec, e.g. 'registry:5000/ns/name:tag'")
    parse_parser.set_defaults(func=run_parse)

    join_parser = subparsers.add_parser(
        "join",
        help="Compose a pull spec from its components",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    join_parser.add_argument("--registry", default="", help="Registry host, optionally with port")
    join_parser.add_argument(
        "--namespace",
        default="",
        help="Repository namespace (defaults to 'library' when --registry is given)",
    )
    join_parser.add_argument("--name", required=True, help="Image name")
    join_parser.add_argument("--ref", default="", help="Tag, or digest in 'algorithm:hex' form")
    join_parser.set_defaults(func=run_join)

    metadata_parser = subparsers.add_parser(
        "metadata",
        help="Populate an image document's metadata from its stored manifest",
    )
    metadata_parser.add_argument("file", help="Path to an image JSON document ('-' for stdin)")
    metadata_parser.set_defaults(func=run_metadata)

    latest_parser = subparsers.add_parser(
        "latest-tag",
        help="Print the most recent tag event of an image repository tag",
    )
    latest_parser.add_argument("file", help="Path to an image repository JSON document ('-' for stdin)")
    latest_parser.add_argument("tag", help="Tag name, e.g. 'latest'")
    latest_parser.set_defaults(func=run_latest_tag)

    return parser.parse_args(args)


# ---------------------------------------------------------------------------
# Main execution
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace) -> int:
    """Dispatch to the selected subcommand.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Process exit code (0 = success, 1 = invalid input).
    """
    try:
        return args.func(args)
    except (ImageApiError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for imageapi."""
    parsed_args = parse_args(argv)
    _setup_logging(verbose=parsed_args.verbose)
    sys.exit(run(args=parsed_args))


if __name__ == "__main__":
    main()
