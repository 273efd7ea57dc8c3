"""Tabby CLI — tabby preview / tabby package / tabby data.

Entry point for the ``tabby`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys

from tabby._types import PACKAGED_TARGETS


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tabby CLI."""
    parser = argparse.ArgumentParser(
        prog="tabby",
        description="Export interactive projects as runnable bundles.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tabby preview
    preview_parser = subparsers.add_parser(
        "preview",
        help="Export a hot-reloadable browser preview",
    )
    preview_parser.add_argument("project", help="Project file (.yaml, .yml or .json)")
    preview_parser.add_argument("--output", default=None, help="Output directory")
    preview_parser.add_argument("--root", default=".", help="Workspace root directory")
    preview_parser.add_argument("--debugger", default=None, metavar="HOST:PORT", help="Debugger server")
    preview_parser.add_argument("--scene", default="", help="Scene to start on")
    preview_parser.add_argument(
        "--external-layout", default="", help="External layout to inject at startup",
    )
    preview_parser.add_argument(
        "--data-only", action="store_true", help="Only rewrite the project data",
    )
    preview_parser.add_argument(
        "--hashes", default=None, metavar="FILE", help="Persist scene fingerprints in FILE",
    )
    preview_parser.add_argument(
        "--force", action="store_true", help="Regenerate every scene module",
    )
    preview_parser.add_argument(
        "--watch", action="store_true", help="Re-export on every project change",
    )

    # tabby package
    package_parser = subparsers.add_parser(
        "package",
        help="Export for a packaged target",
    )
    package_parser.add_argument("target", choices=sorted(PACKAGED_TARGETS), help="Target shell")
    package_parser.add_argument("project", help="Project file (.yaml, .yml or .json)")
    package_parser.add_argument("--output", default=None, help="Output directory")
    package_parser.add_argument("--root", default=".", help="Workspace root directory")
    package_parser.add_argument(
        "--minify", action="store_true", help="Merge and minify the bundle",
    )

    # tabby data
    data_parser = subparsers.add_parser(
        "data",
        help="Write only the project data module",
    )
    data_parser.add_argument("project", help="Project file (.yaml, .yml or .json)")
    data_parser.add_argument("destination", help="File to write (e.g. data.js)")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tabby import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from tabby._errors import TabbyError
    from tabby.app import data, package, preview

    try:
        if args.command == "preview":
            result = preview(
                args.project,
                args.output,
                root=args.root,
                debugger=args.debugger,
                scene=args.scene,
                external_layout=args.external_layout,
                data_only=args.data_only,
                hashes=args.hashes,
                force=args.force,
                watch=args.watch,
            )
        elif args.command == "package":
            result = package(
                args.target,
                args.project,
                args.output,
                root=args.root,
                minify=args.minify,
            )
        else:
            data(args.project, args.destination)
            return
    except TabbyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
