"""
CLI Module

Architectural Intent:
- Command-line interface for Cutover
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import sys
import asyncio
import logging
import traceback
from typing import Optional
from cutover.domain.errors import CutoverError, CompensationError
from cutover.infrastructure.config import load_config
from cutover.infrastructure.logging import configure_logging, parse_level
from cutover.infrastructure.manifest import read_app_name

PUSH_SUCCESS = "A new version of your application has successfully been pushed!"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cutover",
        description="Cutover: zero-downtime and blue/green pushes for Cloud Foundry",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument("--config", help="Path to cutover.json")
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    zdp_parser = subparsers.add_parser(
        "zero-downtime-push",
        help="Perform a zero-downtime push of an application over the top of an old one",
    )
    zdp_parser.add_argument("app_name", nargs="?", help="Application to replace")
    zdp_parser.add_argument("-f", dest="manifest", help="Path to an application manifest")
    zdp_parser.add_argument("-p", dest="path", help="Path to application files")
    zdp_parser.add_argument(
        "--show-app-log",
        action="store_true",
        help="Tail and show application log during application start",
    )
    zdp_parser.add_argument(
        "--keep-old-app", action="store_true", help="Do not remove the old application"
    )

    bgp_parser = subparsers.add_parser(
        "blue-green-push",
        help="Perform a zero-downtime push keeping the two previous versions for rollback",
    )
    bgp_parser.add_argument("app_name", nargs="?", help="Application to replace")
    bgp_parser.add_argument("-f", dest="manifest", help="Path to an application manifest")
    bgp_parser.add_argument("-p", dest="path", help="Path to application files")

    rollback_parser = subparsers.add_parser(
        "blue-green-rollback", help="Roll back to a previous version (g1 or g2)"
    )
    rollback_parser.add_argument("app_name", help="Application to roll back")
    rollback_parser.add_argument("generation", help="Version to restore, e.g. g1 or g2")

    return parser


def resolve_app_name(app_name: Optional[str], manifest: Optional[str]) -> Optional[str]:
    """An explicit name wins over the first application named in the manifest."""
    if app_name:
        return app_name
    if manifest:
        return read_app_name(manifest)
    return None


async def async_main(argv: Optional[list[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)

    # Configure logging based on flags
    if args.debug:
        configure_logging(level=logging.DEBUG, json_format=args.json_logs)
    elif args.verbose:
        configure_logging(level=logging.INFO, json_format=args.json_logs)
    else:
        configure_logging(level=parse_level(config.log_level), json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    from cutover.composition_root import create_container

    container = create_container(config)

    try:
        if args.command == "zero-downtime-push":
            app_name = resolve_app_name(args.app_name, args.manifest)
            if not app_name:
                print("error: app name must be specified")
                sys.exit(1)
            await container.zero_downtime_push.execute(
                app_name,
                manifest_path=args.manifest,
                app_path=args.path,
                keep_old_app=args.keep_old_app or config.rollout.keep_old_app,
                show_app_log=args.show_app_log or config.rollout.show_app_log,
            )
            print()
            print(PUSH_SUCCESS)
            print()
            return

        if args.command == "blue-green-push":
            app_name = resolve_app_name(args.app_name, args.manifest)
            if not app_name:
                print("error: app name must be specified")
                sys.exit(1)
            await container.blue_green_push.execute(
                app_name, manifest_path=args.manifest, app_path=args.path
            )
            print()
            print(PUSH_SUCCESS)
            print()
            return

        if args.command == "blue-green-rollback":
            await container.blue_green_rollback.execute(args.app_name, args.generation)
            print()
            print(f"{args.app_name} is swapped with {args.app_name}-{args.generation}")
            print()
            return
    except CompensationError as e:
        print(f"error: {e}")
        print("warning: the rollback did not complete, the applications may be inconsistent")
        if verbose:
            traceback.print_exc()
        sys.exit(1)
    except (CutoverError, ValueError) as e:
        print(f"error: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
