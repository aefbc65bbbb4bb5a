"""
doh-edge CLI
~~~~~~~~~~~~

Command-line interface for doh-edge.

With no command, an interactive menu is shown. ``doh-edge rollback``
rolls back immediately without the menu.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from doh_edge.exceptions import DohEdgeError

MENU = """\
---------------------------------
 DoH Server Installer Menu
---------------------------------
1) Install/Configure DoH Server
2) Rollback changes made by this script
3) Exit"""


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="doh-edge",
        description="doh-edge: DNS-over-HTTPS edge installer with rollback",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a doh-edge YAML config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging and echo step journal entries to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # install command
    install_parser = subparsers.add_parser(
        "install", help="Install and configure the DoH server non-interactively"
    )
    install_parser.add_argument(
        "--domain",
        type=str,
        required=True,
        help="Domain name the DoH endpoint is served on",
    )
    install_parser.add_argument(
        "--email",
        type=str,
        required=True,
        help="Operator email for certificate notifications",
    )

    # rollback command
    subparsers.add_parser("rollback", help="Restore configuration from backups")

    # status command
    subparsers.add_parser("status", help="Show resolver and gateway state")

    args = parser.parse_args(argv)

    if args.version:
        from doh_edge import __version__

        print(f"doh-edge {__version__}")
        return 0

    try:
        edge = _make_edge(args.config)
    except DohEdgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _configure_logging("DEBUG" if args.verbose else edge.config.logging.level)
    if args.verbose:
        from doh_edge.observability.exporters import StreamExporter

        edge.journal.add_exporter(StreamExporter(sys.stderr))

    try:
        if args.command == "install":
            return _run_install(edge, args.domain, args.email)
        if args.command == "rollback":
            return _run_rollback(edge)
        if args.command == "status":
            return _run_status(edge)
        return _run_menu(edge)
    finally:
        edge.close()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _make_edge(config_path: str | None) -> Any:
    """Create a DohEdge instance from config or defaults."""
    from doh_edge.core.edge import DohEdge

    if config_path:
        return DohEdge.from_config(config_path)
    return DohEdge.default()


def _run_menu(edge: Any) -> int:
    """Show the interactive menu and dispatch the choice."""
    print(MENU)
    choice = input("Select an option [1-3]: ").strip()

    if choice == "1":
        try:
            edge.check_environment()
        except DohEdgeError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        domain = input("Enter your domain name (e.g. doh.example.com): ").strip()
        email = input("Enter your email for certificate notifications: ").strip()
        return _run_install(edge, domain, email)
    if choice == "2":
        return _run_rollback(edge)
    if choice == "3":
        return 0

    print("Invalid option. Exiting.", file=sys.stderr)
    return 1


def _run_install(edge: Any, domain: str, email: str) -> int:
    """Run the install command."""
    from doh_edge.config.loader import make_run_config

    try:
        run = make_run_config(domain, email)
        result = edge.install(run)
    except DohEdgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not result.completed:
        print(
            f"Installation failed at step '{result.failed_step}':\n{result.cause}",
            file=sys.stderr,
        )
        print(
            "Fix the problem and re-run the installer, or run `doh-edge rollback`.",
            file=sys.stderr,
        )
        return result.exit_code

    print("-----------------------------------------")
    print(f"DoH server is live at https://{run.domain}{edge.config.gateway.doh_path}")
    print("-----------------------------------------")
    return 0


def _run_rollback(edge: Any) -> int:
    """Run the rollback command."""
    print("---------------------")
    print("Starting rollback...")
    print("---------------------")
    try:
        report = edge.rollback()
    except DohEdgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for path in report.restored:
        print(f"Restored backup for {path}")
    for path in report.removed:
        print(f"No backup found for {path}. File removed.")
    for name in report.stop_failures:
        print(f"Warning: could not stop {name}", file=sys.stderr)
    print("Rollback complete.")
    return 0


def _run_status(edge: Any) -> int:
    """Run the status command."""
    for handle in edge.status():
        print(f"{handle.name:<10} {handle.state.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
