#!/usr/bin/env python3

import os
import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config.manager import ConfigManager
from .errors import YuvError
from .pkgmgr.manager import PackageManager
from .repo.catalog import RepoCatalog
from .repo.manager import RepoManager
from .system.detector import Detector, DistroIdentity
from .system.policy import SupportPolicy

console = Console()


def setup_logging(level: str = "INFO"):
    """Configure logging for the application"""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if os.geteuid() == 0:
        log_file = "/var/log/yuv.log"
    else:
        log_file = os.path.expanduser("~/.local/log/yuv.log")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    try:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    except OSError as e:
        # Unwritable log location, stderr only
        print(f"Warning: not logging to {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=handlers
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser"""
    parser = argparse.ArgumentParser(
        prog="yuv",
        description="Lightweight YUM/DNF repository and package manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s detect                   # Show detected distribution
  %(prog)s repo use aliyun          # Switch to the aliyun mirror
  %(prog)s repo add docker          # Add the Docker CE repository
  %(prog)s repo catalog             # List known repositories
  %(prog)s install nginx            # Install a package
        """
    )

    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
        default=None
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("detect", help="Show detected distribution, version and architecture")

    # Repository commands
    repo_parser = subparsers.add_parser("repo", help="Manage YUM repositories")
    repo_sub = repo_parser.add_subparsers(dest="repo_command", help="Repository commands")
    for name, help_text in [
        ("use", "Switch to the given public mirror"),
        ("add", "Add the given repository"),
        ("remove", "Remove the given repository"),
        ("enable", "Enable the given repository"),
        ("disable", "Disable the given repository"),
    ]:
        sub = repo_sub.add_parser(name, help=help_text)
        sub.add_argument("repo", help="Repository name")
    repo_sub.add_parser("list", help="List configured repositories")
    repo_sub.add_parser("backup", help="Back up all repositories")
    repo_sub.add_parser("restore", help="Restore repositories from backup")
    repo_sub.add_parser("catalog", help="List known repository templates")

    # Package commands, forwarded to dnf/yum
    for name, help_text in [
        ("install", "Install packages"),
        ("remove", "Remove packages"),
        ("erase", "Erase packages"),
        ("info", "Show package information"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("packages", nargs="+")

    for name, help_text in [
        ("update", "Update packages"),
        ("list", "List packages"),
        ("history", "Show transaction history"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("packages", nargs="*")

    for name, metavar, help_text in [
        ("search", "pattern", "Search packages"),
        ("downgrade", "package", "Downgrade a package"),
        ("provides", "file", "Find the package providing a file"),
        ("whatprovides", "feature", "Find the package providing a feature"),
        ("deplist", "package", "List package dependencies"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("target", metavar=metavar)

    subparsers.add_parser("upgrade", help="Upgrade the system")
    subparsers.add_parser("clean", help="Clean the package cache")
    subparsers.add_parser("makecache", help="Build the package cache")
    subparsers.add_parser("check-update", help="Check for available updates")

    return parser


def detect_supported(detector: Detector) -> DistroIdentity:
    identity = detector.detect()
    if not identity.supported:
        raise YuvError(f"Unsupported distribution: {identity.name or 'unknown'} {identity.version}")
    return identity


def cmd_detect(detector: Detector, policy: SupportPolicy) -> int:
    identity = detector.detect()
    expired = policy.is_expired(identity.name, identity.version)

    table = Table(show_header=False)
    table.add_row("Distribution", identity.name or "unknown")
    table.add_row("Version", identity.version)
    table.add_row("Architecture", identity.arch)
    table.add_row("Supported", "yes" if identity.supported else "no")
    table.add_row("Expired", "yes (vault mirrors)" if expired else "no")
    console.print(table)
    return 0


def cmd_catalog(catalog: RepoCatalog) -> int:
    table = Table(title="Known repositories")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Priority", justify="right")
    table.add_column("URL")
    for name in catalog.names():
        template = catalog.get(name)
        table.add_row(name, template.repo_type, str(template.priority), template.url_pattern)
    console.print(table)
    return 0


def cmd_repo(args, repo_manager: RepoManager, detector: Detector) -> int:
    """Handle repo subcommands"""
    command = args.repo_command

    if command == "use":
        identity = detect_supported(detector)
        written = repo_manager.use(args.repo, identity)
        print(f"Switched to {args.repo} ({', '.join(os.path.basename(p) for p in written)})")

    elif command == "add":
        identity = detect_supported(detector)
        written = repo_manager.add(args.repo, identity)
        print(f"Added {args.repo} ({', '.join(os.path.basename(p) for p in written)})")

    elif command == "remove":
        repo_manager.remove(args.repo)
        print(f"Removed {args.repo}")

    elif command == "enable":
        repo_manager.enable(args.repo)
        print(f"Enabled {args.repo}")

    elif command == "disable":
        repo_manager.disable(args.repo)
        print(f"Disabled {args.repo}")

    elif command == "list":
        print("Configured repositories:")
        for name in repo_manager.list():
            print(f"  - {name}")

    elif command == "backup":
        moved = repo_manager.backup()
        print(f"Backed up {len(moved)} repositories to {repo_manager.backup_dir}")

    elif command == "restore":
        restored = repo_manager.restore()
        print(f"Restored {len(restored)} repositories from {repo_manager.backup_dir}")

    elif command == "catalog":
        return cmd_catalog(repo_manager.catalog)

    else:
        print("Error: Must specify a repo command")
        return 1

    return 0


def cmd_package(args, package_manager: PackageManager) -> int:
    """Forward package commands to dnf/yum"""
    command = args.command

    if command in ("install", "remove", "erase", "info", "update", "list", "history"):
        return getattr(package_manager, command)(args.packages)
    if command in ("search", "downgrade", "provides", "whatprovides", "deplist"):
        return getattr(package_manager, command)(args.target)
    if command == "check-update":
        return package_manager.check_update()
    return getattr(package_manager, command)()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logger = logging.getLogger(__name__)

    try:
        config_manager = ConfigManager(args.config)
        config = config_manager.get_config()
        setup_logging(args.log_level or config.log_level)

        detector = Detector()

        if args.command == "detect":
            return cmd_detect(detector, config_manager.get_policy())

        if args.command == "repo":
            repo_manager = RepoManager(
                repo_dir=config.repo_dir,
                backup_dir=config.backup_dir,
                catalog=config_manager.get_catalog(),
                policy=config_manager.get_policy(),
            )
            return cmd_repo(args, repo_manager, detector)

        return cmd_package(args, PackageManager(config.package_manager))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except YuvError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
