"""
CLI -- Command interface

Non-interactive: arguments in, structured output out. Suited to agents and
humans alike.

Two kinds of command:
- `helm voyage new|list|show|end` and `helm config`: lifecycle and settings
- `helm <command> <voyage> ...`: everything that works inside one voyage,
  where <voyage> is a full ID, an ID prefix, or an intent keyword

Identity is resolved only by commands that record it:
  --as flag -> HELM_IDENTITY -> identity.name in config

Errors from the store surface as `Error (<kind>): <message>` on stderr with
a non-zero exit code.
"""

import argparse
import logging
import os
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigManager, resolve_identity
from .core.action import Method, Role
from .core.errors import Contention, HelmError
from .core.resolver import VoyageResolver
from .core.voyage import Storage
from .presentation.symbols import get_symbols, safe_print
from .services.github import GitHubClient, gh_config_dir
from .services.observe import Observer
from .commands.voyage_cmd import VoyageCommand
from .commands.observe_cmd import ObserveCommand
from .commands.slate_cmd import SlateCommand
from .commands.log_cmd import LogCommand
from .commands.steer_cmd import SteerCommand
from .commands.logbook_cmd import LogbookCommand
from .commands.config_cmd import ConfigCommand
from . import __version__


logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "HELM_LOG_LEVEL"
PROJECT_ENV = "HELM_PROJECT_PATH"

EXIT_ERROR = 1
EXIT_CONTENTION = 75  # EX_TEMPFAIL: safe to retry


class HelmCLI:
    """Shared resources for one CLI invocation."""

    def __init__(self, project_dir: Path, root: Optional[str] = None,
                 identity: Optional[str] = None, role: Optional[str] = None,
                 method: Optional[str] = None,
                 config_manager: Optional[ConfigManager] = None):
        self.project_dir = Path(project_dir)
        self.config_manager = config_manager or ConfigManager(self.project_dir)
        self.config = self.config_manager.load()
        error = self.config.validate()
        if error:
            logger.warning("Invalid configuration: %s", error)

        storage_root = Path(root).expanduser() if root else self.config.storage.path
        self.storage = Storage(storage_root, self.config.storage.busy_timeout_ms)
        self.resolver = VoyageResolver(self.storage)

        # Initialize symbols based on config
        self.symbols = get_symbols(self.config.display.symbols)

        self._identity = identity
        self.role = role or self.config.identity.role
        self.method = method or self.config.identity.method

        # GitHub client is built on first use; most commands never need one
        self.observer = Observer(base_dir=self.project_dir, github_factory=self.github_client)

        # Command handlers
        self._voyage_cmd = VoyageCommand(self)
        self._observe_cmd = ObserveCommand(self)
        self._slate_cmd = SlateCommand(self)
        self._log_cmd = LogCommand(self)
        self._steer_cmd = SteerCommand(self)
        self._logbook_cmd = LogbookCommand(self)
        self._config_cmd = ConfigCommand(self)

    @property
    def identity(self) -> str:
        """Acting identity. Raises IdentityRequired."""
        return resolve_identity(self._identity, self.config)

    def github_client(self) -> GitHubClient:
        """`gh` wrapper authenticated as the acting identity."""
        config_dir = gh_config_dir(self.identity, self.config.identity.gh_config_root)
        return GitHubClient(config_dir=config_dir, repo_path=self.project_dir)


def configure_logging(verbose: bool = False):
    """WARNING by default, DEBUG with -v, or whatever HELM_LOG_LEVEL names."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helm",
        description="Helm -- Per-voyage working memory for agents",
        epilog="Observe, seal, review. One store per voyage."
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get(PROJECT_ENV, "."),
        help=f'Directory relative paths resolve against (default: {PROJECT_ENV} or current)'
    )
    parser.add_argument(
        '--root',
        help='Voyage storage root (default: storage.root from config)'
    )
    parser.add_argument(
        '--as', dest='identity', metavar='IDENTITY',
        help='Acting identity (default: HELM_IDENTITY or identity.name)'
    )
    parser.add_argument(
        '--role', choices=[r.value for r in Role],
        help='Who is acting (default: identity.role)'
    )
    parser.add_argument(
        '--method', choices=[m.value for m in Method],
        help='How the act was produced (default: identity.method)'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Debug logging on stderr'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'helm {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Register all commands from command modules (self-registration pattern)
    from .commands import register_all
    register_all(subparsers)

    return parser


def report_error(error: Exception):
    kind = getattr(error, 'kind', 'error')
    safe_print(f"Error ({kind}): {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for Helm CLI.

    Returns the process exit code: 0 on success, 75 when the voyage store
    was busy (retry), 1 for any other failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    from .commands import dispatch

    try:
        cli = HelmCLI(
            Path(args.project),
            root=args.root,
            identity=args.identity,
            role=args.role,
            method=args.method,
        )
        result = dispatch(args.command, cli, args)
    except Contention as e:
        report_error(e)
        safe_print("The voyage store is busy in another process. Retry the command.", file=sys.stderr)
        return EXIT_CONTENTION
    except HelmError as e:
        report_error(e)
        return EXIT_ERROR
    except ValueError as e:
        report_error(e)
        return EXIT_ERROR
    except sqlite3.DatabaseError as e:
        logger.debug("Database error", exc_info=True)
        safe_print(f"Error (database): {e}", file=sys.stderr)
        return EXIT_ERROR

    return result or 0


if __name__ == '__main__':
    sys.exit(main())
