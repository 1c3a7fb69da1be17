"""CLI entry point for gl-enforcer."""

from __future__ import annotations

import argparse
import os
import sys

from gl_enforcer.client import API_ERRORS, GitLabClient
from gl_enforcer.config import DEFAULT_CONFIG_PATH, load_config
from gl_enforcer.errors import ConfigError, DeliveryError, NotFoundError
from gl_enforcer.logging_utils import setup_logging
from gl_enforcer.manager import ProjectManager
from gl_enforcer.models import DEFAULT_GITLAB_URL, DEFAULT_MAX_RETRIES, RunResult

TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in TRUTHY


def run_sync(manager: ProjectManager) -> RunResult:
    """Sync gitlab's project settings with the config"""
    run = manager.sync(manager.get_projects())
    sys.stdout.write(manager.changelog_report())
    return run


def run_compliance(manager: ProjectManager) -> RunResult:
    """Compare gitlab's project settings with the mandatory settings"""
    run = manager.collect_compliance(manager.get_projects())
    sys.stdout.write(manager.compliance_report())
    manager.send_compliance_email()
    return run


COMMANDS = {
    "sync": run_sync,
    "compliance": run_compliance,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl-enforcer",
        description="Enforce declared settings on every project of a GitLab group.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_TOKEN        - GitLab Personal Access Token (required)
    GITLAB_URL          - GitLab instance URL (default: https://gitlab.com)
    GL_ENFORCER_CONFIG  - Config file path (default: config.json)
    DRYRUN, VERBOSE     - Same as --dry-run / --verbose when set to 1/true/yes

Examples:
    # Apply the config and print a change log
    gl-enforcer --config settings.json sync

    # See what would change without touching anything
    gl-enforcer --config settings.json --dry-run sync

    # Report (and mail) the state of mandatory settings
    gl-enforcer --config settings.json compliance
""",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON lines (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--gitlab-url", default=None, help="GitLab instance URL (default: from GITLAB_URL env or https://gitlab.com)"
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Retry attempts for transient errors (default: {DEFAULT_MAX_RETRIES})",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help=f"Path to the JSON config (default: from GL_ENFORCER_CONFIG env or {DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")
    for name, handler in COMMANDS.items():
        subparsers.add_parser(name, help=handler.__doc__)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    gitlab_url = args.gitlab_url or os.environ.get("GITLAB_URL", DEFAULT_GITLAB_URL)
    config_path = args.config_path or os.environ.get("GL_ENFORCER_CONFIG", DEFAULT_CONFIG_PATH)
    dry_run = args.dry_run or env_flag("DRYRUN")
    verbose = args.verbose or env_flag("VERBOSE")

    token = os.environ.get("GITLAB_TOKEN")
    if not token:
        print("ERROR: GITLAB_TOKEN environment variable is not set.", file=sys.stderr)
        return 1

    logger = setup_logging(json_mode=args.json_output, verbose=verbose)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error(f"Invalid config: {e}")
        return 1

    if args.command == "compliance" and config.compliance is None:
        logger.error("No compliance configuration.")
        return 1

    if dry_run:
        logger.info("DRY-RUN MODE - no settings will be updated")

    client = GitLabClient(base_url=gitlab_url, token=token, dry_run=dry_run, max_retries=args.max_retries)
    manager = ProjectManager(client, config)

    try:
        run = COMMANDS[args.command](manager)
    except NotFoundError as e:
        logger.error(str(e))
        return 1
    except API_ERRORS as e:
        logger.error(f"Fatal API error: {e}")
        return 1
    except DeliveryError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    applied = run.count("applied", "would_apply")
    already = run.count("already_set")
    errors = run.count("error")
    logger.info(
        f"Done: {len(run.results)} results, {applied} {'would change' if dry_run else 'changed'}, "
        f"{already} already set, {errors} errors"
    )

    if run.has_errors:
        logger.error("Error(s) encountered.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
