"""
CLI entry point for jiratime. Wires: config -> accounts/timezones -> window -> pipeline -> report
"""

import argparse
import logging
import sys
from typing import Optional

from config import Config, ConfigError, default_config_path, load_config
from ingest.jira import JiraClient, JiraError
from models import Results
from report.renderer import FORMATS, render
from worklog.pipeline import PipelineContext, PipelineError, total_worklog_seconds
from worklog.window import WindowError, echo_dates, load_timezone, resolve_window

logger = logging.getLogger("jiratime")

LOG_FORMAT = "%(filename)s:%(lineno)d: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jiratime", description="Sum Jira worklog time for a user between two dates")
    parser.add_argument("--start", type=str, default="", help="First day of report (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, default="", help="Last day of report, inclusive (YYYY-MM-DD)")
    parser.add_argument("--user", type=str, default="", help="User's email address (default: the configured account)")
    parser.add_argument("--config", type=str, default=default_config_path(), help="Configuration file")
    parser.add_argument("--format", type=str, default="text", choices=FORMATS, help="Output format")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent worklog queries (overrides config and JIRATIME_WORKERS)")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    return parser


def configure_logging(level: str):
    logging.basicConfig(level=getattr(logging, (level or 'WARNING').upper(), logging.WARNING), format=LOG_FORMAT, stream=sys.stderr)


def resolve_users(client: JiraClient, user: str):
    """Return (caller, target). The caller is the authenticated account; target defaults to it.

    Authentication problems surface here, before any pipeline thread starts.
    """
    caller = client.myself()
    load_timezone(caller.time_zone)
    if not user:
        return caller, caller
    target = client.find_user(user)
    load_timezone(target.time_zone)
    return caller, target


def run_report(args, conf: Config, client: JiraClient) -> Results:
    """Resolve accounts and the window, run the pipeline and build the report."""
    caller, target = resolve_users(client, args.user)
    window = resolve_window(args.start, args.end, target.time_zone)
    workers = args.workers or conf.workers
    context = PipelineContext(client, target.account_id, window, workers=workers, caller_tz=caller.time_zone)
    logger.info("summing worklogs for %s with %d worker(s), %r", target.display_name or args.user, workers, window)
    aggregate = total_worklog_seconds(context)
    # echoed in the caller's timezone, which differs from the target's when --user is given
    start, end = echo_dates(window, caller.time_zone)
    return Results(target, aggregate.total_seconds, start, end)


def main(argv: Optional[list] = None, client_factory=JiraClient) -> int:
    """Run the CLI. Returns the process exit status; nothing is printed to stdout on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.workers is not None and args.workers <= 0:
        parser.error("--workers must be > 0")

    try:
        conf = load_config(args.config)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    client = client_factory(conf.api_url, conf.username, conf.userkey)
    try:
        res = run_report(args, conf, client)
    except (WindowError, JiraError, PipelineError) as e:
        logger.error("%s", e)
        return 1
    finally:
        client.close()

    print(render(res, args.format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
