#!/usr/bin/env python3
"""
ai-pm command line.

Examples:
    ai-pm github-init            # first full fetch of every configured repo
    ai-pm github-update          # incremental fetch since the last run
    ai-pm slack-init
    ai-pm slack-update
    ai-pm analyze --days 7       # propose issues from cached Slack + GitHub data
    ai-pm md-issues notes.md     # turn a Markdown document into issues
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import httpx
import openai
import requests

from .cache import SnapshotError
from .commands.cache_sync_command import INIT, UPDATE, CacheSyncCommand
from .commands.proposal_command import ProposalCommand
from .config_validator import ConfigValidationError, build_settings
from .integrations.slack_client import SlackAPIError
from .services.github_issue_service import GitHubAPIError
from .utils import load_config, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-pm",
        description="Mirror GitHub issues and Slack channels locally and propose missing issues with an LLM.",
    )
    parser.add_argument("--config", default="config.yaml", help="Path to config file (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("github-init", help="Fetch all issues and create the local cache")
    sub.add_parser("github-update", help="Fetch issues updated since the last sync and merge them")
    sub.add_parser("slack-init", help="Fetch full channel history and create the local cache")
    sub.add_parser("slack-update", help="Fetch new messages and replies and merge them")

    analyze = sub.add_parser("analyze", help="Propose issues from cached Slack conversations")
    analyze.add_argument("--days", type=int, default=7, help="Look-back window in days (default: %(default)s)")
    analyze.add_argument("--repo", help="owner/repo to create issues in (default: github.owner/github.repo)")

    markdown = sub.add_parser("md-issues", help="Propose issues from a Markdown file")
    markdown.add_argument("path", help="Markdown file to analyze")
    markdown.add_argument("--repo", help="owner/repo to create issues in (default: github.owner/github.repo)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        # A bare .env is enough; load_config already pulled it in.
        config = {}
    setup_logging(config)

    try:
        settings = build_settings(config)
        if args.command in ("github-init", "github-update"):
            mode = INIT if args.command == "github-init" else UPDATE
            summary = CacheSyncCommand(settings).github(mode)
            return 1 if summary.failed and not summary.succeeded else 0
        if args.command in ("slack-init", "slack-update"):
            mode = INIT if args.command == "slack-init" else UPDATE
            summary = CacheSyncCommand(settings).slack(mode)
            return 1 if summary.failed and not summary.succeeded else 0
        if args.command == "analyze":
            ProposalCommand(settings).analyze_slack(days=args.days, repo=args.repo)
            return 0
        if args.command == "md-issues":
            ProposalCommand(settings).markdown_to_issues(args.path, repo=args.repo)
            return 0
    except (
        ConfigValidationError,
        SnapshotError,
        GitHubAPIError,
        SlackAPIError,
        openai.APIError,
        httpx.HTTPError,
        requests.RequestException,
        FileNotFoundError,
    ) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
