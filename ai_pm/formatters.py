"""
Plain-text rendering of cached records and proposals.

The issue and message renderings double as the LLM's context, so they stay
compact and stable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Sequence

from .llm.analyzer import IssueProposal
from .utils import DateRange, parse_iso

RULE = "=" * 80
THIN_RULE = "-" * 80


def _ts_to_iso(ts: str) -> str:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc).isoformat()


def format_issues(issues: Sequence[Dict[str, Any]]) -> str:
    if not issues:
        return "No issues found in the date range."

    lines: List[str] = []
    for issue in issues:
        lines.append(f"#{issue['number']}: {issue.get('title', '')}")
        lines.append(f"Created: {issue.get('created_at')}")
        lines.append(f"State: {issue.get('state')}")
        labels = issue.get("labels") or []
        if labels:
            lines.append(f"Labels: {', '.join(labels)}")
        if issue.get("body"):
            lines.append("Body:")
            lines.append(issue["body"])
        lines.append(f"URL: {issue.get('html_url')}")
        lines.append("---")
    return "\n".join(lines) + "\n"


def format_messages(messages: Iterable[Dict[str, Any]]) -> str:
    lines: List[str] = []
    for message in sorted(messages, key=lambda msg: float(msg["ts"])):
        lines.append(f"[{_ts_to_iso(message['ts'])}] {message.get('user') or 'unknown'}")
        lines.append(message.get("text") or "")
        for reply in message.get("replies") or []:
            lines.append(f"  ↳ [{_ts_to_iso(reply['ts'])}] {reply.get('user') or 'unknown'}")
            lines.append(f"    {reply.get('text') or ''}")
    return "\n".join(lines) + ("\n" if lines else "")


def format_proposals(proposals: Sequence[IssueProposal]) -> str:
    if not proposals:
        return "No new issues to propose. All topics seem to be covered."

    lines = [f"Found {len(proposals)} issue proposal(s):", RULE]
    for index, proposal in enumerate(proposals, start=1):
        lines += [f"[{index}] {proposal.title}", THIN_RULE, "", proposal.description, ""]
        lines.append(f"Reasoning: {proposal.reasoning}")
        if proposal.related_messages:
            lines += ["", "Related Slack messages:"]
            lines += [f"  - {item}" for item in proposal.related_messages]
        lines += ["", RULE]
    return "\n".join(lines)


def issues_in_range(issues: Iterable[Dict[str, Any]], date_range: DateRange) -> List[Dict[str, Any]]:
    """Cached issues created inside the window (pull requests excluded)."""
    selected = []
    for issue in issues:
        if issue.get("pull_request"):
            continue
        created = issue.get("created_at")
        if created and date_range.start <= parse_iso(created) <= date_range.end:
            selected.append(issue)
    return selected


def messages_in_range(messages: Iterable[Dict[str, Any]], date_range: DateRange) -> List[Dict[str, Any]]:
    """
    Cached messages active inside the window.

    A parent outside the window is kept when one of its replies falls inside;
    only the in-window replies are carried along.
    """
    start, end = date_range.start.timestamp(), date_range.end.timestamp()
    selected = []
    for message in messages:
        replies = [r for r in message.get("replies") or [] if start <= float(r["ts"]) <= end]
        in_window = start <= float(message["ts"]) <= end
        if in_window or replies:
            selected.append({**message, "replies": replies})
    return selected


__all__ = [
    "format_issues",
    "format_messages",
    "format_proposals",
    "issues_in_range",
    "messages_in_range",
]
