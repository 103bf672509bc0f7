"""
Interactive commands that turn cached conversations or Markdown notes into GitHub issues.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..cache import GitHubCacheService, SlackCacheService
from ..config.models import AppSettings
from ..config.repos import RepoConfig
from ..config_validator import ConfigValidationError, require
from ..formatters import (
    THIN_RULE,
    format_issues,
    format_messages,
    format_proposals,
    issues_in_range,
    messages_in_range,
)
from ..llm import IssueAnalyzer, IssueProposal, InteractionLogWriter
from ..services.github_issue_service import GitHubAPIError, GitHubIssueService
from ..utils import DateRange, last_days
from .cache_sync_command import resolve_repos

logger = logging.getLogger(__name__)

SLACK_FOOTER = "*This issue was automatically generated from Slack conversation analysis*"
MARKDOWN_FOOTER = "*This issue was automatically generated from Markdown file*"

AskFn = Callable[[str], str]


def ask_yes_no(question: str, ask: AskFn = input) -> bool:
    answer = ask(f"{question} (y/n): ").strip().lower()
    return answer in ("y", "yes")


def build_issue_body(proposal: IssueProposal, footer: str) -> str:
    body = proposal.description
    if proposal.related_messages:
        body += "\n\n## Related Slack messages\n" + "\n".join(f"- {item}" for item in proposal.related_messages)
    return f"{body}\n\n---\n{footer}"


class ProposalReviewer:
    """
    Walks the user through proposals one by one and files the accepted ones.
    """

    def __init__(self, issue_service: GitHubIssueService, ask: AskFn = input):
        self.issue_service = issue_service
        self.ask = ask

    def review(self, proposals: List[IssueProposal], footer: str) -> List[Dict[str, Any]]:
        created: List[Dict[str, Any]] = []
        for index, proposal in enumerate(proposals, start=1):
            print(f"\n[{index}/{len(proposals)}] {proposal.title}")
            print(THIN_RULE)
            print(f"\n{proposal.description}\n")
            print(f"Reasoning: {proposal.reasoning}\n")

            if not ask_yes_no("Create this issue on GitHub?", self.ask):
                print("Skipped")
                continue
            try:
                issue = self.issue_service.create_issue(proposal.title, build_issue_body(proposal, footer))
            except GitHubAPIError as exc:
                logger.error("[PROPOSALS] Failed to create issue %r: %s", proposal.title, exc)
                print(f"Failed to create issue: {exc}")
                continue
            print(f"Created: {issue.get('html_url')}")
            created.append(issue)
        print("\nAll proposals processed.")
        return created


class ProposalCommand:
    """
    Builds analyzer input from the caches (or a Markdown file), prints the
    proposals and hands them to the reviewer.
    """

    def __init__(
        self,
        settings: AppSettings,
        *,
        analyzer: Optional[IssueAnalyzer] = None,
        issue_service_factory: Optional[Callable[[str, str], GitHubIssueService]] = None,
        ask: AskFn = input,
    ):
        self.settings = settings
        self._analyzer = analyzer
        self.issue_service_factory = issue_service_factory or (
            lambda owner, repo: GitHubIssueService(settings.github, owner, repo)
        )
        self.ask = ask

    @property
    def analyzer(self) -> IssueAnalyzer:
        if self._analyzer is None:
            require(self.settings.openai.api_key, "OPENAI_API_KEY")
            self._analyzer = IssueAnalyzer(
                self.settings.openai,
                interaction_log=InteractionLogWriter(self.settings.cache.output_dir),
            )
        return self._analyzer

    def target_repo(self, override: Optional[str] = None) -> RepoConfig:
        if override:
            owner, sep, repo = override.partition("/")
            if not sep or not owner or not repo:
                raise ConfigValidationError(f"--repo must look like owner/repo, got '{override}'")
            return RepoConfig(owner=owner, repo=repo)
        return RepoConfig(
            owner=require(self.settings.github.owner, "GITHUB_OWNER"),
            repo=require(self.settings.github.repo, "GITHUB_REPO"),
        )

    def analyze_slack(self, days: int = 7, repo: Optional[str] = None) -> List[IssueProposal]:
        date_range = last_days(days)
        target = self.target_repo(repo)

        slack_text = self._slack_context(date_range)
        if not slack_text.strip():
            print(f"No cached Slack messages in the last {days} days. Run slack-init / slack-update first.")
            return []
        issues_text = self._issue_context(date_range)

        proposals = self.analyzer.analyze_and_propose(slack_text, issues_text)
        print(format_proposals(proposals))
        if proposals:
            ProposalReviewer(self.issue_service_factory(target.owner, target.repo), self.ask).review(
                proposals, SLACK_FOOTER
            )
        return proposals

    def markdown_to_issues(self, markdown_path: str, repo: Optional[str] = None) -> List[IssueProposal]:
        path = Path(markdown_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        target = self.target_repo(repo)
        print(f"Reading file: {path}")

        proposals = self.analyzer.analyze_markdown(path.read_text(encoding="utf-8"))
        print(format_proposals(proposals))
        if proposals:
            ProposalReviewer(self.issue_service_factory(target.owner, target.repo), self.ask).review(
                proposals, MARKDOWN_FOOTER
            )
        return proposals

    def _slack_context(self, date_range: DateRange) -> str:
        cache = SlackCacheService(self.settings.cache.data_dir)
        sections = []
        for channel_id in cache.list_channel_ids():
            snapshot = cache.load_cache(channel_id)
            if not snapshot:
                continue
            messages = messages_in_range(snapshot.messages, date_range)
            if messages:
                sections.append(f"## #{snapshot.channel_name}\n{format_messages(messages)}")
        return "\n".join(sections)

    def _issue_context(self, date_range: DateRange) -> str:
        cache = GitHubCacheService(self.settings.cache.data_dir)
        issues: List[Dict[str, Any]] = []
        for repo in resolve_repos(self.settings):
            snapshot = cache.load_cache(repo.owner, repo.repo)
            if snapshot:
                issues.extend(issues_in_range(snapshot.issues, date_range))
            else:
                logger.info("[PROPOSALS] No issue cache for %s; fetching from GitHub", repo.scope)
                issues.extend(self.issue_service_factory(repo.owner, repo.repo).get_issues_in_date_range(date_range))
        return format_issues(issues)


__all__ = ["ProposalCommand", "ProposalReviewer", "ask_yes_no", "build_issue_body"]
