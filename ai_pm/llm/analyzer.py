"""
LLM-backed issue proposals from Slack conversations and Markdown notes.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config.models import OpenAISettings
from ..utils.json_parser import parse_items
from ..utils.openai_client import build_openai_client
from .interaction_log import InteractionLogWriter
from .prompts import (
    MARKDOWN_ANALYSIS_PROMPT,
    MARKDOWN_SYSTEM_PROMPT,
    SLACK_ANALYSIS_PROMPT,
    SLACK_SYSTEM_PROMPT,
    get_prompt,
)

logger = logging.getLogger(__name__)

SLACK_WRAPPER_KEYS = ("proposals", "issues")
MARKDOWN_WRAPPER_KEYS = ("proposals", "issues", "tasks")


@dataclass
class IssueProposal:
    """One issue the model suggests creating."""

    title: str
    description: str = ""
    reasoning: str = ""
    related_messages: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["IssueProposal"]:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            return None
        related = data.get("relatedSlackMessages") or data.get("related_messages") or []
        if not isinstance(related, list):
            related = [related]
        return cls(
            title=title.strip(),
            description=str(data.get("description") or ""),
            reasoning=str(data.get("reasoning") or ""),
            related_messages=[str(item) for item in related],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def decode_proposals(content: Optional[str], wrapper_keys: Sequence[str] = SLACK_WRAPPER_KEYS) -> List[IssueProposal]:
    """
    Turn a raw model reply into proposals.

    Accepts a bare array or an object wrapping the array under one of
    `wrapper_keys`; anything unusable becomes an empty list.
    """
    proposals: List[IssueProposal] = []
    for item in parse_items(content, wrapper_keys):
        if not isinstance(item, dict):
            continue
        proposal = IssueProposal.from_dict(item)
        if proposal:
            proposals.append(proposal)
    return proposals


class IssueAnalyzer:
    """
    Asks the chat model for issue proposals.

    The OpenAI client is built from settings unless one is injected.
    """

    def __init__(
        self,
        settings: OpenAISettings,
        client: Any = None,
        interaction_log: Optional[InteractionLogWriter] = None,
    ):
        self.settings = settings
        self.client = client or build_openai_client(settings)
        self.interaction_log = interaction_log

    def analyze_and_propose(self, slack_messages: str, existing_issues: str) -> List[IssueProposal]:
        """
        Compare Slack conversations against existing issues and propose
        issues for topics nobody has ticketed yet.
        """
        logger.info("[ANALYZER] Analyzing Slack conversations with %s", self.settings.model)
        prompt = get_prompt(SLACK_ANALYSIS_PROMPT, self.settings.language).format(
            slack_messages=slack_messages,
            existing_issues=existing_issues,
        )
        system = get_prompt(SLACK_SYSTEM_PROMPT, self.settings.language)
        content = self._complete(system, prompt)
        proposals = decode_proposals(content, SLACK_WRAPPER_KEYS)
        logger.info("[ANALYZER] Found %s issue proposals", len(proposals))
        self._log(
            "slack",
            {"slack_messages": slack_messages, "existing_issues": existing_issues},
            proposals,
            content,
        )
        return proposals

    def analyze_markdown(self, markdown_content: str) -> List[IssueProposal]:
        """
        Anonymize a Markdown document and break it into story-level tasks.
        """
        logger.info("[ANALYZER] Analyzing Markdown content with %s", self.settings.model)
        prompt = get_prompt(MARKDOWN_ANALYSIS_PROMPT, self.settings.language).format(markdown=markdown_content)
        system = get_prompt(MARKDOWN_SYSTEM_PROMPT, self.settings.language)
        content = self._complete(system, prompt)
        proposals = decode_proposals(content, MARKDOWN_WRAPPER_KEYS)
        logger.info("[ANALYZER] Found %s task proposals", len(proposals))
        self._log("markdown", {"markdown": markdown_content}, proposals, content)
        return proposals

    def _complete(self, system: str, prompt: str) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.settings.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=self.settings.temperature,
            response_format={"type": "json_object"},
        )
        choices = getattr(response, "choices", None) or []
        if not choices:
            logger.warning("[ANALYZER] No choices in model response")
            return None
        content = choices[0].message.content
        if not content:
            logger.warning("[ANALYZER] Empty model response")
        return content

    def _log(
        self,
        kind: str,
        inputs: Dict[str, str],
        proposals: List[IssueProposal],
        content: Optional[str],
    ) -> None:
        if not self.interaction_log:
            return
        self.interaction_log.write(kind, inputs, [p.to_dict() for p in proposals], content or "")


__all__ = ["IssueAnalyzer", "IssueProposal", "decode_proposals"]
