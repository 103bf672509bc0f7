"""
Result bookkeeping shared by the GitHub and Slack cache syncs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, TypeVar

logger = logging.getLogger(__name__)

INITIALIZED = "initialized"
UPDATED = "updated"
SKIPPED = "skipped"
FAILED = "failed"

T = TypeVar("T")


@dataclass
class SyncResult:
    scope: str
    status: str
    total: int = 0
    added: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (INITIALIZED, UPDATED)


@dataclass
class SyncSummary:
    results: List[SyncResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def skipped(self) -> int:
        return sum(1 for result in self.results if result.status == SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if result.status == FAILED)


def run_scopes(
    scopes: Iterable[T],
    step: Callable[[T], SyncResult],
    describe: Callable[[T], str],
    label: str,
) -> SyncSummary:
    """
    Run one sync step per scope, in order.

    A failing scope is logged and recorded; the remaining scopes still run.
    """
    summary = SyncSummary()
    for scope in scopes:
        name = describe(scope)
        try:
            result = step(scope)
        except Exception as exc:
            logger.exception("[%s] Failed %s", label, name)
            result = SyncResult(scope=name, status=FAILED, message=str(exc))
        summary.results.append(result)
    logger.info(
        "[%s] Done: succeeded=%s skipped=%s failed=%s",
        label,
        summary.succeeded,
        summary.skipped,
        summary.failed,
    )
    return summary


__all__ = [
    "FAILED",
    "INITIALIZED",
    "SKIPPED",
    "UPDATED",
    "SyncResult",
    "SyncSummary",
    "run_scopes",
]
