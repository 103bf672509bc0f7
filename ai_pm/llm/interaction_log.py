"""
On-disk record of every LLM exchange.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


class InteractionLogWriter:
    """
    Records every LLM exchange twice: one JSON line in ``llm_interactions.jsonl``
    and one Markdown file per call for reading by hand.
    """

    def __init__(self, output_dir: Optional[str | Path] = "output"):
        self.output_dir = Path(output_dir) if output_dir else None
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def jsonl_path(self) -> Optional[Path]:
        return self.output_dir / "llm_interactions.jsonl" if self.output_dir else None

    def write(
        self,
        kind: str,
        inputs: Dict[str, str],
        proposals: List[Dict[str, Any]],
        raw_response: str,
    ) -> Optional[Path]:
        if not self.output_dir:
            return None
        now = datetime.now(timezone.utc)
        record = {
            "timestamp": now.isoformat(),
            "kind": kind,
            "inputs": inputs,
            "proposals": proposals,
            "raw_response": raw_response,
        }
        with self.jsonl_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")
        return self._write_readable(now, kind, inputs, proposals, raw_response)

    def _write_readable(
        self,
        now: datetime,
        kind: str,
        inputs: Dict[str, str],
        proposals: List[Dict[str, Any]],
        raw_response: str,
    ) -> Path:
        path = self.output_dir / f"analysis_{kind}_{now.strftime('%Y%m%dT%H%M%S%fZ')}.md"
        lines = [f"# LLM analysis ({kind})", "", f"- Time: {now.isoformat()}", f"- Proposals: {len(proposals)}", ""]
        for name, text in inputs.items():
            lines += [f"## Input: {name}", "", text or "(empty)", ""]
        lines += ["## Proposals", ""]
        for index, proposal in enumerate(proposals, start=1):
            lines += [f"### {index}. {proposal.get('title', '')}", "", proposal.get("description", ""), ""]
            if proposal.get("reasoning"):
                lines += [f"Reasoning: {proposal['reasoning']}", ""]
        lines += ["## Raw response", "", "```json", raw_response, "```", ""]
        path.write_text("\n".join(lines), encoding="utf-8")
        return path


__all__ = ["InteractionLogWriter"]
