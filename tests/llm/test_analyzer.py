import json
from types import SimpleNamespace

from ai_pm.config.models import OpenAISettings
from ai_pm.llm import IssueAnalyzer, IssueProposal, InteractionLogWriter, decode_proposals
from ai_pm.llm.analyzer import MARKDOWN_WRAPPER_KEYS


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.content is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


class FakeOpenAI:
    def __init__(self, content):
        self.completions = FakeCompletions(content)
        self.chat = SimpleNamespace(completions=self.completions)


def _settings(language="en"):
    return OpenAISettings(api_key="sk-test", model="gpt-4o", temperature=0.2, language=language)


PROPOSAL = {
    "title": "Fix login timeout",
    "description": "Users are logged out after 5 minutes.",
    "relatedSlackMessages": ["1700000000.000100"],
    "reasoning": "Reported twice, no open issue.",
}


def test_decode_wrapped_proposals():
    proposals = decode_proposals(json.dumps({"proposals": [PROPOSAL]}))

    assert proposals == [
        IssueProposal(
            title="Fix login timeout",
            description="Users are logged out after 5 minutes.",
            reasoning="Reported twice, no open issue.",
            related_messages=["1700000000.000100"],
        )
    ]


def test_decode_bare_array_and_issues_wrapper():
    assert len(decode_proposals(json.dumps([PROPOSAL]))) == 1
    assert len(decode_proposals(json.dumps({"issues": [PROPOSAL]}))) == 1


def test_decode_tasks_wrapper_only_for_markdown():
    content = json.dumps({"tasks": [PROPOSAL]})

    assert decode_proposals(content) == []
    assert len(decode_proposals(content, MARKDOWN_WRAPPER_KEYS)) == 1


def test_decode_tolerates_garbage():
    assert decode_proposals(None) == []
    assert decode_proposals("I could not find anything") == []
    assert decode_proposals(json.dumps({"proposals": "none"})) == []
    assert decode_proposals(json.dumps([{"description": "no title"}, "text", PROPOSAL])) == [
        IssueProposal.from_dict(PROPOSAL)
    ]


def test_analyze_and_propose_sends_both_contexts():
    client = FakeOpenAI(json.dumps({"proposals": [PROPOSAL]}))
    analyzer = IssueAnalyzer(_settings(), client=client)

    proposals = analyzer.analyze_and_propose("slack text here", "issue text here")

    assert [p.title for p in proposals] == ["Fix login timeout"]
    call = client.completions.calls[0]
    assert call["model"] == "gpt-4o"
    assert call["temperature"] == 0.2
    assert call["response_format"] == {"type": "json_object"}
    assert call["messages"][0]["role"] == "system"
    assert "slack text here" in call["messages"][1]["content"]
    assert "issue text here" in call["messages"][1]["content"]


def test_language_selects_prompt():
    client = FakeOpenAI("[]")

    IssueAnalyzer(_settings("ja"), client=client).analyze_markdown("# notes")

    system = client.completions.calls[0]["messages"][0]["content"]
    assert "日本語" in system


def test_no_choices_yields_empty_list():
    analyzer = IssueAnalyzer(_settings(), client=FakeOpenAI(None))

    assert analyzer.analyze_and_propose("s", "i") == []


def test_interaction_log_records_exchange(temp_dir):
    log = InteractionLogWriter(temp_dir / "output")
    analyzer = IssueAnalyzer(_settings(), client=FakeOpenAI(json.dumps([PROPOSAL])), interaction_log=log)

    analyzer.analyze_markdown("# Sprint notes")

    lines = log.jsonl_path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[0])
    assert record["kind"] == "markdown"
    assert record["inputs"] == {"markdown": "# Sprint notes"}
    assert record["proposals"][0]["title"] == "Fix login timeout"
    readable = list((temp_dir / "output").glob("analysis_markdown_*.md"))
    assert len(readable) == 1
    assert "Fix login timeout" in readable[0].read_text(encoding="utf-8")
