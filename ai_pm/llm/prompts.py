"""
Prompt templates for issue proposals.

Each template comes in Japanese ("ja") and English ("en"); callers pick one
with `get_prompt`.
"""

SLACK_SYSTEM_PROMPT = {
    "ja": "あなたはプロジェクト管理を支援するAIアシスタントです。Slackの会話を分析し、GitHub Issueの提案を行います。必ずJSON形式で、全ての内容を日本語で回答してください。",
    "en": "You are an AI assistant supporting project management. You analyze Slack conversations and propose GitHub Issues. You must respond in JSON format with all content in English.",
}

SLACK_ANALYSIS_PROMPT = {
    "ja": """以下のSlackの会話ログと既存のGitHub Issueを分析し、まだチケット化されていない重要な話題や課題を抽出してください。

## Slack会話ログ
{slack_messages}

## 既存のGitHub Issues
{existing_issues}

## タスク
1. 会話からバグ報告、新機能の提案、改善案、技術的な課題、TODO項目を抽出してください。
2. それぞれが既存のIssueでカバーされているか確認してください。
3. まだチケット化されていない話題についてIssue提案を作成してください。

## 出力形式
次の形式のJSONを返してください:
{{
  "proposals": [
    {{
      "title": "Issueのタイトル（簡潔に）",
      "description": "詳細説明（Markdown形式）",
      "relatedSlackMessages": ["関連するメッセージのタイムスタンプや引用"],
      "reasoning": "なぜこのIssueを作成すべきか"
    }}
  ]
}}

提案がない場合は "proposals" を空の配列にしてください。JSON以外のテキストは含めないでください。""",
    "en": """Analyze the following Slack conversation logs and existing GitHub Issues, and identify important topics that have not been ticketed yet.

## Slack Conversation Logs
{slack_messages}

## Existing GitHub Issues
{existing_issues}

## Tasks
1. Extract bug reports, feature proposals, improvement ideas, technical challenges and TODO items from the conversation.
2. Check whether each one is already covered by an existing Issue.
3. Create Issue proposals for the topics that are not ticketed yet.

## Output Format
Return JSON in the following format:
{{
  "proposals": [
    {{
      "title": "Issue title (concise)",
      "description": "Detailed description (Markdown)",
      "relatedSlackMessages": ["Timestamps or quotes of related messages"],
      "reasoning": "Why this Issue should be created"
    }}
  ]
}}

If there are no proposals, return an empty "proposals" array. Return only JSON.""",
}

MARKDOWN_SYSTEM_PROMPT = {
    "ja": "あなたはプロジェクト管理を支援するAIアシスタントです。Markdownの内容を分析し、匿名化した上でGitHub Issueの提案を行います。必ずJSON形式で、全ての内容を日本語で回答してください。",
    "en": "You are an AI assistant supporting project management. You analyze Markdown content, anonymize it, and propose GitHub Issues. You must respond in JSON format with all content in English.",
}

MARKDOWN_ANALYSIS_PROMPT = {
    "ja": """以下の手順で処理してください。

## ステップ1: 匿名化
- 個人名は Person A, Person B, ... に置換
- 組織名（会社名・チーム名）は Organization A, Organization B, ... に置換
- 技術用語・プロダクト名・OSS名は匿名化しない

## ステップ2: タスク分解
匿名化したテキストから、ストーリー（機能単位）レベルのタスクを抽出し、GitHub Issueとして起票できる形にしてください。

## 入力テキスト
{markdown}

## 出力形式
{{
  "tasks": [
    {{
      "title": "Issueタイトル（簡潔に）",
      "description": "詳細説明（Markdown形式、匿名化済み）",
      "reasoning": "なぜこのタスクが必要か"
    }}
  ]
}}

提案がない場合は "tasks" を空の配列にしてください。JSON以外のテキストは含めないでください。""",
    "en": """Process the input in two steps.

## Step 1: Anonymization
- Replace personal names with Person A, Person B, ...
- Replace organization names (companies, teams) with Organization A, Organization B, ...
- Do not anonymize technical terms, product names or OSS names

## Step 2: Task Decomposition
Extract story-level (feature-level) tasks from the anonymized text, each ready to be filed as a GitHub Issue.

## Input Text
{markdown}

## Output Format
{{
  "tasks": [
    {{
      "title": "Issue title (concise)",
      "description": "Detailed description (Markdown, anonymized)",
      "reasoning": "Why this task is necessary"
    }}
  ]
}}

If there are no tasks, return an empty "tasks" array. Return only JSON.""",
}


def get_prompt(template: dict, language: str) -> str:
    return template.get(language) or template["en"]
