"""Prompt construction for activity summaries."""

from __future__ import annotations

from collections.abc import Sequence

from jinja2 import BaseLoader, Environment

from redsum.activity.models import ActivityRecord

ACTIVITIES_PLACEHOLDER = "{ACTIVITIES}"

_ACTIVITY_TEMPLATE = """{% for activity in activities %}
【アクティビティ {{ loop.index0 }}】
タイプ: {{ activity.activity_type.value }}
プロジェクト: {{ activity.project_name }}
課題ID: {{ activity.issue_id if activity.issue_id is not none else "なし" }}
課題タイトル: {{ activity.issue_subject }}
作成者: {{ activity.author }}
日時: {{ activity.created_at.strftime("%Y-%m-%d %H:%M:%S") }}
{% if activity.issue_description %}
説明: {{ activity.issue_description }}
{% endif %}
{% if activity.comment %}
コメント: {{ activity.comment }}
{% endif %}

{% endfor %}"""

_DEFAULT_PROMPT = """以下はRedmineプロジェクト管理システムからのアクティビティ情報です。このデータを分析して、最近のプロジェクト活動の要約を作成してください。

要約は以下の構造にしてください:
1. 全体的な活動の概要（追加された課題数、更新された課題数など）
2. 主要な進捗や変更点
3. 現在進行中の作業の状況
4. チームの協力やコミュニケーションに関する洞察

要約は簡潔で情報量が多く、マネージャーやチームメンバーが最近の活動を素早く理解できるものにしてください。Markdown形式で出力してください。

アクティビティデータ:
{{ activities_text }}

要約:
"""


class PromptBuilder:
    """Render activity records into the text sent to the backend."""

    def __init__(self) -> None:
        env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)
        self._activities = env.from_string(_ACTIVITY_TEMPLATE)
        self._default = env.from_string(_DEFAULT_PROMPT)

    def format_activities(self, records: Sequence[ActivityRecord]) -> str:
        return self._activities.render(activities=records)

    def build(self, records: Sequence[ActivityRecord], template: str | None = None) -> str:
        """Return the full prompt.

        A custom ``template`` has its ``{ACTIVITIES}`` placeholder replaced
        verbatim; a template without the placeholder is sent unchanged.
        """

        activities_text = self.format_activities(records)
        if template is not None:
            return template.replace(ACTIVITIES_PLACEHOLDER, activities_text)
        return self._default.render(activities_text=activities_text)


__all__ = ["ACTIVITIES_PLACEHOLDER", "PromptBuilder"]
