"""
Response rendering for aggregated search results.

JSON mode is the full record sequence; parsing it back with
``ResultRecord.model_validate`` reproduces the records. Markdown mode is a
readable report with bodies converted from HTML.
"""

import json
from typing import List, Sequence

from models.config import ResponseFormat
from models.results import Comment, ResultRecord
from utils.helpers import html_to_text, unescape_title

__all__ = ["format_response", "render_markdown", "NO_RESULTS_MESSAGE"]

NO_RESULTS_MESSAGE = "No matching questions found."
ACCEPTED_MARK = "✓ "


def format_response(
    records: Sequence[ResultRecord],
    response_format: ResponseFormat = ResponseFormat.JSON,
) -> str:
    """Render records as JSON or Markdown."""
    if response_format == ResponseFormat.JSON:
        return json.dumps(
            [record.model_dump(mode="json", exclude_none=True) for record in records],
            indent=2,
            ensure_ascii=False,
        )
    return render_markdown(records)


def render_markdown(records: Sequence[ResultRecord]) -> str:
    if not records:
        return NO_RESULTS_MESSAGE
    return "\n\n".join(_render_record(record) for record in records)


def _render_record(record: ResultRecord) -> str:
    question = record.question
    comments = record.comments

    lines: List[str] = [
        f"# {unescape_title(question.title)}",
        "",
        f"**Score:** {question.score} | **Answers:** {question.answer_count}",
        "",
        "## Question",
        "",
        html_to_text(question.body),
        "",
    ]

    if comments is not None and comments.question:
        lines += ["### Question Comments", ""]
        lines += _render_comments(comments.question)
        lines.append("")

    lines += ["## Answers", ""]
    for answer in record.answers:
        mark = ACCEPTED_MARK if answer.is_accepted else ""
        lines += [
            f"### {mark}Answer (Score: {answer.score})",
            "",
            html_to_text(answer.body),
            "",
        ]

        answer_comments = (
            comments.answers.get(answer.answer_id) if comments is not None else None
        )
        if answer_comments:
            lines += ["#### Answer Comments", ""]
            lines += _render_comments(answer_comments)
            lines.append("")

    lines += ["---", "", f"[View on Stack Overflow]({question.link})"]
    return "\n".join(lines)


def _render_comments(comments: Sequence[Comment]) -> List[str]:
    return [f"- {html_to_text(c.body)} *(Score: {c.score})*" for c in comments]
