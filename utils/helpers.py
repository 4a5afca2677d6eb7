"""Helper utilities for rendering Stack Exchange content."""

import html
import re

from bs4 import BeautifulSoup


def html_to_text(body: str) -> str:
    """
    Convert an HTML post body into readable Markdown-ish text.

    Code blocks become fenced blocks, inline code keeps backticks and the
    remaining markup is stripped.
    """
    if not body:
        return ""

    soup = BeautifulSoup(body, "html.parser")

    for pre in soup.find_all("pre"):
        pre.replace_with(f"\n```\n{pre.get_text().rstrip()}\n```\n")
    for code in soup.find_all("code"):
        code.replace_with(f"`{code.get_text()}`")
    for br in soup.find_all("br"):
        br.replace_with("\n")

    text = soup.get_text()

    # Collapse runs of blank lines left behind by block elements
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def unescape_title(title: str) -> str:
    """Titles come back HTML-escaped (e.g. ``&#39;``)."""
    return html.unescape(title or "")
