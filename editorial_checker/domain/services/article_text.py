"""Preparation of article text before it is sent for verification."""

import re
from typing import Optional

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES = re.compile(r"\n{3,}")


def strip_html(html_content: str) -> str:
    """Strip tags and decode entities, keeping block boundaries as line breaks."""
    soup = BeautifulSoup(html_content or "", "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return soup.get_text(separator="\n")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces and blank lines."""
    lines = [_WHITESPACE.sub(" ", line).strip() for line in text.replace("\r\n", "\n").split("\n")]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def prepare_article(body: str, title: Optional[str] = None) -> str:
    """Build the plain-text article (title, blank line, body) the checker works on."""
    text = strip_html(body)
    if title:
        text = f"{strip_html(title)}\n\n{text}"
    return normalize_whitespace(text)
