"""
Markdown helpers built on markdown-it-py.

Only what the collectors need: the first heading of a document, used as
the display title of supplemental pages.
"""

from typing import Optional

from markdown_it import MarkdownIt


def first_heading(content: str, max_level: int = 2) -> Optional[str]:
    """
    Return the text of the first heading in a markdown document.

    Args:
        content: Markdown source
        max_level: Deepest heading level considered (``h1`` = 1)

    Returns:
        Heading text, or None when the document has no such heading
    """
    if not content or not content.strip():
        return None

    md = MarkdownIt()
    tokens = md.parse(content)

    for i, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        level = int(token.tag[1:]) if token.tag[1:].isdigit() else 6
        if level > max_level:
            continue
        # heading_open is followed by the inline token holding the text
        if i + 1 < len(tokens) and tokens[i + 1].type == "inline":
            text = _inline_text(tokens[i + 1])
            if text:
                return text
    return None


def _inline_text(token) -> str:
    """Plain text of an inline token, markup removed."""
    if not token.children:
        return (token.content or "").strip()
    parts = [
        child.content
        for child in token.children
        if child.type in ("text", "code_inline") and child.content
    ]
    return "".join(parts).strip()
