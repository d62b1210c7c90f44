"""Markdown-lite to HTML substitution pipeline.

Every place that turns generated chapter text into HTML goes through
``format_content`` so preview and export stay identical. Input is escaped
first; the ordered substitutions then only ever introduce tags of their own.
"""

from __future__ import annotations

import html
import re

_H2 = re.compile(r"^## (.+)$", re.MULTILINE)
_H3 = re.compile(r"^### (.+)$", re.MULTILINE)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_LIST_ITEM = re.compile(r"^[*-] (.+)$", re.MULTILINE)
_LIST_RUN = re.compile(r"(?:<li>.*?</li>\n?)+")
_BLANK_LINES = re.compile(r"\n\s*\n")

_BLOCK_TAGS = ("<h2>", "<h3>", "<ul>")


def escape(text: str | None) -> str:
    """HTML-escape text for element content and attribute values."""
    if text is None:
        return ""
    return html.escape(str(text), quote=True)


def format_content(text: str | None) -> str:
    """Convert generated chapter text to an HTML fragment.

    Steps, in order: escape, ``## `` headings, ``### `` headings, ``**bold**``,
    ``* ``/``- `` list items, wrap consecutive items in one ``<ul>``, then
    blank-line separated blocks become paragraphs.
    """
    if not text or not text.strip():
        return ""

    result = html.escape(text.replace("\r\n", "\n"), quote=False)
    result = _H2.sub(r"<h2>\1</h2>", result)
    result = _H3.sub(r"<h3>\1</h3>", result)
    result = _BOLD.sub(r"<strong>\1</strong>", result)
    result = _LIST_ITEM.sub(r"<li>\1</li>", result)
    result = _LIST_RUN.sub(_wrap_list, result)

    blocks = [block.strip() for block in _BLANK_LINES.split(result)]
    return "\n".join(_paragraph(block) for block in blocks if block)


def _wrap_list(match: re.Match[str]) -> str:
    items = "".join(line for line in match.group(0).split("\n") if line)
    trailing = "\n" if match.group(0).endswith("\n") else ""
    return f"<ul>{items}</ul>{trailing}"


def _paragraph(block: str) -> str:
    """Wrap the inline lines of a block in <p>, leaving block-level tags alone."""
    out: list[str] = []
    inline: list[str] = []
    for line in block.split("\n"):
        line = line.strip()
        if not line:
            continue
        if line.startswith(_BLOCK_TAGS):
            if inline:
                out.append(f"<p>{'<br>'.join(inline)}</p>")
                inline = []
            out.append(line)
        else:
            inline.append(line)
    if inline:
        out.append(f"<p>{'<br>'.join(inline)}</p>")
    return "\n".join(out)
