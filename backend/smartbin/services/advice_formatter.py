"""Turn free-text disposal advice into display-ready HTML."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

logger = logging.getLogger(__name__)

BlockType = Literal["heading", "sectionTitle", "list", "para"]

NO_ADVICE_PROVIDED = "<p>No advice provided.</p>"
NO_ADVICE_GIVEN = "<p>No advice given.</p>"

_HEADING_RE = re.compile(r"^#{1,6}\s+(.*)")
_SECTION_TITLE_RE = re.compile(r"^[A-Za-z0-9 \-]{1,80}:$")
_LIST_ITEM_RE = re.compile(r"^(\d+[.)]|-|\*|•)\s+(.*)")
_ORDERED_MARKER_RE = re.compile(r"^\d+[.)]")
_TITLE_LIKE_RE = re.compile(r"^[A-Z][A-Za-z0-9 ,\-]{0,60}$")

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"_(.+?)_")

_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;", "`": "&#96;"}
)

RECYCLE_SYMBOL = "♻️"
DISPOSE_SYMBOL = "🗑️"
STEP_SYMBOL = "➡️"
WARNING_SYMBOL = "⚠️"
TIP_SYMBOL = "💡"

KEYWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(dispose|disposal|throw away|trash)\b", re.IGNORECASE), DISPOSE_SYMBOL),
    (re.compile(r"\b(recycle|recycling|recyclable)\b", re.IGNORECASE), RECYCLE_SYMBOL),
    (re.compile(r"\b(step|steps|how to|procedure)\b", re.IGNORECASE), STEP_SYMBOL),
    (re.compile(r"\b(warn|warning|danger|hazard)\b", re.IGNORECASE), WARNING_SYMBOL),
    (re.compile(r"\b(tip|tips|suggestion)\b", re.IGNORECASE), TIP_SYMBOL),
)

# First match wins; a section title carries at most one symbol.
SECTION_SYMBOL_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(recycle|recycling|recyclable)\b", re.IGNORECASE), RECYCLE_SYMBOL),
    (re.compile(r"\b(dispose|disposal|trash)\b", re.IGNORECASE), DISPOSE_SYMBOL),
    (re.compile(r"\b(tip|tips)\b", re.IGNORECASE), TIP_SYMBOL),
)


@dataclass(frozen=True, slots=True)
class AdviceBlock:
    """One structural unit of parsed advice text."""

    type: BlockType
    text: str = ""
    items: tuple[str, ...] = ()
    ordered: bool = False


def normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _is_structural(line: str) -> bool:
    """Return True when ``line`` starts a new list item, section title or heading."""

    return bool(
        _LIST_ITEM_RE.match(line) or _SECTION_TITLE_RE.match(line) or _HEADING_RE.match(line)
    )


def parse_blocks(text: Optional[str]) -> list[AdviceBlock]:
    """Split advice text into headings, section titles, lists and paragraphs.

    Lines are consumed in a single forward pass. When a line could start more
    than one kind of block, the order of precedence is heading, section title,
    list, paragraph.
    """

    if not text or not text.strip():
        return []

    lines = [line.strip() for line in text.split("\n")]
    blocks: list[AdviceBlock] = []
    index = 0

    while index < len(lines):
        line = lines[index]
        if not line:
            index += 1
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            blocks.append(AdviceBlock(type="heading", text=heading.group(1).strip()))
            index += 1
            continue

        if _SECTION_TITLE_RE.match(line):
            blocks.append(AdviceBlock(type="sectionTitle", text=line[:-1].strip()))
            index += 1
            continue

        first_item = _LIST_ITEM_RE.match(line)
        if first_item:
            ordered = bool(_ORDERED_MARKER_RE.match(first_item.group(1)))
            items: list[str] = []
            while index < len(lines):
                item = _LIST_ITEM_RE.match(lines[index])
                if not item:
                    break
                parts = [item.group(2).strip()]
                index += 1
                while index < len(lines) and lines[index] and not _is_structural(lines[index]):
                    parts.append(lines[index])
                    index += 1
                items.append(" ".join(parts).strip())
            blocks.append(AdviceBlock(type="list", items=tuple(items), ordered=ordered))
            continue

        parts = [line]
        index += 1
        while index < len(lines) and lines[index] and not _is_structural(lines[index]):
            parts.append(lines[index])
            index += 1
        blocks.append(AdviceBlock(type="para", text=" ".join(parts).strip()))

    return blocks


def escape_html(text: Optional[str]) -> str:
    return (text or "").translate(_ESCAPES)


def highlight_keywords(escaped: str) -> str:
    """Apply emphasis markers and keyword decoration to already escaped text.

    Each keyword rule runs over the output of the previous one, so a later
    rule may match inside markup inserted by an earlier rule. Running this
    function twice over the same text keeps adding decorations.
    """

    result = _BOLD_RE.sub(r"<strong>\1</strong>", escaped)
    result = _ITALIC_RE.sub(r"<em>\1</em>", result)
    for pattern, symbol in KEYWORD_RULES:
        result = pattern.sub(lambda match, symbol=symbol: f"{symbol} <strong>{match.group(0)}</strong>", result)
    return result


def _section_symbol(raw_title: str) -> str:
    for pattern, symbol in SECTION_SYMBOL_RULES:
        if pattern.search(raw_title):
            return symbol
    return ""


def _looks_like_title(text: str) -> bool:
    return len(text) < 70 and bool(_TITLE_LIKE_RE.match(text)) and not text.endswith(".")


def _render_inline(text: str) -> str:
    return highlight_keywords(escape_html(text))


def render_blocks(blocks: Sequence[AdviceBlock]) -> str:
    if not blocks:
        return NO_ADVICE_GIVEN

    html: list[str] = []
    for block in blocks:
        if block.type == "heading":
            html.append(f"<h4>{_render_inline(block.text)}</h4>")
        elif block.type == "sectionTitle":
            symbol = _section_symbol(block.text)
            html.append(f'<div class="section">{symbol} <strong>{_render_inline(block.text)}</strong></div>')
        elif block.type == "list":
            tag = "ol" if block.ordered else "ul"
            items = "".join(f"<li>{_render_inline(item)}</li>" for item in block.items)
            html.append(f"<{tag}>{items}</{tag}>")
        elif block.type == "para":
            if _looks_like_title(block.text):
                html.append(f"<h4>{_render_inline(block.text)}</h4>")
            else:
                html.append(f"<p>{_render_inline(block.text)}</p>")
        else:
            raise ValueError(f"Unknown advice block type: {block.type!r}")
    return "".join(html)


def format_advice(text: Optional[str]) -> str:
    """Return HTML for ``text``; never raises.

    Missing or empty input yields a fixed placeholder. If parsing or rendering
    fails the raw text is escaped and wrapped in a single paragraph.
    """

    if not text:
        return NO_ADVICE_PROVIDED
    try:
        return render_blocks(parse_blocks(normalize_text(text)))
    except Exception:
        logger.exception("Failed to format advice text; falling back to plain paragraph")
        try:
            return f"<p>{escape_html(str(text))}</p>"
        except Exception:
            return NO_ADVICE_PROVIDED


__all__ = [
    "AdviceBlock",
    "KEYWORD_RULES",
    "escape_html",
    "format_advice",
    "highlight_keywords",
    "normalize_text",
    "parse_blocks",
    "render_blocks",
]
